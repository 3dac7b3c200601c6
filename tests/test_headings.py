"""Unit tests for the heading index, TOC builder, and section filter."""

from __future__ import annotations

from webfetch.extractors.headings import (
    Heading,
    build_toc,
    extract_headings,
    filter_by_headings,
    resolve_selector,
    section_span,
)

DOC = (
    "<h1>Guide</h1><p>intro</p>"
    "<h2>Install</h2><p>pip</p>"
    "<h3>From source</h3><p>clone</p>"
    "<h2>Usage</h2><p>run</p>"
    "<h1>Appendix</h1><p>notes</p>"
)


class TestExtractHeadings:
    def test_levels_and_text_in_order(self):
        headings = extract_headings(DOC)
        assert [(h.level, h.text) for h in headings] == [
            (1, "Guide"),
            (2, "Install"),
            (3, "From source"),
            (2, "Usage"),
            (1, "Appendix"),
        ]

    def test_positions_point_at_opening_tag(self):
        for heading in extract_headings(DOC):
            assert DOC.startswith(f"<h{heading.level}>", heading.position)

    def test_ignores_h4_and_deeper(self):
        html = "<h4>Deep</h4><h5>Deeper</h5><h2>Shallow</h2>"
        assert [h.text for h in extract_headings(html)] == ["Shallow"]

    def test_strips_nested_markup(self):
        html = '<h2 id="x"><a href="#x">Link <em>text</em></a></h2>'
        assert extract_headings(html)[0].text == "Link text"

    def test_collapses_whitespace_across_lines(self):
        html = "<h2>\n  Multi\n  line\n</h2>"
        assert extract_headings(html)[0].text == "Multi line"

    def test_skips_empty_headings(self):
        html = "<h1>  </h1><h2><span></span></h2><h2>Real</h2>"
        assert [h.text for h in extract_headings(html)] == ["Real"]

    def test_case_insensitive_tags(self):
        assert extract_headings("<H2>Upper</H2>")[0] == Heading(2, "Upper", 0)

    def test_no_headings(self):
        assert extract_headings("<p>plain</p>") == []


class TestBuildToc:
    def test_indents_by_level(self):
        toc = build_toc(extract_headings(DOC))
        assert toc == (
            "- Guide\n"
            "  - Install\n"
            "    - From source\n"
            "  - Usage\n"
            "- Appendix"
        )

    def test_none_when_empty(self):
        assert build_toc([]) is None


class TestResolveSelector:
    headings = extract_headings(DOC)

    def test_one_based_index(self):
        assert resolve_selector(self.headings, 1) == 0
        assert resolve_selector(self.headings, 5) == 4

    def test_index_out_of_range(self):
        assert resolve_selector(self.headings, 0) is None
        assert resolve_selector(self.headings, 6) is None
        assert resolve_selector(self.headings, -1) is None

    def test_case_insensitive_substring(self):
        assert resolve_selector(self.headings, "INSTALL") == 1
        assert resolve_selector(self.headings, "source") == 2

    def test_first_match_wins(self):
        headings = extract_headings("<h2>Setup A</h2><h2>Setup B</h2>")
        assert resolve_selector(headings, "setup") == 0

    def test_unmatched_text(self):
        assert resolve_selector(self.headings, "Missing") is None

    def test_bool_is_not_an_index(self):
        assert resolve_selector(self.headings, True) is None


class TestSectionSpan:
    headings = extract_headings(DOC)

    def test_stops_at_same_level(self):
        start, end = section_span(DOC, self.headings, 1)
        assert DOC[start:end] == "<h2>Install</h2><p>pip</p><h3>From source</h3><p>clone</p>"

    def test_includes_deeper_subsections(self):
        start, end = section_span(DOC, self.headings, 0)
        assert DOC[start:end].endswith("<h2>Usage</h2><p>run</p>")

    def test_last_section_runs_to_end(self):
        start, end = section_span(DOC, self.headings, 4)
        assert end == len(DOC)
        assert DOC[start:end] == "<h1>Appendix</h1><p>notes</p>"


class TestFilterByHeadings:
    headings = extract_headings(DOC)

    def test_single_text_selector(self):
        result = filter_by_headings(DOC, self.headings, ["Usage"])
        assert result.filtered
        assert result.html == "<h2>Usage</h2><p>run</p>"
        assert result.error is None

    def test_index_selector(self):
        result = filter_by_headings(DOC, self.headings, [3])
        assert result.html == "<h3>From source</h3><p>clone</p>"

    def test_selector_order_is_kept(self):
        result = filter_by_headings(DOC, self.headings, ["Usage", "Install"])
        assert result.html == (
            "<h2>Usage</h2><p>run</p>"
            "\n\n"
            "<h2>Install</h2><p>pip</p><h3>From source</h3><p>clone</p>"
        )

    def test_unmatched_selectors_ignored(self):
        result = filter_by_headings(DOC, self.headings, ["Nope", 99, "Appendix"])
        assert result.filtered
        assert result.html == "<h1>Appendix</h1><p>notes</p>"

    def test_no_match_reports_error(self):
        result = filter_by_headings(DOC, self.headings, ["Nope", 42])
        assert not result.filtered
        assert result.html == ""
        assert result.error == "No matching headings found"

    def test_sections_are_right_trimmed(self):
        html = "<h1>A</h1><p>a</p>\n\n   <h1>B</h1><p>b</p>"
        result = filter_by_headings(html, extract_headings(html), ["A"])
        assert result.html == "<h1>A</h1><p>a</p>"

    def test_refiltering_same_level_selection_is_stable(self):
        first = filter_by_headings(DOC, self.headings, ["Usage", "Appendix"])
        second = filter_by_headings(
            first.html, extract_headings(first.html), ["Usage", "Appendix"],
        )
        assert second.html == first.html
