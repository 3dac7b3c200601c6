"""Heading index, table of contents, and section filtering over HTML fragments.

Headings are found by pattern scanning the serialized fragment rather than
walking a DOM, so that every heading carries a character offset into the
exact string that is later sliced into sections.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import NamedTuple

logger = logging.getLogger(__name__)

# Opening and closing tag must be the same level; content is non-greedy
_HEADING_RE = re.compile(r"<h([1-3])\b[^>]*>(.*?)</h\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

SECTION_SEPARATOR = "\n\n"


class Heading(NamedTuple):
    level: int
    text: str
    position: int


class FilterResult(NamedTuple):
    html: str
    filtered: bool
    error: str | None = None


def extract_headings(html: str) -> list[Heading]:
    """Return the level 1-3 headings of *html* in document order.

    Nested markup is stripped from the heading text; headings whose text is
    empty after stripping are skipped.
    """
    headings: list[Heading] = []
    for match in _HEADING_RE.finditer(html):
        text = _TAG_RE.sub("", match.group(2))
        text = _WHITESPACE_RE.sub(" ", text).strip()
        if text:
            headings.append(Heading(int(match.group(1)), text, match.start()))
    return headings


def build_toc(headings: Sequence[Heading]) -> str | None:
    """Render an indented outline of *headings*, or ``None`` if there are none."""
    if not headings:
        return None
    return "\n".join(f"{'  ' * (h.level - 1)}- {h.text}" for h in headings)


def resolve_selector(headings: Sequence[Heading], selector: str | int) -> int | None:
    """Map a selector to a heading index.

    Integers are 1-based positions; strings match the first heading whose
    text contains them, case-insensitively.
    """
    if isinstance(selector, bool):
        return None
    if isinstance(selector, int):
        index = selector - 1
    else:
        needle = str(selector).lower()
        index = next(
            (i for i, h in enumerate(headings) if needle in h.text.lower()),
            -1,
        )
    if 0 <= index < len(headings):
        return index
    return None


def section_span(html: str, headings: Sequence[Heading], index: int) -> tuple[int, int]:
    """Return ``(start, end)`` of the section opened by ``headings[index]``.

    The section ends at the next heading of equal or shallower level, or at
    the end of *html*.
    """
    head = headings[index]
    end = len(html)
    for following in headings[index + 1:]:
        if following.level <= head.level:
            end = following.position
            break
    return head.position, end


def filter_by_headings(
    html: str,
    headings: Sequence[Heading],
    selectors: Sequence[str | int],
) -> FilterResult:
    """Concatenate the sections matched by *selectors*, in selector order.

    Selectors that match nothing are ignored.  When none match, the result
    carries an error and ``filtered=False``; callers fall back to *html*.
    """
    sections: list[str] = []
    for selector in selectors:
        index = resolve_selector(headings, selector)
        if index is None:
            logger.debug("heading selector %r matched nothing", selector)
            continue
        start, end = section_span(html, headings, index)
        sections.append(html[start:end].rstrip())

    if not sections:
        return FilterResult(html="", filtered=False, error="No matching headings found")
    return FilterResult(html=SECTION_SEPARATOR.join(sections), filtered=True)
