"""Newline-aligned truncation of converted text."""

from __future__ import annotations

from typing import NamedTuple

from webfetch import settings


class Page(NamedTuple):
    markdown: str
    has_more: bool
    next_offset: int


def truncate_markdown(markdown: str, max_chars: int, offset: int = 0) -> Page:
    """Return the window of *markdown* starting at *offset*.

    The window holds at most *max_chars* characters.  When more text remains,
    the cut is moved back to the last newline if one falls within the final
    ``1 - NEWLINE_ALIGN_RATIO`` of the window, and the truncation marker is
    appended.  The slice itself is returned verbatim, so joining successive
    pages (markers removed) reproduces *markdown* exactly.

    An *offset* at or past the end yields an empty page with no more content.
    """
    start = max(offset, 0)
    if start >= len(markdown):
        return Page(markdown="", has_more=False, next_offset=start)

    if len(markdown) - start <= max_chars:
        return Page(markdown=markdown[start:], has_more=False, next_offset=len(markdown))

    end = start + max_chars
    last_newline = markdown.rfind("\n", start, end + 1)
    if last_newline > start + max_chars * settings.NEWLINE_ALIGN_RATIO:
        end = last_newline

    return Page(
        markdown=markdown[start:end] + settings.TRUNCATION_MARKER,
        has_more=True,
        next_offset=end,
    )


def strip_marker(page_markdown: str) -> str:
    """Remove a trailing truncation marker, if present."""
    marker = settings.TRUNCATION_MARKER
    if page_markdown.endswith(marker):
        return page_markdown[: -len(marker)]
    return page_markdown
