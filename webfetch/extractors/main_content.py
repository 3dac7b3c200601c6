"""Main content extraction with a three-tier fallback chain.

Tier 1: readability-lxml   (Mozilla Readability algorithm)
Tier 2: content selectors  (first common container with enough text)
Tier 3: basic clean        (raw markup minus scripts, styles, comments)

Each tier is a strategy ``(SourcePage) -> ExtractedContent | None``.  The
first non-``None`` result wins; an exception inside a strategy counts as
``None``.  Tier 3 always produces a result.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import NamedTuple

from bs4 import BeautifulSoup, Tag

from webfetch import settings

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"

# readability-lxml's placeholder when the page has no <title>
_READABILITY_NO_TITLE = "[no-title]"

_SCRIPT_RE = re.compile(
    r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE,
)
_STYLE_RE = re.compile(
    r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE,
)
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)


class ExtractedContent(NamedTuple):
    html: str
    title: str
    method: str
    excerpt: str | None = None


class SourcePage(NamedTuple):
    """Raw markup plus its parsed tree, shared read-only by all strategies."""

    html: str
    soup: BeautifulSoup

    @property
    def title(self) -> str:
        """The document's ``<title>`` text, or :data:`UNTITLED`."""
        tag = self.soup.find("title")
        text = tag.get_text().strip() if tag else ""
        return text or UNTITLED

    @property
    def excerpt(self) -> str | None:
        for attrs in ({"property": "og:description"}, {"name": "description"}):
            meta = self.soup.find("meta", attrs=attrs)
            if isinstance(meta, Tag):
                content = str(meta.get("content") or "").strip()
                if content:
                    return content
        return None


Strategy = Callable[[SourcePage], ExtractedContent | None]


def parse_page(html: str) -> SourcePage:
    return SourcePage(html=html, soup=BeautifulSoup(html, "lxml"))


def _text_length(html: str) -> int:
    try:
        return len(BeautifulSoup(html, "lxml").get_text().strip())
    except Exception:
        return 0


# ---------------------------------------------------------------------------
# Tier 1: readability-lxml
# ---------------------------------------------------------------------------

def try_readability(page: SourcePage) -> ExtractedContent | None:
    from readability import Document  # type: ignore[import-untyped]

    # readability-lxml parses its own copy, leaving page.soup untouched
    doc = Document(page.html)
    content = doc.summary(html_partial=True)
    length = _text_length(content)
    if length <= settings.MIN_READABILITY_LENGTH:
        logger.debug("readability yielded only %d chars", length)
        return None

    title = (doc.short_title() or "").strip()
    if not title or title == _READABILITY_NO_TITLE:
        title = page.title
    return ExtractedContent(
        html=content,
        title=title,
        method="readability",
        excerpt=page.excerpt,
    )


# ---------------------------------------------------------------------------
# Tier 2: content-container selectors
# ---------------------------------------------------------------------------

def try_selectors(page: SourcePage) -> ExtractedContent | None:
    for selector in settings.CONTENT_SELECTORS:
        element = page.soup.select_one(selector)
        if not isinstance(element, Tag):
            continue
        if len(element.get_text().strip()) > settings.MIN_SELECTOR_LENGTH:
            return ExtractedContent(
                html=element.decode_contents(),
                title=page.title,
                method=f"selector:{selector}",
            )
    return None


# ---------------------------------------------------------------------------
# Tier 3: basic clean
# ---------------------------------------------------------------------------

def clean_html(html: str) -> str:
    """Strip ``<script>``, ``<style>`` and comment nodes from raw markup."""
    html = _SCRIPT_RE.sub("", html)
    html = _STYLE_RE.sub("", html)
    return _COMMENT_RE.sub("", html)


def basic_clean(page: SourcePage) -> ExtractedContent:
    """Terminal tier; never yields an empty fragment for a non-empty page."""
    cleaned = clean_html(page.html)
    if not cleaned.strip():
        cleaned = page.html
    return ExtractedContent(
        html=cleaned,
        title=page.title,
        method="basic-clean",
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

EXTRACTION_STRATEGIES: tuple[Strategy, ...] = (
    try_readability,
    try_selectors,
    basic_clean,
)


def run_strategies(
    page: SourcePage, strategies: tuple[Strategy, ...],
) -> ExtractedContent | None:
    """Return the first non-``None`` strategy result; failures count as ``None``."""
    for strategy in strategies:
        try:
            result = strategy(page)
        except Exception as exc:
            logger.debug("%s failed: %s", strategy.__name__, exc)
            continue
        if result is not None:
            return result
    return None


def extract_main_content(html: str) -> ExtractedContent:
    """Extract the main content from *html*.

    Returns an ExtractedContent namedtuple:
        html    - extracted HTML fragment
        title   - tier title, else document <title>, else "Untitled"
        method  - "readability" | "selector:<css>" | "basic-clean"
        excerpt - page description (readability tier only)
    """
    page = parse_page(html)
    result = run_strategies(page, EXTRACTION_STRATEGIES)
    if result is None:
        # basic_clean only fails if the regex pass itself raised
        result = ExtractedContent(html=html, title=UNTITLED, method="basic-clean")
    logger.debug("extracted %d chars of HTML via %s", len(result.html), result.method)
    return result
