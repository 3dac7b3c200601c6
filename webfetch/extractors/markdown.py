"""HTML fragment → Markdown conversion."""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Tag

from webfetch import settings

logger = logging.getLogger(__name__)

_BLANK_RUN_RE = re.compile(r"\n{3,}")
_TRAILING_SPACE_RE = re.compile(r"[ \t]+$", re.MULTILINE)

# Class prefixes used by common highlighters to tag a code block's language
_LANGUAGE_PREFIXES: tuple[str, ...] = ("language-", "lang-")


def html_to_markdown(html: str) -> str:
    """Convert an extracted fragment to Markdown.

    Headings follow ``settings.HEADING_STYLE`` (ATX ``#`` by default), bullets
    use ``-``, and ``<pre>`` blocks become fenced code carrying the language
    hint found on the block or its ``<code>`` child.  Trailing whitespace is
    stripped and runs of blank lines collapse to one.

    If markdownify fails on the fragment, its plain text is returned instead.
    """
    if not html or not html.strip():
        return ""

    try:
        from markdownify import markdownify  # type: ignore[import-untyped]

        md = markdownify(
            html,
            heading_style=settings.HEADING_STYLE,
            bullets=settings.BULLETS,
            code_language_callback=code_language,
        )
    except Exception as exc:
        logger.debug("markdownify failed, using plain text: %s", exc)
        md = BeautifulSoup(html, "lxml").get_text(separator="\n")

    md = _TRAILING_SPACE_RE.sub("", md)
    md = _BLANK_RUN_RE.sub("\n\n", md)
    return md.strip()


def code_language(el: object) -> str:
    """Return the language named by a ``language-*``/``lang-*`` class, or ``""``."""
    if not isinstance(el, Tag):
        return ""
    candidates = [el]
    child = el.find("code")
    if isinstance(child, Tag):
        candidates.append(child)
    for tag in candidates:
        for cls in tag.get("class") or []:
            for prefix in _LANGUAGE_PREFIXES:
                if cls.startswith(prefix):
                    return cls[len(prefix):]
    return ""
