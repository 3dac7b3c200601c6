"""Extraction sub-package: content isolation, heading index, Markdown conversion."""

from .headings import Heading, build_toc, extract_headings, filter_by_headings
from .main_content import ExtractedContent, extract_main_content
from .markdown import html_to_markdown
from .urlnorm import to_raw_url

__all__ = [
    "ExtractedContent",
    "Heading",
    "build_toc",
    "extract_headings",
    "extract_main_content",
    "filter_by_headings",
    "html_to_markdown",
    "to_raw_url",
]
