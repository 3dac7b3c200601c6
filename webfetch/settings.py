"""Project settings for webfetch.

Every value can be overridden with a ``WEBFETCH_<NAME>`` environment variable,
read once at import time.  Code that validates against these limits reads the
module attribute at call time, so tests may monkeypatch them.
"""

from __future__ import annotations

import os


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(f"WEBFETCH_{name}", "").strip()
    return int(raw) if raw.lstrip("-").isdigit() else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(f"WEBFETCH_{name}", "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Request limits
# ---------------------------------------------------------------------------
DEFAULT_MAX_CHARS = _env_int("DEFAULT_MAX_CHARS", 10_000)
MIN_MAX_CHARS = _env_int("MIN_MAX_CHARS", 200)
MAX_CHARS_LIMIT = _env_int("MAX_CHARS_LIMIT", 200_000)

DEFAULT_TIMEOUT_MS = _env_int("DEFAULT_TIMEOUT_MS", 15_000)
DEFAULT_MAX_BODY_SIZE = _env_int("DEFAULT_MAX_BODY_SIZE", 10 * 1024 * 1024)

# ---------------------------------------------------------------------------
# User-agent
# ---------------------------------------------------------------------------
DEFAULT_USER_AGENT = os.getenv(
    "WEBFETCH_USER_AGENT",
    "Mozilla/5.0 (compatible; WebFetch/1.0; +https://github.com/user/webfetch)",
)

# ---------------------------------------------------------------------------
# Content-type gate
# ---------------------------------------------------------------------------
# Exact types accepted first; any type containing one of the generic
# fragments is accepted as a fallback.
ACCEPTED_CONTENT_TYPES: tuple[str, ...] = (
    "text/html",
    "application/xhtml+xml",
    "text/plain",
)
ACCEPTED_CONTENT_TYPE_FRAGMENTS: tuple[str, ...] = ("text", "json", "xml")

# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------
MIN_READABILITY_LENGTH = _env_int("MIN_READABILITY_LENGTH", 300)
MIN_SELECTOR_LENGTH = _env_int("MIN_SELECTOR_LENGTH", 300)

# Probed in order by the selector tier
CONTENT_SELECTORS: tuple[str, ...] = (
    "main",
    "article",
    "#content",
    ".content",
    ".main",
)

# ---------------------------------------------------------------------------
# Markdown conversion
# ---------------------------------------------------------------------------
HEADING_STYLE = os.getenv("WEBFETCH_HEADING_STYLE", "ATX")
BULLETS = "-"

# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------
# A cut is moved back to the last newline when that newline lies past this
# fraction of the window.
NEWLINE_ALIGN_RATIO = _env_float("NEWLINE_ALIGN_RATIO", 0.8)
TRUNCATION_MARKER = "\n\n[... Truncated ...]"

# ---------------------------------------------------------------------------
# Continuation cache (in-process only)
# ---------------------------------------------------------------------------
CACHE_TTL_SECONDS = _env_float("CACHE_TTL_SECONDS", 300.0)
CACHE_SWEEP_INTERVAL_SECONDS = _env_float("CACHE_SWEEP_INTERVAL_SECONDS", 60.0)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.getenv("WEBFETCH_LOG_LEVEL", "INFO")
