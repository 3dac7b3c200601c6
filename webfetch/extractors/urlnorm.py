"""URL rewriting applied before fetch."""

from __future__ import annotations

from urllib.parse import urlparse

# Code hosts whose "blob" viewer pages have a raw-content equivalent
_RAW_CONTENT_HOSTS: dict[str, str] = {
    "github.com": "raw.githubusercontent.com",
}

_SUPPORTED_SCHEMES: frozenset[str] = frozenset({"http", "https"})


def to_raw_url(url: str) -> str:
    """Return the raw-content URL for a code-host blob view, else *url* unchanged.

    Example:
        https://github.com/user/repo/blob/main/README.md
            → https://raw.githubusercontent.com/user/repo/main/README.md

    Malformed URLs are returned as-is; validation is the transport's job.
    """
    try:
        parsed = urlparse(url)
        host = parsed.hostname or ""
    except (ValueError, AttributeError):
        return url

    raw_host = _RAW_CONTENT_HOSTS.get(host)
    if raw_host is None:
        return url

    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 4 or parts[2] != "blob":
        return url

    user, repo, _, branch = parts[:4]
    file_path = "/".join(parts[4:])
    return f"https://{raw_host}/{user}/{repo}/{branch}/{file_path}"


def has_supported_scheme(url: str) -> bool:
    """Return True if *url* uses a scheme the default transports can fetch."""
    try:
        return urlparse(url).scheme.lower() in _SUPPORTED_SCHEMES
    except (ValueError, AttributeError):
        return False


def extract_domain(url: str) -> str:
    """Return the netloc (host) component of a URL, lowercased."""
    try:
        return urlparse(url).netloc.lower()
    except (ValueError, AttributeError):
        return ""
