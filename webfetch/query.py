"""webfetch.query - fetch-or-continue API.

Basic usage::

    import asyncio
    from webfetch.query import fetch_page

    result = asyncio.run(fetch_page("https://example.com/blog/some-post", max_chars=4000))
    print(result.title)
    print(result.toc)
    print(result.markdown)

    # Long pages come back in chunks; redeem the token for the next one
    while result.continuation_token:
        result = asyncio.run(fetch_page(continuation_token=result.continuation_token))
        print(result.markdown)

Only selected sections::

    result = asyncio.run(fetch_page(url, headings=["Installation", 3]))

Low-level access (no network)::

    from webfetch.query import extract

    result = extract(html, url="https://example.com/blog/post")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from pydantic import ValidationError

from webfetch import settings
from webfetch.cache import ContinuationStore
from webfetch.errors import (
    BodyTooLargeError,
    FetchError,
    FetchTimeoutError,
    InvalidRequestError,
    UnsupportedContentTypeError,
    WebFetchError,
)
from webfetch.extractors.headings import build_toc, extract_headings, filter_by_headings
from webfetch.extractors.main_content import extract_main_content
from webfetch.extractors.markdown import html_to_markdown
from webfetch.extractors.urlnorm import extract_domain, has_supported_scheme, to_raw_url
from webfetch.items import FetchRequest, FetchResult, validate_max_chars
from webfetch.paginate import truncate_markdown
from webfetch.transport import HttpxTransport, Transport, TransportResponse

logger = logging.getLogger(__name__)

# Process-wide store used when callers do not bring their own
_default_store = ContinuationStore()


def default_store() -> ContinuationStore:
    return _default_store


def clear_cache() -> None:
    """Empty the process-wide continuation store."""
    _default_store.clear()


# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------

def _describe(exc: ValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        cause = (err.get("ctx") or {}).get("error")
        if cause is not None:
            parts.append(str(cause))
        else:
            loc = ".".join(str(p) for p in err["loc"]) or "request"
            parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def build_request(**fields: object) -> FetchRequest:
    """Build a :class:`FetchRequest`, omitting ``None`` fields so defaults apply.

    Raises:
        InvalidRequestError: On a missing URL/token or out-of-range values.
    """
    try:
        return FetchRequest(**{k: v for k, v in fields.items() if v is not None})
    except ValidationError as exc:
        raise InvalidRequestError(_describe(exc)) from exc


# ---------------------------------------------------------------------------
# Transport gates
# ---------------------------------------------------------------------------

def is_supported_content_type(content_type: str) -> bool:
    ct = content_type.lower()
    if any(accepted in ct for accepted in settings.ACCEPTED_CONTENT_TYPES):
        return True
    return any(fragment in ct for fragment in settings.ACCEPTED_CONTENT_TYPE_FRAGMENTS)


def _declared_length(response: TransportResponse) -> int | None:
    raw = response.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


async def _download(url: str, request: FetchRequest, transport: Transport) -> str:
    response = await transport(
        url,
        headers={"User-Agent": request.user_agent},
        timeout=request.timeout_ms / 1000,
    )
    if not response.ok:
        raise FetchError(
            f"HTTP {response.status} fetching {url}: {response.status_text}",
            url=url,
            status=response.status,
        )

    content_type = response.headers.get("content-type") or ""
    if not is_supported_content_type(content_type):
        raise UnsupportedContentTypeError(content_type, url=url, status=response.status)

    limit = request.max_body_size_bytes
    declared = _declared_length(response)
    if declared is not None and declared > limit:
        raise BodyTooLargeError(limit, url=url, status=response.status)

    body = await response.text()
    if len(body.encode("utf-8", errors="replace")) > limit:
        raise BodyTooLargeError(limit, url=url, status=response.status)
    if not body:
        raise FetchError(f"Empty response body from {url}", url=url, status=response.status)
    return body


async def fetch_body(url: str, request: FetchRequest, transport: Transport) -> str:
    """Fetch *url* and return its body, enforcing every transport gate.

    The request, status check, content-type gate, and body read all run
    under a single wall-clock timeout of ``request.timeout_ms``.

    Raises:
        FetchTimeoutError: The timeout elapsed; the transport call is cancelled.
        UnsupportedContentTypeError: The content type is not text-like.
        BodyTooLargeError: The body exceeds ``request.max_body_size_bytes``.
        FetchError: Non-success status, empty body, or network failure.
    """
    try:
        return await asyncio.wait_for(
            _download(url, request, transport), timeout=request.timeout_ms / 1000,
        )
    except TimeoutError as exc:
        logger.warning("timeout after %d ms fetching %s", request.timeout_ms, url)
        raise FetchTimeoutError(
            f"Timed out after {request.timeout_ms} ms fetching {url}", url=url,
        ) from exc
    except WebFetchError:
        raise
    except Exception as exc:
        logger.warning("transport failed for %s: %s", url, exc)
        raise FetchError(f"Network error fetching {url}: {exc}", url=url) from exc


# ---------------------------------------------------------------------------
# Pipeline (pure HTML → FetchResult, no network)
# ---------------------------------------------------------------------------

def extract(
    html: str,
    *,
    url: str = "",
    max_chars: int | None = None,
    headings: Sequence[str | int] | None = None,
    store: ContinuationStore | None = None,
) -> FetchResult:
    """Run extraction, filtering, conversion and pagination over *html*.

    When the converted text does not fit in *max_chars* and no heading filter
    took effect, the remainder is parked in *store* (the process-wide store
    by default) and the result carries a continuation token.

    Raises:
        InvalidRequestError: If *max_chars* is out of range.
    """
    if max_chars is None:
        max_chars = settings.DEFAULT_MAX_CHARS
    try:
        validate_max_chars(max_chars)
    except ValueError as exc:
        raise InvalidRequestError(str(exc)) from exc
    if store is None:
        store = _default_store

    content = extract_main_content(html)
    all_headings = extract_headings(content.html)
    toc = build_toc(all_headings)

    source_html = content.html
    filtered = False
    if headings:
        selection = filter_by_headings(content.html, all_headings, headings)
        if selection.filtered:
            source_html = selection.html
            filtered = True
        else:
            logger.debug("%s for %s; using full content", selection.error, url)

    markdown = html_to_markdown(source_html)
    page = truncate_markdown(markdown, max_chars, 0)

    token: str | None = None
    # TODO: filtered views never paginate, even when the selected sections
    # alone exceed max_chars; revisit once callers need chunked sections.
    if page.has_more and not filtered:
        token = store.create(
            full_markdown=markdown,
            offset=page.next_offset,
            source_url=url,
            title=content.title,
            method=content.method,
        ).key

    logger.debug(
        "extract: method=%s headings=%d filtered=%s chars=%d more=%s url=%s",
        content.method, len(all_headings), filtered, len(markdown), page.has_more, url,
    )
    return FetchResult(
        title=content.title,
        url=url,
        markdown=page.markdown,
        toc=toc,
        continuation_token=token,
        method=content.method,
    )


def resume(token: str, *, max_chars: int, store: ContinuationStore) -> FetchResult:
    """Serve the next chunk for *token* from *store*; no network access.

    A successful call that still leaves content mints a new token; the old
    one is left to expire.

    Raises:
        ContinuationError: If *token* is unknown or expired.
    """
    entry = store.get(token)
    page = truncate_markdown(entry.full_markdown, max_chars, entry.offset)
    next_token = store.advance(entry, page.next_offset).key if page.has_more else None
    logger.info(
        "continue: %s offset=%d->%d more=%s",
        entry.source_url, entry.offset, page.next_offset, page.has_more,
    )
    return FetchResult(
        title=entry.title,
        url=entry.source_url,
        markdown=page.markdown,
        toc=None,
        continuation_token=next_token,
        method=entry.method,
    )


# ---------------------------------------------------------------------------
# Main public API
# ---------------------------------------------------------------------------

async def run_request(
    request: FetchRequest,
    *,
    transport: Transport | None = None,
    store: ContinuationStore | None = None,
) -> FetchResult:
    """Serve a validated :class:`FetchRequest`.

    A request carrying a continuation token never touches the transport.
    """
    if store is None:
        store = _default_store

    if request.continuation_token:
        return resume(request.continuation_token, max_chars=request.max_chars, store=store)

    url = request.url or ""
    if transport is None:
        transport = HttpxTransport()
    if not callable(transport):
        raise InvalidRequestError("Fetch transport is not available.")
    if not has_supported_scheme(url):
        raise InvalidRequestError(f"Unsupported URL scheme in {url!r}")

    effective_url = to_raw_url(url)
    if effective_url != url:
        logger.debug("rewrote %s -> %s", url, effective_url)
    logger.info("fetch: %s (domain=%s)", url, extract_domain(effective_url))

    body = await fetch_body(effective_url, request, transport)
    return extract(
        body,
        url=url,
        max_chars=request.max_chars,
        headings=request.headings,
        store=store,
    )


async def fetch_page(
    url: str | None = None,
    *,
    max_chars: int | None = None,
    headings: Sequence[str | int] | None = None,
    continuation_token: str | None = None,
    timeout_ms: int | None = None,
    user_agent: str | None = None,
    max_body_size_bytes: int | None = None,
    transport: Transport | None = None,
    store: ContinuationStore | None = None,
) -> FetchResult:
    """Fetch *url* (or continue from *continuation_token*) and return a chunk.

    This is the primary one-call API.

    Args:
        url:                 HTTP/HTTPS URL; required unless a token is given.
        max_chars:           Character budget per chunk, 200-200000
                             (default 10000).
        headings:            Heading selectors: 1-based positions or
                             case-insensitive substrings.  Matching sections
                             replace the full content; continuation is then
                             disabled.
        continuation_token:  Token from a previous truncated result.
        timeout_ms:          Wall-clock limit for the download (default 15000).
        user_agent:          User-Agent header value.
        max_body_size_bytes: Largest accepted body (default 10 MiB).
        transport:           Async transport; defaults to :class:`HttpxTransport`.
        store:               Continuation store; defaults to the process-wide
                             store, which is swept on each call.

    Returns:
        :class:`~webfetch.items.FetchResult` instance.

    Raises:
        :class:`~webfetch.errors.InvalidRequestError`: Bad input, before any I/O.
        :class:`~webfetch.errors.FetchError`: Transport, status, content-type,
            size, or timeout failures.
        :class:`~webfetch.errors.ContinuationError`: Unknown or expired token.
    """
    request = build_request(
        url=url,
        max_chars=max_chars,
        headings=list(headings) if headings is not None else None,
        continuation_token=continuation_token,
        timeout_ms=timeout_ms,
        user_agent=user_agent,
        max_body_size_bytes=max_body_size_bytes,
    )
    if store is None:
        store = _default_store
        if not store.running:
            store.sweep()
    return await run_request(request, transport=transport, store=store)
