"""webfetch - fetch a web page's main content as Markdown, in bounded chunks.

Quick single-URL usage::

    import asyncio
    from webfetch import fetch_page

    result = asyncio.run(fetch_page("https://example.com/blog/some-post"))
    print(result.title)
    print(result.toc)
    print(result.markdown)

Long pages::

    from webfetch import WebFetcher

    async with WebFetcher(max_chars=2000) as fetcher:
        result = await fetcher.fetch("https://example.com/docs/guide")
        while result.continuation_token:
            result = await fetcher.resume(result.continuation_token)

Continuation tokens are opaque, single-process handles that expire after five
minutes; an expired or unknown token raises :class:`ContinuationError`.
"""

from webfetch.cache import ContinuationStore
from webfetch.errors import (
    BodyTooLargeError,
    ContinuationError,
    FetchError,
    FetchTimeoutError,
    InvalidRequestError,
    UnsupportedContentTypeError,
    WebFetchError,
)
from webfetch.fetcher import WebFetcher
from webfetch.items import FetchRequest, FetchResult
from webfetch.query import clear_cache, extract, fetch_page
from webfetch.transport import HttpxTransport, Transport, TransportResponse

__version__ = "0.1.0"
__all__ = [
    "BodyTooLargeError",
    "ContinuationError",
    "ContinuationStore",
    "FetchError",
    "FetchRequest",
    "FetchResult",
    "FetchTimeoutError",
    "HttpxTransport",
    "InvalidRequestError",
    "Transport",
    "TransportResponse",
    "UnsupportedContentTypeError",
    "WebFetchError",
    "WebFetcher",
    "clear_cache",
    "extract",
    "fetch_page",
]
