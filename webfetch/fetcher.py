"""webfetch.fetcher — High-level WebFetcher class.

Provides a stateful entry point that owns a continuation store (with its
background expiry sweep) and a transport, so repeated fetches and
continuations share both.

Usage::

    from webfetch import WebFetcher

    async with WebFetcher(max_chars=4000) as fetcher:
        result = await fetcher.fetch("https://example.com/blog/post")
        while result.continuation_token:
            result = await fetcher.resume(result.continuation_token)

    # Parse pre-fetched HTML (no network)
    result = fetcher.extract("<html><body>Content...</body></html>",
                             url="https://example.com")
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from types import TracebackType

import httpx

from webfetch import settings
from webfetch.cache import ContinuationStore
from webfetch.items import FetchResult
from webfetch.query import build_request, extract, run_request
from webfetch.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)


class WebFetcher:
    """Fetch-or-continue service with an owned continuation store.

    All parameters are optional.  Entering the instance as an async context
    manager (or calling :meth:`start`) launches the periodic expiry sweep;
    leaving it (or :meth:`close`) stops the sweep and closes the HTTP client
    the instance created for itself.

    Args:
        transport:           Async transport.  Defaults to an
                             :class:`~webfetch.transport.HttpxTransport` over
                             a client owned by this instance.
        store:               Continuation store to use instead of a private one.
        max_chars:           Default character budget per chunk.
        timeout_ms:          Default download timeout in milliseconds.
        user_agent:          Default User-Agent header value.
        max_body_size_bytes: Default body size limit.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        store: ContinuationStore | None = None,
        *,
        max_chars: int | None = None,
        timeout_ms: int | None = None,
        user_agent: str | None = None,
        max_body_size_bytes: int | None = None,
    ) -> None:
        self._client: httpx.AsyncClient | None = None
        if transport is None:
            self._client = httpx.AsyncClient(follow_redirects=True)
            transport = HttpxTransport(self._client)
        self._transport = transport
        self._store = store if store is not None else ContinuationStore()
        self._max_chars = max_chars if max_chars is not None else settings.DEFAULT_MAX_CHARS
        self._timeout_ms = timeout_ms
        self._user_agent = user_agent
        self._max_body_size_bytes = max_body_size_bytes

    @property
    def store(self) -> ContinuationStore:
        return self._store

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        self._store.start()

    async def close(self) -> None:
        await self._store.stop()
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> WebFetcher:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public methods
    # ------------------------------------------------------------------

    async def fetch(
        self,
        url: str | None = None,
        *,
        max_chars: int | None = None,
        headings: Sequence[str | int] | None = None,
        continuation_token: str | None = None,
        timeout_ms: int | None = None,
        user_agent: str | None = None,
        max_body_size_bytes: int | None = None,
    ) -> FetchResult:
        """Fetch *url*, or continue from *continuation_token*.

        Keyword arguments left as ``None`` take the constructor defaults.
        See :func:`webfetch.query.fetch_page` for the full contract.
        """
        request = build_request(
            url=url,
            max_chars=max_chars if max_chars is not None else self._max_chars,
            headings=list(headings) if headings is not None else None,
            continuation_token=continuation_token,
            timeout_ms=timeout_ms if timeout_ms is not None else self._timeout_ms,
            user_agent=user_agent or self._user_agent,
            max_body_size_bytes=(
                max_body_size_bytes
                if max_body_size_bytes is not None
                else self._max_body_size_bytes
            ),
        )
        return await run_request(request, transport=self._transport, store=self._store)

    async def resume(self, token: str, *, max_chars: int | None = None) -> FetchResult:
        """Return the next chunk for *token* without any network access."""
        return await self.fetch(continuation_token=token, max_chars=max_chars)

    def extract(
        self,
        html: str,
        *,
        url: str = "",
        max_chars: int | None = None,
        headings: Sequence[str | int] | None = None,
    ) -> FetchResult:
        """Run the pipeline over pre-fetched HTML without network access."""
        return extract(
            html,
            url=url,
            max_chars=max_chars if max_chars is not None else self._max_chars,
            headings=headings,
            store=self._store,
        )

    def clear_cache(self) -> None:
        """Drop every pending continuation held by this fetcher."""
        self._store.clear()
