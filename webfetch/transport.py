"""Injectable HTTP transport.

Any async callable matching :class:`Transport` can be handed to
:func:`webfetch.query.fetch_page` or :class:`webfetch.fetcher.WebFetcher`;
both follow ``runtime_checkable`` ``Protocol`` contracts so test doubles need
no base class.  :class:`HttpxTransport` is the default.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

import httpx

from webfetch.errors import FetchError, FetchTimeoutError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol definitions
# ---------------------------------------------------------------------------

@runtime_checkable
class HeaderLookup(Protocol):
    def get(self, name: str) -> str | None:
        """Return the header value for *name*, or ``None``."""
        ...


@runtime_checkable
class TransportResponse(Protocol):
    """The slice of an HTTP response the pipeline relies on."""

    @property
    def ok(self) -> bool: ...

    @property
    def status(self) -> int: ...

    @property
    def status_text(self) -> str: ...

    @property
    def headers(self) -> HeaderLookup: ...

    async def text(self) -> str:
        """Return the full decoded body."""
        ...


@runtime_checkable
class Transport(Protocol):
    async def __call__(
        self,
        url: str,
        *,
        headers: Mapping[str, str],
        timeout: float,
    ) -> TransportResponse:
        """Issue a GET for *url*; *timeout* is in seconds."""
        ...


# ---------------------------------------------------------------------------
# httpx implementation
# ---------------------------------------------------------------------------

class HttpxResponse:
    """Adapts a fully-read :class:`httpx.Response` to :class:`TransportResponse`."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def ok(self) -> bool:
        return self._response.is_success

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def status_text(self) -> str:
        return self._response.reason_phrase

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    async def text(self) -> str:
        return self._response.text


class HttpxTransport:
    """GET requests through :class:`httpx.AsyncClient`.

    Args:
        client: Shared client to reuse.  When omitted, a short-lived client is
                opened for each request.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client

    async def __call__(
        self,
        url: str,
        *,
        headers: Mapping[str, str],
        timeout: float,
    ) -> HttpxResponse:
        try:
            if self._client is not None:
                response = await self._client.get(
                    url, headers=dict(headers), timeout=timeout, follow_redirects=True,
                )
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await client.get(url, headers=dict(headers), timeout=timeout)
        except httpx.TimeoutException as exc:
            logger.warning("timeout fetching %s", url)
            raise FetchTimeoutError(f"Timed out fetching {url}", url=url) from exc
        except httpx.HTTPError as exc:
            logger.warning("request error for %s: %s", url, exc)
            raise FetchError(f"Network error fetching {url}: {exc}", url=url) from exc
        return HttpxResponse(response)
