"""Tests for the WebFetcher service class and the httpx transport."""

from __future__ import annotations

import httpx
import pytest

from webfetch import WebFetcher
from webfetch.cache import ContinuationStore
from webfetch.errors import (
    ContinuationError,
    FetchError,
    FetchTimeoutError,
    InvalidRequestError,
)
from webfetch.paginate import strip_marker
from webfetch.transport import HttpxResponse, HttpxTransport, Transport, TransportResponse

URL = "https://example.com/page"


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _html_handler(html: str, seen: list[httpx.Request] | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(200, headers={"content-type": "text/html"}, text=html)

    return handler


# ---------------------------------------------------------------------------
# HttpxTransport
# ---------------------------------------------------------------------------

class TestHttpxTransport:
    def test_satisfies_protocol(self):
        assert isinstance(HttpxTransport(), Transport)

    async def test_adapts_response(self, sections_html):
        async with _mock_client(_html_handler(sections_html)) as client:
            response = await HttpxTransport(client)(URL, headers={}, timeout=1.0)
        assert isinstance(response, HttpxResponse)
        assert isinstance(response, TransportResponse)
        assert response.ok
        assert response.status == 200
        assert response.status_text == "OK"
        assert response.headers.get("Content-Type") == "text/html"
        assert await response.text() == sections_html

    async def test_sends_headers(self, sections_html):
        seen: list[httpx.Request] = []
        async with _mock_client(_html_handler(sections_html, seen)) as client:
            await HttpxTransport(client)(URL, headers={"User-Agent": "UA/2"}, timeout=1.0)
        assert seen[0].headers["user-agent"] == "UA/2"

    async def test_follows_redirects(self, sections_html):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(301, headers={"location": "https://example.com/new"})
            return httpx.Response(200, headers={"content-type": "text/html"}, text=sections_html)

        async with _mock_client(handler) as client:
            response = await HttpxTransport(client)(
                "https://example.com/old", headers={}, timeout=1.0,
            )
        assert response.status == 200

    async def test_error_status_is_not_raised(self):
        async with _mock_client(lambda r: httpx.Response(503)) as client:
            response = await HttpxTransport(client)(URL, headers={}, timeout=1.0)
        assert not response.ok
        assert response.status == 503
        assert response.status_text == "Service Unavailable"

    async def test_timeout_mapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        async with _mock_client(handler) as client:
            with pytest.raises(FetchTimeoutError):
                await HttpxTransport(client)(URL, headers={}, timeout=1.0)

    async def test_connect_error_mapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _mock_client(handler) as client:
            with pytest.raises(FetchError, match="refused") as exc_info:
                await HttpxTransport(client)(URL, headers={}, timeout=1.0)
        assert exc_info.value.url == URL


# ---------------------------------------------------------------------------
# WebFetcher
# ---------------------------------------------------------------------------

class TestWebFetcher:
    async def test_fetch_through_httpx(self, sections_html):
        async with _mock_client(_html_handler(sections_html)) as client:
            async with WebFetcher(HttpxTransport(client)) as fetcher:
                result = await fetcher.fetch(URL)
        assert result.title == "Example"
        assert result.toc == "- Section A\n- Section B"

    async def test_constructor_defaults_apply(self, sections_html, make_transport):
        transport = make_transport(sections_html)
        fetcher = WebFetcher(transport, timeout_ms=1234, user_agent="Custom/1")
        await fetcher.fetch(URL)
        call = transport.calls[0]
        assert call["timeout"] == pytest.approx(1.234)
        assert call["headers"]["User-Agent"] == "Custom/1"

    async def test_per_call_overrides(self, sections_html, make_transport):
        transport = make_transport(sections_html)
        fetcher = WebFetcher(transport, user_agent="Custom/1")
        await fetcher.fetch(URL, user_agent="Other/2")
        assert transport.calls[0]["headers"]["User-Agent"] == "Other/2"

    async def test_resume_walks_whole_page(self, article_html, make_transport):
        transport = make_transport(article_html)
        async with WebFetcher(transport, max_chars=200) as fetcher:
            results = [await fetcher.fetch(URL)]
            while results[-1].continuation_token:
                results.append(await fetcher.resume(results[-1].continuation_token))
            full = fetcher.extract(article_html, url=URL, max_chars=200_000)
        assert len(transport.calls) == 1
        assert len(results) > 1
        assert "".join(strip_marker(r.markdown) for r in results) == full.markdown

    async def test_tokens_scoped_to_store(self, article_html, make_transport):
        first = WebFetcher(make_transport(article_html), max_chars=200)
        second = WebFetcher(make_transport(article_html), max_chars=200)
        result = await first.fetch(URL)
        with pytest.raises(ContinuationError):
            await second.resume(result.continuation_token)

    async def test_shared_store(self, article_html, make_transport):
        store = ContinuationStore()
        first = WebFetcher(make_transport(article_html), store, max_chars=200)
        second = WebFetcher(make_transport(article_html), store, max_chars=200)
        result = await first.fetch(URL)
        assert (await second.resume(result.continuation_token)).markdown

    async def test_clear_cache(self, article_html, make_transport):
        fetcher = WebFetcher(make_transport(article_html), max_chars=200)
        result = await fetcher.fetch(URL)
        fetcher.clear_cache()
        assert len(fetcher.store) == 0
        with pytest.raises(ContinuationError):
            await fetcher.resume(result.continuation_token)

    async def test_bool_heading_selector_rejected(self, failing_transport):
        fetcher = WebFetcher(failing_transport)
        with pytest.raises(InvalidRequestError):
            await fetcher.fetch(URL, headings=[False])

    def test_extract_without_network(self, sections_html, failing_transport):
        fetcher = WebFetcher(failing_transport)
        result = fetcher.extract(sections_html, url=URL, headings=["Section A"])
        assert "Hello A" in result.markdown
        assert "Hello B" not in result.markdown

    async def test_context_manager_runs_sweep(self, make_transport):
        fetcher = WebFetcher(make_transport("<p>x</p>"))
        async with fetcher:
            assert fetcher.store.running
        assert not fetcher.store.running

    async def test_closes_owned_client(self):
        fetcher = WebFetcher()
        client = fetcher._client
        assert client is not None
        async with fetcher:
            pass
        assert client.is_closed
        assert fetcher._client is None

    async def test_leaves_injected_client_open(self, sections_html):
        client = _mock_client(_html_handler(sections_html))
        async with WebFetcher(HttpxTransport(client)):
            pass
        assert not client.is_closed
        await client.aclose()
