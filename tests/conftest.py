"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

from webfetch.cache import ContinuationStore
from webfetch.query import clear_cache

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def article_html() -> str:
    return _read_fixture("article.html")


@pytest.fixture
def sections_html() -> str:
    return _read_fixture("sections.html")


@pytest.fixture
def docs_html() -> str:
    return _read_fixture("docs.html")


@pytest.fixture(autouse=True)
def _empty_default_store():
    clear_cache()
    yield
    clear_cache()


# ---------------------------------------------------------------------------
# Transport doubles
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(
        self,
        body: str,
        content_type: str | None = "text/html; charset=utf-8",
        status: int = 200,
        status_text: str = "OK",
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._body = body
        self.status = status
        self.status_text = status_text
        self.headers: dict[str, str] = {k.lower(): v for k, v in (headers or {}).items()}
        if content_type is not None:
            self.headers["content-type"] = content_type
        self.text_calls = 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    async def text(self) -> str:
        self.text_calls += 1
        return self._body


class FakeTransport:
    """Records every call and answers with a canned response."""

    def __init__(self, response: FakeResponse) -> None:
        self.response = response
        self.calls: list[dict] = []

    async def __call__(self, url: str, *, headers: Mapping[str, str], timeout: float):
        self.calls.append({"url": url, "headers": dict(headers), "timeout": timeout})
        return self.response


class FailingTransport:
    """Fails the test if the pipeline ever reaches the network."""

    async def __call__(self, url: str, *, headers: Mapping[str, str], timeout: float):
        raise AssertionError(f"transport should not be called (got {url})")


@pytest.fixture
def make_transport() -> Callable[..., FakeTransport]:
    def _make(body: str, **response_kwargs) -> FakeTransport:
        return FakeTransport(FakeResponse(body, **response_kwargs))

    return _make


@pytest.fixture
def failing_transport() -> FailingTransport:
    return FailingTransport()


# ---------------------------------------------------------------------------
# Continuation store with a controllable clock
# ---------------------------------------------------------------------------

class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> ContinuationStore:
    return ContinuationStore(ttl=300.0, sweep_interval=60.0, clock=clock)
