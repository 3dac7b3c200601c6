"""In-process, time-expiring store of paused pagination state.

Tokens are opaque capabilities: a random-salted digest with no meaning a
caller can forge or parse.  They live only in this process's memory and
do not survive a restart; they are not meant to be persisted or shared
across processes.
"""

from __future__ import annotations

import asyncio
import contextlib
import hashlib
import logging
import secrets
import threading
import time
from collections.abc import Callable

from webfetch import settings
from webfetch.errors import ContinuationError
from webfetch.items import ContinuationEntry

logger = logging.getLogger(__name__)


def new_token(url: str, offset: int) -> str:
    """Mint a fresh key for *url* at *offset*.

    Folding a nanosecond timestamp and a random salt into the digest keeps
    keys distinct across repeated calls for the same URL and offset.
    """
    seed = f"{url}:continuation:{offset}:{time.time_ns()}:{secrets.token_hex(8)}"
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()[:32]


class ContinuationStore:
    """Key → :class:`~webfetch.items.ContinuationEntry` map with TTL eviction.

    Expiry is enforced twice: :meth:`get` treats entries older than the TTL
    as absent, and :meth:`sweep` (run periodically by the task started with
    :meth:`start`) deletes them.

    Args:
        ttl:            Seconds an entry stays redeemable (default 300).
        sweep_interval: Seconds between background sweeps (default 60).
        clock:          Monotonic time source; injectable for tests.
    """

    def __init__(
        self,
        ttl: float | None = None,
        sweep_interval: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = settings.CACHE_TTL_SECONDS if ttl is None else ttl
        self._sweep_interval = (
            settings.CACHE_SWEEP_INTERVAL_SECONDS if sweep_interval is None else sweep_interval
        )
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, ContinuationEntry] = {}
        self._task: asyncio.Task[None] | None = None

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def running(self) -> bool:
        """True while the background sweep task is alive."""
        return self._task is not None and not self._task.done()

    def now(self) -> float:
        return self._clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    # ------------------------------------------------------------------
    # Entry operations
    # ------------------------------------------------------------------

    def create(
        self,
        *,
        full_markdown: str,
        offset: int,
        source_url: str,
        title: str,
        method: str,
    ) -> ContinuationEntry:
        """Build an entry under a freshly minted key and store it."""
        entry = ContinuationEntry(
            key=new_token(source_url, offset),
            full_markdown=full_markdown,
            offset=offset,
            source_url=source_url,
            title=title,
            method=method,
            created_at=self.now(),
        )
        self.put(entry)
        return entry

    def advance(self, entry: ContinuationEntry, offset: int) -> ContinuationEntry:
        """Store a copy of *entry* at *offset* under a new key.

        The original entry is left in place to expire on its own.
        """
        return self.create(
            full_markdown=entry.full_markdown,
            offset=offset,
            source_url=entry.source_url,
            title=entry.title,
            method=entry.method,
        )

    def put(self, entry: ContinuationEntry) -> None:
        with self._lock:
            self._entries[entry.key] = entry

    def get(self, key: str) -> ContinuationEntry:
        """Return the live entry for *key*.

        Raises:
            ContinuationError: if *key* is unknown, was swept, or is past TTL.
        """
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or self._expired(entry, self.now()):
            raise ContinuationError(key)
        return entry

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep(self, now: float | None = None) -> int:
        """Delete every entry older than the TTL; return how many were removed."""
        now = self.now() if now is None else now
        with self._lock:
            stale = [k for k, e in self._entries.items() if self._expired(e, now)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("continuation sweep evicted %d entries", len(stale))
        return len(stale)

    def _expired(self, entry: ContinuationEntry, now: float) -> bool:
        return now - entry.created_at > self._ttl

    # ------------------------------------------------------------------
    # Background sweep lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the periodic sweep on the running event loop (idempotent)."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._sweep_forever(), name="webfetch-continuation-sweep",
        )

    async def stop(self) -> None:
        """Cancel the periodic sweep and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()
