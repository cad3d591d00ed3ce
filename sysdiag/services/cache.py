"""
In-memory report cache with one entry per operation.

A fresh entry is returned as-is, including the timestamp it was built with: callers
that need newer data wait out the TTL. Concurrent misses on the same key are
coalesced so only one expensive computation runs at a time.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import structlog
from cachetools import TLRUCache

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    computed_at: float
    ttl_seconds: float


def _expires_at(_key: str, entry: CacheEntry, _now: float) -> float:
    return entry.computed_at + entry.ttl_seconds


class ReportCache:
    """
    Process-scoped cache keyed by operation name.

    Each entry carries its own TTL, counted from when its computation started.
    The clock is injectable so tests can move time forward without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, maxsize: int = 64) -> None:
        self._clock = clock
        self._entries: TLRUCache[str, CacheEntry] = TLRUCache(
            maxsize=maxsize, ttu=_expires_at, timer=clock
        )
        self._locks: dict[str, asyncio.Lock] = {}
        self.logger = logger.bind(component="report_cache")

    def get_fresh(self, key: str) -> Any | None:
        """Return the cached value if its entry has not expired."""
        entry = self._entries.get(key)
        return None if entry is None else entry.value

    def put(
        self, key: str, value: Any, ttl_seconds: float, computed_at: float | None = None
    ) -> None:
        if computed_at is None:
            computed_at = self._clock()
        # An entry already past its expiry is dropped by the cache on insert.
        self._entries[key] = CacheEntry(value=value, computed_at=computed_at, ttl_seconds=ttl_seconds)

    async def get_or_compute(
        self, key: str, ttl_seconds: float, compute: Callable[[], Awaitable[T]]
    ) -> T:
        """Serve from cache when fresh, otherwise compute once and store."""
        cached = self.get_fresh(key)
        if cached is not None:
            self.logger.debug("report_cache_hit", key=key)
            return cached

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            # Another caller may have filled the entry while we waited.
            cached = self.get_fresh(key)
            if cached is not None:
                self.logger.debug("report_cache_hit_after_wait", key=key)
                return cached

            self.logger.debug("report_cache_miss", key=key)
            started = self._clock()
            value = await compute()
            self.put(key, value, ttl_seconds, computed_at=started)
            return value

    def clear(self) -> None:
        self._entries.clear()
