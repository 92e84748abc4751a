"""Result caching and in-flight request de-duplication for searches."""

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Awaitable, Callable, Hashable, Optional, TypeVar

from finditfast.core.models import Coordinates, SearchResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

CacheKey = tuple[str, Optional[tuple[float, float]]]


def normalize_query(query: str) -> str:
    return query.strip().lower()


def make_cache_key(query: str, location: Optional[Coordinates] = None) -> CacheKey:
    """Key a search by its normalised text and, when given, the user's location."""
    return (normalize_query(query), location.as_tuple() if location else None)


@dataclass
class CacheEntry:
    key: CacheKey
    value: list[SearchResult]
    created_at: float


class ResultCache:
    """Time- and size-bounded store of ranked search results.

    Expired entries are removed lazily by ``get`` and by ``set``. When the
    entry count exceeds ``max_entries`` the oldest-created entries go first.
    All methods are synchronous, so no other coroutine can interleave with an
    insert or an eviction.

    ``clear`` bumps ``generation``. A writer that captured the generation
    before awaiting upstream passes it to ``set``; the write is dropped if
    the cache was cleared in the meantime.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, CacheEntry]" = OrderedDict()
        self._generation = 0

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at > self.ttl_seconds

    def get(self, query: str, location: Optional[Coordinates] = None) -> Optional[list[SearchResult]]:
        """Return cached results, or None on a miss or an expired entry."""
        key = make_cache_key(query, location)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            logger.debug("Cache entry expired for %r", key)
            return None
        return list(entry.value)

    @property
    def generation(self) -> int:
        return self._generation

    def set(
        self,
        query: str,
        location: Optional[Coordinates],
        value: list[SearchResult],
        generation: Optional[int] = None,
    ) -> bool:
        """Store results. Returns False if the write was dropped as stale."""
        key = make_cache_key(query, location)
        if generation is not None and generation != self._generation:
            logger.debug("Dropped stale cache write for %r", key)
            return False
        now = self._clock()
        # Re-inserting moves the key to the newest position
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(key=key, value=list(value), created_at=now)
        self._evict(now)
        return True

    def _evict(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
        for key in expired:
            del self._entries[key]

        while len(self._entries) > self.max_entries:
            key, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry %r (capacity %d)", key, self.max_entries)

    def clear(self) -> None:
        """Drop every entry, e.g. after store approvals change."""
        self._entries.clear()
        self._generation += 1

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class RequestDeduplicator:
    """Collapse concurrent calls for the same key into one upstream call.

    While a producer for a key is running, further callers with that key
    await the same task instead of starting a new one. The task is
    forgotten as soon as it settles, successfully or not.
    """

    def __init__(self):
        self._in_flight: dict[Hashable, asyncio.Task] = {}

    async def dedupe(self, key: Hashable, producer: Callable[[], Awaitable[T]]) -> T:
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, producer))
            self._in_flight[key] = task
        else:
            logger.debug("Joining in-flight request for %r", key)
        # Shield so one caller giving up does not cancel the shared task
        return await asyncio.shield(task)

    async def _run(self, key: Hashable, producer: Callable[[], Awaitable[T]]) -> T:
        try:
            return await producer()
        finally:
            if self._in_flight.get(key) is asyncio.current_task():
                del self._in_flight[key]

    def in_flight(self, key: Hashable) -> bool:
        return key in self._in_flight

    def clear(self) -> None:
        """Forget in-flight tasks; they still finish for callers already waiting."""
        self._in_flight.clear()
