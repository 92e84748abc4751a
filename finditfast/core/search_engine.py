"""Location-aware item search over approved stores.

A search runs as a two-stage pipeline:

1. Primary stage, shared between concurrent identical searches and backed by
   the result cache. Store directory first, then the item index.
2. Fallback stage, only when the primary stage reports an
   ``UpstreamQueryFailure``. Both upstream queries are re-issued
   concurrently, bypassing the cache and the deduplicator.

If the fallback fails as well the caller gets ``SearchUnavailable``; no
partial results are ever returned.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from finditfast.core.approved_stores import build_approved_index
from finditfast.core.cache import RequestDeduplicator, ResultCache, make_cache_key, normalize_query
from finditfast.core.collaborators import (
    ItemIndexQuery,
    PersistentKeyValueStore,
    StoreDirectoryQuery,
    UpstreamQueryFailure,
)
from finditfast.core.config import Settings, settings as default_settings
from finditfast.core.history import SearchHistoryStore
from finditfast.core.joiner import join_items
from finditfast.core.models import Coordinates, Item, SearchResult, StoreRecord, StoreStatus
from finditfast.core.ranking import rank_results

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchOutcome:
    """Result of one pipeline stage: ranked results or the upstream failure."""

    results: list[SearchResult] = field(default_factory=list)
    error: Optional[UpstreamQueryFailure] = None
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class SearchEngine:
    """Entry point for item searches, history and cache control.

    All collaborators are injected, so several engines can coexist and tests
    can pass fakes.
    """

    def __init__(
        self,
        item_index: ItemIndexQuery,
        store_directory: StoreDirectoryQuery,
        kv_store: PersistentKeyValueStore,
        *,
        settings: Optional[Settings] = None,
        cache: Optional[ResultCache] = None,
        deduplicator: Optional[RequestDeduplicator] = None,
        history: Optional[SearchHistoryStore] = None,
    ):
        self.settings = settings or default_settings
        self.item_index = item_index
        self.store_directory = store_directory
        self.cache = cache or ResultCache(
            ttl_seconds=self.settings.cache_ttl_seconds,
            max_entries=self.settings.cache_max_entries,
        )
        self.deduplicator = deduplicator or RequestDeduplicator()
        self.history = history or SearchHistoryStore(
            kv_store, max_items=self.settings.history_max_items
        )

    # --- Upstream calls -------------------------------------------------

    async def _fetch_items(self, query: str) -> list[Item]:
        try:
            return await self.item_index.search_by_text(normalize_query(query))
        except Exception as e:
            raise UpstreamQueryFailure("item index", str(e)) from e

    async def _fetch_approved_stores(self) -> Mapping[str, StoreRecord]:
        try:
            records = await self.store_directory.list_by_status(StoreStatus.APPROVED)
        except Exception as e:
            raise UpstreamQueryFailure("store directory", str(e)) from e
        return build_approved_index(records)

    # --- Pipeline stages ------------------------------------------------

    def _join_and_rank(
        self,
        items: list[Item],
        approved: Mapping[str, StoreRecord],
        query: str,
        user_location: Optional[Coordinates],
    ) -> list[SearchResult]:
        joined = join_items(items, approved, user_location)
        return rank_results(joined, query)

    async def _primary_stage(self, query: str, user_location: Optional[Coordinates]) -> SearchOutcome:
        cached = self.cache.get(query, user_location)
        if cached is not None:
            logger.debug("Cache hit for %r", query)
            return SearchOutcome(results=cached, from_cache=True)

        # Results built from a directory read that predates a clear are not cached
        generation = self.cache.generation
        try:
            approved = await self._fetch_approved_stores()
            items = await self._fetch_items(query)
        except UpstreamQueryFailure as e:
            return SearchOutcome(error=e)

        results = self._join_and_rank(items, approved, query, user_location)
        self.cache.set(query, user_location, results, generation=generation)
        return SearchOutcome(results=results)

    async def _fallback_stage(self, query: str, user_location: Optional[Coordinates]) -> SearchOutcome:
        try:
            items, approved = await asyncio.gather(
                self._fetch_items(query),
                self._fetch_approved_stores(),
            )
        except UpstreamQueryFailure as e:
            return SearchOutcome(error=e)

        return SearchOutcome(results=self._join_and_rank(items, approved, query, user_location))

    async def _search(
        self,
        query: str,
        user_location: Optional[Coordinates],
        record_history: bool,
    ) -> list[SearchResult]:
        if not query or not query.strip():
            return []

        key = make_cache_key(query, user_location)
        outcome = await self.deduplicator.dedupe(
            key, lambda: self._primary_stage(query, user_location)
        )

        if not outcome.ok:
            logger.warning("Primary search for %r failed (%s); trying fallback", query, outcome.error)
            outcome = await self._fallback_stage(query, user_location)
            if not outcome.ok:
                logger.error("Fallback search for %r failed: %s", query, outcome.error)
                raise SearchUnavailable() from outcome.error

        if record_history:
            await self.history.record(query)

        logger.info(
            "search query=%r results=%d cached=%s located=%s",
            query.strip(), len(outcome.results), outcome.from_cache, user_location is not None,
        )
        return list(outcome.results)

    # --- Public API -----------------------------------------------------

    async def search_items(
        self,
        query: str,
        user_location: Optional[Coordinates] = None,
    ) -> list[SearchResult]:
        """Search approved stores for items matching ``query``.

        Args:
            query: Free text typed by the user
            user_location: Where the user is, for distance annotation

        Returns:
            Ranked results, possibly empty

        Raises:
            SearchUnavailable: if both the primary and fallback stages fail
        """
        return await self._search(query, user_location, record_history=True)

    async def search_with_filters(
        self,
        query: str,
        user_location: Optional[Coordinates] = None,
        verified_only: bool = False,
        max_distance_km: Optional[float] = None,
    ) -> list[SearchResult]:
        """Search, then keep only verified items and/or items within a radius.

        Results whose distance is unknown are kept by the radius filter.
        """
        results = await self.search_items(query, user_location)

        if verified_only:
            results = [r for r in results if r.verified]

        if max_distance_km is not None and user_location is not None:
            results = [
                r for r in results
                if r.distance_km is None or r.distance_km <= max_distance_km
            ]

        return results

    async def get_recent_queries(self, limit: Optional[int] = None) -> list[str]:
        return await self.history.recent(limit)

    async def clear_history(self) -> None:
        await self.history.clear()

    def clear_result_cache(self) -> None:
        """Drop cached results and detach in-flight searches.

        Searches already running still answer their current callers but no
        longer write to the cache or get joined by new callers.
        """
        self.cache.clear()
        self.deduplicator.clear()

    async def get_search_suggestions(self, partial: str, limit: int = 5) -> list[str]:
        """Previous queries, then popular ones, that contain ``partial``."""
        needle = partial.strip().casefold()
        if not needle or limit <= 0:
            return []

        candidates = await self.history.list() + list(self.settings.popular_queries)
        seen = set()
        suggestions = []
        for candidate in candidates:
            folded = candidate.casefold()
            if needle not in folded or folded in seen:
                continue
            seen.add(folded)
            suggestions.append(candidate)
            if len(suggestions) >= limit:
                break
        return suggestions

    async def preload_popular_searches(self) -> int:
        """Warm the cache for popular queries without touching history.

        Returns:
            Number of queries that were warmed successfully
        """
        queries = self.settings.popular_queries[: self.settings.preload_query_count]
        outcomes = await asyncio.gather(
            *(self._search(q, None, record_history=False) for q in queries),
            return_exceptions=True,
        )

        warmed = 0
        for query, outcome in zip(queries, outcomes):
            if isinstance(outcome, Exception):
                logger.warning("Preloading %r failed: %s", query, outcome)
            else:
                warmed += 1
        return warmed


class SearchUnavailable(Exception):
    """Raised when search cannot be served; safe to show to users."""

    MESSAGE = "Search is temporarily unavailable. Please try again."

    def __init__(self, message: str = MESSAGE):
        super().__init__(message)
