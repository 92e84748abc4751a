"""Recent search queries, persisted through a key-value store."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Optional

from finditfast.core.collaborators import PersistentKeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "finditfast_search_history"


class SearchHistoryStore:
    """Capped, most-recent-first list of distinct queries.

    Each operation reads the whole list, changes it and writes it back.
    Storage failures are logged and otherwise ignored: a broken or full
    key-value store must never break searching.
    """

    def __init__(self, kv_store: PersistentKeyValueStore, max_items: int = 10):
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        self.kv_store = kv_store
        self.max_items = max_items
        self._lock = asyncio.Lock()

    async def _load(self) -> list[dict]:
        try:
            raw = await self.kv_store.read(HISTORY_KEY)
        except Exception as e:
            logger.warning("Failed to load search history: %s", e)
            return []
        if not raw:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Search history is corrupted; starting fresh")
            return []
        if not isinstance(data, list):
            return []

        entries = []
        for entry in data:
            # Older clients stored bare strings
            if isinstance(entry, str):
                entry = {"query": entry, "timestamp": None}
            if isinstance(entry, dict) and isinstance(entry.get("query"), str):
                entries.append(entry)
        return entries

    async def _save(self, entries: list[dict]) -> None:
        try:
            await self.kv_store.write(HISTORY_KEY, json.dumps(entries))
        except Exception as e:
            logger.warning("Failed to save search history: %s", e)

    async def record(self, query: str) -> None:
        """Put ``query`` at the front, dropping any case-insensitive duplicate."""
        query = query.strip()
        if not query:
            return

        async with self._lock:
            entries = await self._load()
            folded = query.casefold()
            entries = [e for e in entries if e["query"].casefold() != folded]
            entries.insert(0, {
                "query": query,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            })
            await self._save(entries[: self.max_items])

    async def list(self) -> list[str]:
        """All stored queries, most recent first."""
        entries = await self._load()
        return [e["query"] for e in entries[: self.max_items]]

    async def recent(self, limit: Optional[int] = None) -> list[str]:
        queries = await self.list()
        if limit is None:
            return queries
        return queries[: max(limit, 0)]

    async def clear(self) -> None:
        async with self._lock:
            try:
                await self.kv_store.remove(HISTORY_KEY)
            except Exception as e:
                logger.warning("Failed to clear search history: %s", e)
