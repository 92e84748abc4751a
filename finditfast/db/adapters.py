"""Async adapters exposing the SQLite repositories as engine collaborators.

Repository calls block, so each one runs in a worker thread and the event
loop stays free while SQLite works.
"""

import asyncio
from typing import Optional

from finditfast.core.models import Item, StoreRecord, StoreStatus
from finditfast.db.repository import (
    ItemRepository,
    KeyValueRepository,
    StoreRequestRepository,
)


class SqlItemIndex:
    """``ItemIndexQuery`` backed by the items table."""

    def __init__(self, repo: Optional[ItemRepository] = None, limit: int = 200):
        self.repo = repo or ItemRepository()
        self.limit = limit

    async def search_by_text(self, query: str) -> list[Item]:
        rows = await asyncio.to_thread(self.repo.search_by_text, query, self.limit)
        return [row.to_item() for row in rows]


class SqlStoreDirectory:
    """``StoreDirectoryQuery`` backed by the store_requests table."""

    def __init__(self, repo: Optional[StoreRequestRepository] = None):
        self.repo = repo or StoreRequestRepository()

    async def list_by_status(self, status: StoreStatus) -> list[StoreRecord]:
        rows = await asyncio.to_thread(self.repo.list_by_status, status)
        return [row.to_store_record() for row in rows]


class SqlKeyValueStore:
    """``PersistentKeyValueStore`` backed by the kv_entries table."""

    def __init__(self, repo: Optional[KeyValueRepository] = None):
        self.repo = repo or KeyValueRepository()

    async def read(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self.repo.get, key)

    async def write(self, key: str, value: str) -> None:
        await asyncio.to_thread(self.repo.set, key, value)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self.repo.delete, key)
