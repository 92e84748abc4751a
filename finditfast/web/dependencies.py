"""Dependency injection for FastAPI endpoints."""

from typing import Optional

from finditfast.core.search_engine import SearchEngine
from finditfast.db.adapters import SqlItemIndex, SqlKeyValueStore, SqlStoreDirectory
from finditfast.db.repository import (
    ItemRepository,
    KeyValueRepository,
    StoreRequestRepository,
)

# One engine per process so the result cache and in-flight table are shared
_engine: Optional[SearchEngine] = None


def get_store_repo() -> StoreRequestRepository:
    """Get store request repository instance."""
    return StoreRequestRepository()


def get_search_engine() -> SearchEngine:
    """Get or create the process-wide search engine."""
    global _engine
    if _engine is None:
        _engine = SearchEngine(
            item_index=SqlItemIndex(ItemRepository()),
            store_directory=SqlStoreDirectory(StoreRequestRepository()),
            kv_store=SqlKeyValueStore(KeyValueRepository()),
        )
    return _engine
