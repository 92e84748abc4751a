"""Database module for finditfast."""

from finditfast.db.adapters import SqlItemIndex, SqlKeyValueStore, SqlStoreDirectory
from finditfast.db.models import ItemListing, KeyValueEntry, StoreRequest
from finditfast.db.repository import (
    Database,
    ItemRepository,
    KeyValueRepository,
    StoreRequestRepository,
    get_db,
)

__all__ = [
    "ItemListing",
    "KeyValueEntry",
    "StoreRequest",
    "Database",
    "ItemRepository",
    "KeyValueRepository",
    "StoreRequestRepository",
    "get_db",
    "SqlItemIndex",
    "SqlKeyValueStore",
    "SqlStoreDirectory",
]
