"""Interfaces the search engine needs from the outside world.

The item index, store directory and key-value store live outside the
engine. Anything implementing these protocols can be plugged in; the
SQLite-backed versions are in ``finditfast.db.adapters``.
"""

from typing import Optional, Protocol

from finditfast.core.models import Item, StoreRecord, StoreStatus


class ItemIndexQuery(Protocol):
    async def search_by_text(self, query: str) -> list[Item]:
        """Free-text match against item names. Matching rules belong to the index."""
        ...


class StoreDirectoryQuery(Protocol):
    async def list_by_status(self, status: StoreStatus) -> list[StoreRecord]:
        ...


class PersistentKeyValueStore(Protocol):
    async def read(self, key: str) -> Optional[str]:
        ...

    async def write(self, key: str, value: str) -> None:
        ...

    async def remove(self, key: str) -> None:
        ...


class UpstreamQueryFailure(Exception):
    """Raised when the item index or store directory call fails.

    The collaborator's own exception is chained as ``__cause__``.
    """

    def __init__(self, source: str, message: str = ""):
        self.source = source
        super().__init__(f"{source} query failed" + (f": {message}" if message else ""))
