"""In-memory collaborators and builders shared by the tests."""

from datetime import datetime, timezone
from typing import Optional

from finditfast.core.models import (
    Coordinates,
    Item,
    StoreRecord,
    StoreRef,
    StoreStatus,
)

VERIFIED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeItemIndex:
    """In-memory item index. Fails the first ``fail_times`` calls."""

    def __init__(self, items=None, fail_times: int = 0):
        self.items = list(items or [])
        self.fail_times = fail_times
        self.calls: list[str] = []

    async def search_by_text(self, query: str) -> list[Item]:
        self.calls.append(query)
        if self.fail_times > 0:
            self.fail_times -= 1
            raise ConnectionError("item index offline")
        needle = query.casefold()
        return [i for i in self.items if needle in i.name.casefold()]


class FakeStoreDirectory:
    """Returns every store regardless of the status asked for."""

    def __init__(self, stores=None, fail_times: int = 0):
        self.stores = list(stores or [])
        self.fail_times = fail_times
        self.calls: list[StoreStatus] = []

    async def list_by_status(self, status: StoreStatus) -> list[StoreRecord]:
        self.calls.append(status)
        if self.fail_times > 0:
            self.fail_times -= 1
            raise TimeoutError("store directory timed out")
        return list(self.stores)


class FakeKeyValueStore:
    def __init__(self, data: Optional[dict] = None, broken: bool = False):
        self.data = dict(data or {})
        self.broken = broken

    async def read(self, key: str) -> Optional[str]:
        if self.broken:
            raise OSError("storage unavailable")
        return self.data.get(key)

    async def write(self, key: str, value: str) -> None:
        if self.broken:
            raise OSError("quota exceeded")
        self.data[key] = value

    async def remove(self, key: str) -> None:
        if self.broken:
            raise OSError("storage unavailable")
        self.data.pop(key, None)


def make_item(item_id: str, name: str, store_id: str = "S1", **kwargs) -> Item:
    return Item(id=item_id, name=name, store_ref=StoreRef.parse(store_id), **kwargs)


def make_store(
    store_id: str = "S1",
    status: StoreStatus = StoreStatus.APPROVED,
    location: Optional[Coordinates] = None,
    name: str = "Corner Market",
) -> StoreRecord:
    return StoreRecord(id=store_id, name=name, address="1 Main St", location=location, status=status)
