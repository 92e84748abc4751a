from unittest.mock import patch

import pytest

from finditfast.core.models import Item, StoreRecord, StoreStatus
from finditfast.db.adapters import SqlItemIndex, SqlKeyValueStore, SqlStoreDirectory
from finditfast.db.models import ItemListing, StoreRequest
from finditfast.db.repository import (
    ItemRepository,
    KeyValueRepository,
    StoreRequestRepository,
)


@pytest.fixture
def item_repo(mock_db):
    repo = ItemRepository(db=mock_db)
    repo.add(ItemListing(id="i1", name="Whole Milk", store_id="virtual_S1", category="dairy",
                         position_x=12.0, position_y=30.5, verified=True))
    repo.add(ItemListing(id="i2", name="Sourdough", store_id="S1", category="bakery"))
    repo.add(ItemListing(id="i3", name="Yogurt", store_id="S2", category="Dairy", report_count=1))
    return repo


@pytest.fixture
def store_repo(mock_db):
    repo = StoreRequestRepository(db=mock_db)
    repo.add(StoreRequest(id="S1", store_name="Corner Market", latitude=40.0, longitude=-74.0,
                          status=StoreStatus.APPROVED.value))
    repo.add(StoreRequest(id="S2", store_name="Late Night Deli", requested_by="owner-2"))
    return repo


class TestItemRepository:
    def test_search_matches_name_or_category_case_insensitively(self, item_repo):
        assert {i.id for i in item_repo.search_by_text("milk")} == {"i1"}
        assert {i.id for i in item_repo.search_by_text("dairy")} == {"i1", "i3"}

    def test_search_limit(self, item_repo):
        assert len(item_repo.search_by_text("", limit=2)) == 2

    def test_add_updates_existing(self, item_repo):
        item_repo.add(ItemListing(id="i2", name="Sourdough Loaf", store_id="S1", price=4.5))
        updated = item_repo.get("i2")
        assert updated.name == "Sourdough Loaf"
        assert updated.price == 4.5
        assert item_repo.count() == 3

    def test_delete(self, item_repo):
        assert item_repo.delete("i2") is True
        assert item_repo.delete("i2") is False
        assert item_repo.count() == 2

    def test_to_item(self, item_repo):
        item = item_repo.get("i1").to_item()
        assert item.store_ref.provisional
        assert item.store_ref.canonical == "S1"
        assert item.position.x == 12.0
        assert item.verified


class TestStoreRequestRepository:
    def test_list_by_status(self, store_repo):
        assert [r.id for r in store_repo.list_by_status(StoreStatus.APPROVED)] == ["S1"]
        assert [r.id for r in store_repo.list_by_status(StoreStatus.PENDING)] == ["S2"]
        assert len(store_repo.list_by_status()) == 2

    def test_set_status_records_review(self, store_repo):
        updated = store_repo.set_status("S2", StoreStatus.APPROVED, reviewed_by="admin")
        assert updated.status == "approved"
        assert updated.approved_by == "admin"
        assert updated.approved_at is not None
        assert store_repo.count(StoreStatus.APPROVED) == 2

    def test_set_status_missing(self, store_repo):
        assert store_repo.set_status("nope", StoreStatus.REJECTED) is None

    def test_to_store_record(self, store_repo):
        record = store_repo.get("S2").to_store_record()
        assert record.status is StoreStatus.PENDING
        assert record.location is None
        assert record.owner_id == "owner-2"
        assert record.address == "Address not available"


def test_key_value_repository(mock_db):
    repo = KeyValueRepository(db=mock_db)
    assert repo.get("k") is None
    repo.set("k", "one")
    repo.set("k", "two")
    assert repo.get("k") == "two"
    assert repo.delete("k") is True
    assert repo.get("k") is None


@pytest.mark.anyio
async def test_sql_adapters_feed_the_engine(item_repo, store_repo, mock_db):
    items = await SqlItemIndex(item_repo).search_by_text("milk")
    assert [i.id for i in items] == ["i1"]

    stores = await SqlStoreDirectory(store_repo).list_by_status(StoreStatus.APPROVED)
    assert [s.id for s in stores] == ["S1"]
    assert stores[0].location.as_tuple() == (40.0, -74.0)

    kv = SqlKeyValueStore(KeyValueRepository(db=mock_db))
    await kv.write("history", "[]")
    assert await kv.read("history") == "[]"
    await kv.remove("history")
    assert await kv.read("history") is None


def test_rows_convert_through_record_constructors(item_repo, store_repo):
    with patch.object(Item, "from_record", wraps=Item.from_record) as item_from_record, \
            patch.object(StoreRecord, "from_record", wraps=StoreRecord.from_record) as store_from_record:
        item = item_repo.get("i3").to_item()
        record = store_repo.get("S1").to_store_record()

    assert item_from_record.call_count == 1
    assert store_from_record.call_count == 1
    assert item.report_count == 1
    assert item.position is None
    assert record.name == "Corner Market"
    assert record.created_at is not None


def test_half_located_store_has_no_location(mock_db):
    repo = StoreRequestRepository(db=mock_db)
    repo.add(StoreRequest(id="S3", store_name="", latitude=40.0))
    record = repo.get("S3").to_store_record()
    assert record.location is None
    assert record.name == "Store"
