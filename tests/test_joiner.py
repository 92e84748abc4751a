import pytest

from fakes import make_item, make_store
from finditfast.core.approved_stores import build_approved_index
from finditfast.core.joiner import join_items
from finditfast.core.models import Coordinates, StoreStatus

USER = Coordinates(40.0, -74.0)


def test_items_from_unapproved_stores_are_dropped():
    approved = build_approved_index([
        make_store("S1"),
        make_store("S2", StoreStatus.PENDING),
    ])
    items = [
        make_item("i1", "Milk", "S1"),
        make_item("i2", "Milk", "S2"),
        make_item("i3", "Milk", "S3"),
    ]
    results = join_items(items, approved)
    assert [r.id for r in results] == ["i1"]


def test_provisional_store_ref_matches_canonical_store():
    approved = build_approved_index([make_store("S1")])
    results = join_items([make_item("i1", "Milk", "virtual_S1")], approved)
    assert len(results) == 1
    assert results[0].store_id == "S1"
    assert results[0].store.name == "Corner Market"


def test_distance_is_attached_when_both_locations_known():
    approved = build_approved_index([make_store("S1", location=Coordinates(40.018, -74.0))])
    [result] = join_items([make_item("i1", "Milk")], approved, USER)
    assert result.distance_km == pytest.approx(2.0, abs=0.01)


@pytest.mark.parametrize("store_location,user_location", [
    (None, USER),
    (Coordinates(0, 0), USER),
    (Coordinates(40.018, -74.0), None),
])
def test_distance_unknown(store_location, user_location):
    approved = build_approved_index([make_store("S1", location=store_location)])
    [result] = join_items([make_item("i1", "Milk")], approved, user_location)
    assert result.distance_km is None


def test_input_order_is_kept():
    approved = build_approved_index([make_store("S1")])
    items = [make_item(f"i{n}", "Milk") for n in range(5)]
    assert [r.id for r in join_items(items, approved)] == [f"i{n}" for n in range(5)]
