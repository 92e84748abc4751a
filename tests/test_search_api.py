import pytest

from fakes import make_item, make_store
from finditfast.core.models import Coordinates


@pytest.fixture
def stocked(item_index, store_directory):
    item_index.items = [
        make_item("i1", "Milk", "virtual_S1", verified=True, price=2.49),
        make_item("i2", "Oat Milk", "S2"),
    ]
    store_directory.stores = [
        make_store("S1", location=Coordinates(40.018, -74.0)),
        make_store("S2", name="Late Night Deli"),
    ]


def test_search(client, stocked):
    response = client.get("/api/search/", params={"q": "milk", "lat": 40.0, "lon": -74.0})
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    first = data["results"][0]
    assert first["id"] == "i1"
    assert first["store_id"] == "S1"
    assert first["provisional_store"] is True
    assert first["distance_km"] == pytest.approx(2.0, abs=0.01)
    assert first["distance_label"] == "2.0km"
    assert data["results"][1]["store_name"] == "Late Night Deli"
    assert data["results"][1]["distance_km"] is None


def test_search_blank_query(client, item_index):
    response = client.get("/api/search/", params={"q": "  "})
    assert response.status_code == 200
    assert response.json() == {"query": "  ", "results": [], "count": 0}
    assert item_index.calls == []


def test_search_verified_only(client, stocked):
    response = client.get("/api/search/", params={"q": "milk", "verified_only": True})
    assert [r["id"] for r in response.json()["results"]] == ["i1"]


@pytest.mark.parametrize("params", [
    {"q": "milk", "lat": 95, "lon": 0},
    {"q": "milk", "lat": 0, "lon": -181},
    {"q": "milk", "lat": 40.0},
    {"q": "milk", "max_distance_km": 0},
])
def test_search_rejects_bad_location(client, params):
    response = client.get("/api/search/", params=params)
    assert response.status_code == 422


def test_search_unavailable_is_503(client, item_index):
    item_index.fail_times = 2
    response = client.get("/api/search/", params={"q": "milk"})
    assert response.status_code == 503
    assert response.json()["detail"] == "Search is temporarily unavailable. Please try again."


def test_recent_and_clear_history(client, stocked):
    for query in ["milk", "bread", "Milk"]:
        client.get("/api/search/", params={"q": query})

    response = client.get("/api/search/recent")
    assert response.json()["queries"] == ["Milk", "bread"]
    assert client.get("/api/search/recent", params={"limit": 1}).json()["queries"] == ["Milk"]

    response = client.delete("/api/search/history")
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert client.get("/api/search/recent").json()["queries"] == []


def test_suggestions(client):
    response = client.get("/api/search/suggestions", params={"q": "bre"})
    assert response.status_code == 200
    assert response.json() == {"query": "bre", "suggestions": ["bread"]}


def test_clear_cache(client, stocked, engine, item_index):
    client.get("/api/search/", params={"q": "milk"})
    client.get("/api/search/", params={"q": "milk"})
    assert len(item_index.calls) == 1

    response = client.delete("/api/search/cache")
    assert response.status_code == 200
    assert len(engine.cache) == 0

    client.get("/api/search/", params={"q": "milk"})
    assert len(item_index.calls) == 2


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_root(client):
    data = client.get("/").json()
    assert data["name"] == "finditfast API"
    assert data["health"] == "/api/health"
