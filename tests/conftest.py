import os
import tempfile

# Keep the global settings and database away from the real home directory
os.environ.setdefault("FINDITFAST_DATA_DIR", tempfile.mkdtemp(prefix="finditfast-tests-"))

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from fakes import FakeItemIndex, FakeKeyValueStore, FakeStoreDirectory
from finditfast.core.config import Settings
from finditfast.core.search_engine import SearchEngine
from finditfast.db.models import StoreRequest
from finditfast.db.repository import Database, StoreRequestRepository
from finditfast.web.dependencies import get_search_engine, get_store_repo
from finditfast.web.main import app


@pytest.fixture
def anyio_backend():
    return "asyncio"


# --- Engine Fixtures ---

@pytest.fixture
def test_settings():
    return Settings(
        cache_ttl_seconds=60,
        cache_max_entries=10,
        history_max_items=10,
        popular_queries=["milk", "bread", "eggs", "oat milk"],
        preload_query_count=3,
    )


@pytest.fixture
def item_index():
    return FakeItemIndex()


@pytest.fixture
def store_directory():
    return FakeStoreDirectory()


@pytest.fixture
def kv_store():
    return FakeKeyValueStore()


@pytest.fixture
def engine(item_index, store_directory, kv_store, test_settings):
    return SearchEngine(item_index, store_directory, kv_store, settings=test_settings)


# --- Database Fixtures ---

@pytest.fixture(name="session")
def session_fixture():
    """Create an in-memory database session for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def mock_db(session):
    """A Database wrapper whose sessions are all the in-memory test session."""
    db = MagicMock(spec=Database)
    db.get_session.return_value.__enter__.return_value = session
    return db


@pytest.fixture(name="client")
def client_fixture(mock_db, engine):
    """Create a TestClient with overridden dependencies."""

    def get_store_repo_override():
        return StoreRequestRepository(db=mock_db)

    app.dependency_overrides[get_store_repo] = get_store_repo_override
    app.dependency_overrides[get_search_engine] = lambda: engine

    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_store(session):
    """Create a pending store request in the DB."""
    request = StoreRequest(
        id="S1",
        store_name="Corner Market",
        address="1 Main St",
        latitude=40.0,
        longitude=-74.0,
        requested_by="owner-1",
    )
    session.add(request)
    session.commit()
    return request
