"""Database repository for CRUD operations."""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import func, or_
from sqlmodel import Session, SQLModel, create_engine, select

from finditfast.core.config import settings, ensure_data_dirs
from finditfast.core.models import StoreStatus
from finditfast.db.models import ItemListing, KeyValueEntry, StoreRequest, utcnow

logger = logging.getLogger(__name__)


class Database:
    """Database connection and operations manager."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or settings.db_path
        ensure_data_dirs()

        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            echo=False,
            connect_args={"check_same_thread": False},
            pool_size=20,
            max_overflow=40,
        )

    def create_tables(self):
        """Create all database tables."""
        SQLModel.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session."""
        return Session(self.engine)


# Global database instance
_db: Optional[Database] = None


def get_db() -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database()
        _db.create_tables()
    return _db


class ItemRepository:
    """Repository for item listings."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_db()

    def add(self, item: ItemListing) -> ItemListing:
        """Insert or update an item listing."""
        with self.db.get_session() as session:
            existing = session.get(ItemListing, item.id)
            if existing:
                for key, value in item.model_dump(exclude_unset=True).items():
                    if key != "id" and value is not None:
                        setattr(existing, key, value)
                existing.updated_at = utcnow()
                session.add(existing)
                session.commit()
                session.refresh(existing)
                return existing

            session.add(item)
            session.commit()
            session.refresh(item)
            return item

    def get(self, item_id: str) -> Optional[ItemListing]:
        with self.db.get_session() as session:
            return session.get(ItemListing, item_id)

    def search_by_text(self, query: str, limit: int = 200) -> list[ItemListing]:
        """Search items by name and category (simple LIKE query).

        Args:
            query: Search query string
            limit: Maximum number of results

        Returns:
            List of matching items
        """
        with self.db.get_session() as session:
            stmt = (
                select(ItemListing)
                .where(
                    or_(
                        ItemListing.name.ilike(f"%{query}%"),
                        ItemListing.category.ilike(f"%{query}%"),
                    )
                )
                .limit(limit)
            )
            return list(session.exec(stmt).all())

    def delete(self, item_id: str) -> bool:
        with self.db.get_session() as session:
            item = session.get(ItemListing, item_id)
            if not item:
                return False
            session.delete(item)
            session.commit()
            return True

    def count(self) -> int:
        """Count total items in database."""
        with self.db.get_session() as session:
            return session.exec(select(func.count(ItemListing.id))).one()


class StoreRequestRepository:
    """Repository for store requests and their approval status."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_db()

    def add(self, request: StoreRequest) -> StoreRequest:
        with self.db.get_session() as session:
            session.add(request)
            session.commit()
            session.refresh(request)
            return request

    def get(self, request_id: str) -> Optional[StoreRequest]:
        with self.db.get_session() as session:
            return session.get(StoreRequest, request_id)

    def list_by_status(self, status: Optional[StoreStatus] = None) -> list[StoreRequest]:
        """List store requests, optionally only those with the given status."""
        with self.db.get_session() as session:
            stmt = select(StoreRequest)
            if status is not None:
                stmt = stmt.where(StoreRequest.status == StoreStatus(status).value)
            stmt = stmt.order_by(StoreRequest.requested_at.desc())
            return list(session.exec(stmt).all())

    def set_status(
        self,
        request_id: str,
        status: StoreStatus,
        reviewed_by: Optional[str] = None,
    ) -> Optional[StoreRequest]:
        """Approve, reject or reopen a store request.

        Returns:
            The updated request, or None if it does not exist
        """
        status = StoreStatus(status)
        with self.db.get_session() as session:
            request = session.get(StoreRequest, request_id)
            if not request:
                return None

            now = utcnow()
            request.status = status.value
            request.updated_at = now
            if status is StoreStatus.APPROVED:
                request.approved_at = now
                request.approved_by = reviewed_by
            elif status is StoreStatus.REJECTED:
                request.rejected_at = now
                request.rejected_by = reviewed_by

            session.add(request)
            session.commit()
            session.refresh(request)
            logger.info("Store request %s is now %s", request_id, status.value)
            return request

    def count(self, status: Optional[StoreStatus] = None) -> int:
        with self.db.get_session() as session:
            stmt = select(func.count(StoreRequest.id))
            if status is not None:
                stmt = stmt.where(StoreRequest.status == StoreStatus(status).value)
            return session.exec(stmt).one()


class KeyValueRepository:
    """Repository for small persisted string values."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_db()

    def get(self, key: str) -> Optional[str]:
        with self.db.get_session() as session:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        with self.db.get_session() as session:
            entry = session.get(KeyValueEntry, key)
            if entry:
                entry.value = value
                entry.updated_at = utcnow()
            else:
                entry = KeyValueEntry(key=key, value=value)
            session.add(entry)
            session.commit()

    def delete(self, key: str) -> bool:
        with self.db.get_session() as session:
            entry = session.get(KeyValueEntry, key)
            if not entry:
                return False
            session.delete(entry)
            session.commit()
            return True
