"""Database models for finditfast using SQLModel."""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel

from finditfast.core.models import Item, StoreRecord, StoreStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ItemListing(SQLModel, table=True):
    """An item a store owner or shopper has placed on a store floorplan."""

    __tablename__ = "items"

    id: str = Field(primary_key=True)
    name: str = Field(index=True)
    store_id: str = Field(index=True)  # may carry the virtual_ prefix
    image_url: str = ""
    price_image_url: Optional[str] = None
    category: Optional[str] = None
    position_x: Optional[float] = None
    position_y: Optional[float] = None
    price: Optional[float] = None
    verified: bool = Field(default=False)
    verified_at: Optional[datetime] = None
    report_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def to_item(self) -> Item:
        data = self.model_dump()
        if self.position_x is not None and self.position_y is not None:
            data["position"] = {"x": self.position_x, "y": self.position_y}
        return Item.from_record(data)


class StoreRequest(SQLModel, table=True):
    """A request to list a store, reviewed by an administrator."""

    __tablename__ = "store_requests"

    id: str = Field(primary_key=True)
    store_name: str
    address: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    requested_by: str = ""
    owner_id: Optional[str] = None
    notes: Optional[str] = None
    status: str = Field(default=StoreStatus.PENDING.value, index=True)
    requested_at: datetime = Field(default_factory=utcnow)
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    updated_at: datetime = Field(default_factory=utcnow)

    def to_store_record(self) -> StoreRecord:
        data = self.model_dump()
        data["location"] = (self.latitude, self.longitude)
        return StoreRecord.from_record(data)


class KeyValueEntry(SQLModel, table=True):
    """Small string blobs such as the search history."""

    __tablename__ = "kv_entries"

    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=utcnow)
