"""Search-related schemas."""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field

from finditfast.core.geodesic import format_distance
from finditfast.core.models import SearchResult


class ShelfPositionRead(BaseModel):
    x: float
    y: float


class SearchResultItem(BaseModel):
    """A single search result: the item plus where to find it."""

    id: str
    name: str
    store_id: str
    provisional_store: bool = False
    store_name: str
    store_address: str
    store_latitude: Optional[float] = None
    store_longitude: Optional[float] = None
    image_url: str = ""
    price_image_url: Optional[str] = None
    price: Optional[float] = None
    position: Optional[ShelfPositionRead] = None
    verified: bool = False
    verified_at: Optional[datetime] = None
    report_count: int = 0
    distance_km: Optional[float] = None
    distance_label: Optional[str] = None

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResultItem":
        item = result.item
        store = result.store
        position = None
        if item.position is not None:
            position = ShelfPositionRead(x=item.position.x, y=item.position.y)
        return cls(
            id=item.id,
            name=item.name,
            store_id=result.store_id,
            provisional_store=item.store_ref.provisional,
            store_name=store.name,
            store_address=store.address,
            store_latitude=store.location.latitude if store.location else None,
            store_longitude=store.location.longitude if store.location else None,
            image_url=item.image_url,
            price_image_url=item.price_image_url,
            price=item.price,
            position=position,
            verified=item.verified,
            verified_at=item.verified_at,
            report_count=item.report_count,
            distance_km=result.distance_km,
            distance_label=(
                format_distance(result.distance_km) if result.distance_km is not None else None
            ),
        )


class SearchResponse(BaseModel):
    """Search response."""

    query: str
    results: List[SearchResultItem]
    count: int


class RecentSearchesResponse(BaseModel):
    queries: List[str] = Field(default_factory=list)


class SuggestionsResponse(BaseModel):
    query: str
    suggestions: List[str] = Field(default_factory=list)
