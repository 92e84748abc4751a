"""Value types used by the search engine.

Records coming from the item index and store directory are converted into
these frozen dataclasses once, at the collaborator boundary. Everything
downstream (joining, ranking, caching) works on them and never looks at the
raw documents again.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

# Raw store ids with this prefix point at a provisional (virtual) store
PROVISIONAL_PREFIX = "virtual_"


class MalformedCoordinate(ValueError):
    """Raised when a latitude/longitude pair is non-numeric or out of range."""

    pass


class StoreStatus(str, Enum):
    """Approval status of a store request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _to_degrees(value: Any, limit: float, label: str) -> float:
    if isinstance(value, bool):
        raise MalformedCoordinate(f"{label} must be a number, got {value!r}")
    try:
        degrees = float(value)
    except (TypeError, ValueError):
        raise MalformedCoordinate(f"{label} must be a number, got {value!r}") from None
    if not math.isfinite(degrees) or not -limit <= degrees <= limit:
        raise MalformedCoordinate(f"{label} {degrees} outside [-{limit}, {limit}]")
    return degrees


@dataclass(frozen=True)
class Coordinates:
    """A point in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self):
        object.__setattr__(self, "latitude", _to_degrees(self.latitude, 90.0, "latitude"))
        object.__setattr__(self, "longitude", _to_degrees(self.longitude, 180.0, "longitude"))

    @classmethod
    def parse(cls, value: Any) -> Optional["Coordinates"]:
        """Build coordinates from loosely-typed data, or None if unusable.

        Accepts an existing Coordinates, a mapping with latitude/longitude
        (or lat/lng) keys, or a (lat, lon) pair.
        """
        if value is None:
            return None
        if isinstance(value, Coordinates):
            return value
        try:
            if isinstance(value, dict):
                lat = value.get("latitude", value.get("lat"))
                lon = value.get("longitude", value.get("lng", value.get("lon")))
            else:
                lat, lon = value
            return cls(lat, lon)
        except (MalformedCoordinate, TypeError, ValueError):
            return None

    @property
    def is_placeholder(self) -> bool:
        """True for the (0, 0) pair used when a store was saved without a location."""
        return self.latitude == 0 and self.longitude == 0

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class StoreRef:
    """Reference from an item to the store stocking it.

    Provisional stores are encoded upstream as ``virtual_<id>``. The prefix
    is resolved here once; joins and lookups use ``canonical``.
    """

    id: str
    provisional: bool = False

    @classmethod
    def parse(cls, raw: str) -> "StoreRef":
        raw = (raw or "").strip()
        if raw.startswith(PROVISIONAL_PREFIX):
            return cls(id=raw[len(PROVISIONAL_PREFIX):], provisional=True)
        return cls(id=raw)

    @property
    def canonical(self) -> str:
        return self.id

    def __str__(self) -> str:
        if self.provisional:
            return f"{PROVISIONAL_PREFIX}{self.id}"
        return self.id


@dataclass(frozen=True)
class ShelfPosition:
    """Position of an item on the store floorplan, in image-relative units."""

    x: float
    y: float


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Convert an ISO string, epoch seconds or datetime into an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def _first(data: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return default


@dataclass(frozen=True)
class Item:
    """An item listing as stored in the item index."""

    id: str
    name: str
    store_ref: StoreRef
    image_url: str = ""
    position: Optional[ShelfPosition] = None
    price: Optional[float] = None
    verified: bool = False
    verified_at: Optional[datetime] = None
    report_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    price_image_url: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_record(cls, data: dict) -> "Item":
        """Build an Item from a raw document (camelCase or snake_case keys)."""
        position = None
        raw_position = data.get("position")
        if isinstance(raw_position, dict):
            try:
                position = ShelfPosition(x=float(raw_position["x"]), y=float(raw_position["y"]))
            except (KeyError, TypeError, ValueError):
                position = None

        price = _first(data, "price")
        try:
            price = float(price) if price is not None else None
        except (TypeError, ValueError):
            price = None

        try:
            report_count = int(_first(data, "reportCount", "report_count", default=0))
        except (TypeError, ValueError):
            report_count = 0

        return cls(
            id=str(data["id"]),
            name=str(_first(data, "name", default="")),
            store_ref=StoreRef.parse(str(_first(data, "storeId", "store_id", default=""))),
            image_url=str(_first(data, "imageUrl", "image_url", default="")),
            position=position,
            price=price,
            verified=bool(data.get("verified", False)),
            verified_at=parse_timestamp(_first(data, "verifiedAt", "verified_at")),
            report_count=max(report_count, 0),
            created_at=parse_timestamp(_first(data, "createdAt", "created_at")),
            updated_at=parse_timestamp(_first(data, "updatedAt", "updated_at")),
            price_image_url=_first(data, "priceImageUrl", "price_image_url"),
            category=_first(data, "category"),
        )


@dataclass(frozen=True)
class StoreRecord:
    """A store as known to the store directory."""

    id: str
    name: str = "Store"
    address: str = "Address not available"
    location: Optional[Coordinates] = None
    owner_id: str = "unknown"
    status: StoreStatus = StoreStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, data: dict) -> "StoreRecord":
        """Build a StoreRecord from a raw store-request document.

        Store requests have been saved under several field spellings over
        time; the first non-empty one wins. A bad location becomes None.
        """
        try:
            status = StoreStatus(str(data.get("status", "pending")).lower())
        except ValueError:
            status = StoreStatus.PENDING

        return cls(
            id=StoreRef.parse(str(data["id"])).canonical,
            name=str(_first(data, "storeName", "store_name", "name", default="Store")),
            address=str(_first(data, "storeAddress", "store_address", "address",
                               default="Address not available")),
            location=Coordinates.parse(_first(data, "storeLocation", "store_location", "location")),
            owner_id=str(_first(data, "ownerId", "owner_id", "requestedBy", "requested_by",
                                default="unknown")),
            status=status,
            created_at=parse_timestamp(_first(data, "createdAt", "created_at", "requestedAt", "requested_at")),
            updated_at=parse_timestamp(_first(data, "updatedAt", "updated_at")),
        )


@dataclass(frozen=True)
class SearchResult:
    """An item joined with its approved store and optional distance."""

    item: Item
    store: StoreRecord
    distance_km: Optional[float] = None

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def name(self) -> str:
        return self.item.name

    @property
    def store_id(self) -> str:
        return self.item.store_ref.canonical

    @property
    def verified(self) -> bool:
        return self.item.verified

    @property
    def verified_at(self) -> Optional[datetime]:
        return self.item.verified_at

    @property
    def report_count(self) -> int:
        return self.item.report_count
