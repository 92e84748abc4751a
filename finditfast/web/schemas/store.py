"""Store request schemas."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from finditfast.db.models import StoreRequest


class StoreRead(BaseModel):
    """Store request as shown to administrators."""

    id: str
    store_name: str
    address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: str
    requested_by: str = ""
    requested_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None

    @classmethod
    def from_request(cls, request: StoreRequest) -> "StoreRead":
        return cls(
            id=request.id,
            store_name=request.store_name,
            address=request.address,
            latitude=request.latitude,
            longitude=request.longitude,
            status=request.status,
            requested_by=request.requested_by,
            requested_at=request.requested_at,
            approved_at=request.approved_at,
            rejected_at=request.rejected_at,
        )


class StoreReviewRequest(BaseModel):
    """Optional body for approve/reject calls."""

    reviewed_by: Optional[str] = None
