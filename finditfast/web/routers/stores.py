"""Store requests API router."""

from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query

from finditfast.core.models import StoreStatus
from finditfast.core.search_engine import SearchEngine
from finditfast.db.repository import StoreRequestRepository
from finditfast.web.dependencies import get_search_engine, get_store_repo
from finditfast.web.schemas.store import StoreRead, StoreReviewRequest

router = APIRouter()


@router.get("/", response_model=List[StoreRead])
async def list_stores(
    status: Optional[StoreStatus] = Query(None, description="Filter by review status"),
    store_repo: StoreRequestRepository = Depends(get_store_repo),
):
    """List store requests, newest first."""
    return [StoreRead.from_request(r) for r in store_repo.list_by_status(status)]


def _review(
    store_id: str,
    status: StoreStatus,
    request: Optional[StoreReviewRequest],
    store_repo: StoreRequestRepository,
    engine: SearchEngine,
) -> StoreRead:
    reviewed_by = request.reviewed_by if request else None
    updated = store_repo.set_status(store_id, status, reviewed_by=reviewed_by)
    if not updated:
        raise HTTPException(status_code=404, detail=f"Store request not found: {store_id}")

    # Cached results were ranked against the old approved set
    engine.clear_result_cache()
    return StoreRead.from_request(updated)


@router.post("/{store_id}/approve", response_model=StoreRead)
async def approve_store(
    store_id: str,
    request: Optional[StoreReviewRequest] = None,
    store_repo: StoreRequestRepository = Depends(get_store_repo),
    engine: SearchEngine = Depends(get_search_engine),
):
    """Approve a store so its items appear in search."""
    return _review(store_id, StoreStatus.APPROVED, request, store_repo, engine)


@router.post("/{store_id}/reject", response_model=StoreRead)
async def reject_store(
    store_id: str,
    request: Optional[StoreReviewRequest] = None,
    store_repo: StoreRequestRepository = Depends(get_store_repo),
    engine: SearchEngine = Depends(get_search_engine),
):
    """Reject a store; its items disappear from search."""
    return _review(store_id, StoreStatus.REJECTED, request, store_repo, engine)
