"""Search API router."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from finditfast.core.models import Coordinates
from finditfast.core.search_engine import SearchEngine, SearchUnavailable
from finditfast.web.dependencies import get_search_engine
from finditfast.web.schemas.common import MessageResponse
from finditfast.web.schemas.search import (
    RecentSearchesResponse,
    SearchResponse,
    SearchResultItem,
    SuggestionsResponse,
)

router = APIRouter()


def _user_location(lat: Optional[float], lon: Optional[float]) -> Optional[Coordinates]:
    if lat is None and lon is None:
        return None
    if lat is None or lon is None:
        raise HTTPException(status_code=422, detail="lat and lon must be given together")
    return Coordinates(latitude=lat, longitude=lon)


@router.get("/", response_model=SearchResponse)
async def search_items(
    q: str = Query("", description="Item name to search for"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    verified_only: bool = Query(False),
    max_distance_km: Optional[float] = Query(None, gt=0),
    engine: SearchEngine = Depends(get_search_engine),
):
    """Search approved stores for an item, nearest and most trusted first."""
    location = _user_location(lat, lon)
    try:
        results = await engine.search_with_filters(
            q,
            user_location=location,
            verified_only=verified_only,
            max_distance_km=max_distance_km,
        )
    except SearchUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    items = [SearchResultItem.from_result(r) for r in results]
    return SearchResponse(query=q, results=items, count=len(items))


@router.get("/recent", response_model=RecentSearchesResponse)
async def recent_searches(
    limit: Optional[int] = Query(None, ge=1, le=50),
    engine: SearchEngine = Depends(get_search_engine),
):
    """Most recent distinct queries, newest first."""
    return RecentSearchesResponse(queries=await engine.get_recent_queries(limit))


@router.get("/suggestions", response_model=SuggestionsResponse)
async def search_suggestions(
    q: str = Query(""),
    limit: int = Query(5, ge=1, le=20),
    engine: SearchEngine = Depends(get_search_engine),
):
    suggestions = await engine.get_search_suggestions(q, limit=limit)
    return SuggestionsResponse(query=q, suggestions=suggestions)


@router.delete("/history", response_model=MessageResponse)
async def clear_history(engine: SearchEngine = Depends(get_search_engine)):
    await engine.clear_history()
    return MessageResponse(message="Search history cleared")


@router.delete("/cache", response_model=MessageResponse)
async def clear_cache(engine: SearchEngine = Depends(get_search_engine)):
    engine.clear_result_cache()
    return MessageResponse(message="Result cache cleared")
