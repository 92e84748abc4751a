"""Pydantic schemas for API request/response models."""

from finditfast.web.schemas.common import MessageResponse
from finditfast.web.schemas.search import (
    SearchResultItem,
    SearchResponse,
    RecentSearchesResponse,
    SuggestionsResponse,
)
from finditfast.web.schemas.store import StoreRead, StoreReviewRequest

__all__ = [
    "MessageResponse",
    "SearchResultItem",
    "SearchResponse",
    "RecentSearchesResponse",
    "SuggestionsResponse",
    "StoreRead",
    "StoreReviewRequest",
]
