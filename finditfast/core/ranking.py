"""Relevance ordering for joined search results."""

from typing import Iterable

from finditfast.core.models import SearchResult

EXACT_MATCH = 0
PREFIX_MATCH = 1
PARTIAL_MATCH = 2


def match_tier(name: str, query: str) -> int:
    """How closely an item name matches the query (lower is better)."""
    name = name.casefold()
    query = query.strip().casefold()
    if name == query:
        return EXACT_MATCH
    if name.startswith(query):
        return PREFIX_MATCH
    return PARTIAL_MATCH


def relevance_key(result: SearchResult, query: str) -> tuple:
    """Sort key implementing the relevance policy.

    In order of significance:
      1. verified before unverified
      2. fewer reports first
      3. exact name match, then prefix match, then the rest
      4. known distance (nearest first) before unknown distance
      5. for verified items, most recently verified first
      6. name, case-insensitive
      7. item id, so that no two distinct results compare equal
    """
    if result.verified and result.verified_at is not None:
        recency = -result.verified_at.timestamp()
    else:
        recency = 0.0

    has_distance = result.distance_km is not None

    return (
        not result.verified,
        result.report_count,
        match_tier(result.name, query),
        not has_distance,
        result.distance_km if has_distance else 0.0,
        recency,
        result.name.casefold(),
        result.id,
    )


def compare_results(a: SearchResult, b: SearchResult, query: str) -> int:
    """Three-way comparison matching ``rank_results``: -1, 0 or 1."""
    key_a = relevance_key(a, query)
    key_b = relevance_key(b, query)
    return (key_a > key_b) - (key_a < key_b)


def rank_results(results: Iterable[SearchResult], query: str) -> list[SearchResult]:
    """Return a new list of results in relevance order.

    The sort is stable and the input is left untouched.
    """
    return sorted(results, key=lambda r: relevance_key(r, query))
