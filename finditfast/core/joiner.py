"""Join item matches with the approved store index."""

import logging
from typing import Iterable, Mapping, Optional

from finditfast.core.geodesic import distance_km
from finditfast.core.models import Coordinates, Item, SearchResult, StoreRecord

logger = logging.getLogger(__name__)


def _store_distance(store: StoreRecord, user_location: Optional[Coordinates]) -> Optional[float]:
    if user_location is None or store.location is None:
        return None
    if store.location.is_placeholder:
        return None
    return distance_km(user_location, store.location)


def join_items(
    items: Iterable[Item],
    approved_stores: Mapping[str, StoreRecord],
    user_location: Optional[Coordinates] = None,
) -> list[SearchResult]:
    """Attach store data (and distance, when computable) to each item.

    Items whose store is not in ``approved_stores`` are dropped, however well
    their name matches. ``distance_km`` stays None when there is no user
    location or the store has no usable coordinates.

    Args:
        items: Text matches from the item index
        approved_stores: Output of ``build_approved_index``
        user_location: Where the user is, if known

    Returns:
        Joined results in input order
    """
    results = []
    dropped = 0
    for item in items:
        store = approved_stores.get(item.store_ref.canonical)
        if store is None:
            dropped += 1
            continue
        results.append(
            SearchResult(
                item=item,
                store=store,
                distance_km=_store_distance(store, user_location),
            )
        )

    if dropped:
        logger.debug("Dropped %d items from unapproved stores", dropped)
    return results
