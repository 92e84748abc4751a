"""Index of stores currently allowed to appear in search results."""

import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from finditfast.core.models import StoreRecord, StoreRef, StoreStatus

logger = logging.getLogger(__name__)


def build_approved_index(store_requests: Iterable[StoreRecord]) -> Mapping[str, StoreRecord]:
    """Build a read-only lookup of approved stores keyed by canonical store id.

    Records with any other status are dropped, even if the directory query
    was already filtered server-side. The index is meant to be rebuilt for
    every uncached search so a revoked store disappears immediately.
    """
    index: dict[str, StoreRecord] = {}
    skipped = 0
    for record in store_requests:
        if record.status is not StoreStatus.APPROVED:
            skipped += 1
            continue
        index[StoreRef.parse(record.id).canonical] = record

    if skipped:
        logger.debug("Ignored %d non-approved store records", skipped)
    return MappingProxyType(index)
