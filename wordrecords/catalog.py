"""
Catalog management: loading a namespace's catalog and its record sets,
and repairing catalogs that reference missing sets.
"""

import logging
from collections.abc import Iterable
from typing import NamedTuple, Optional

from .protocol import KeyValueStoreProtocol
from .types import Area, Catalog, RecordSet, parse_catalog, parse_record_set

logger = logging.getLogger(__name__)


class LatestSet(NamedTuple):
    """A catalog and the set new words go into. Not yet persisted."""
    catalog: Catalog
    latest_set: RecordSet


async def load_catalog(store: KeyValueStoreProtocol, area: Area) -> Optional[Catalog]:
    """The area's catalog, or None if absent or malformed."""
    key = area.catalog_key
    found = await store.get(key)
    return parse_catalog(found.get(key), key)


async def load_record_sets(
    store: KeyValueStoreProtocol,
    ids: Iterable[str],
) -> dict[str, RecordSet]:
    """Fetch sets by id. Missing and malformed sets are omitted."""
    ids = list(ids)
    if not ids:
        return {}
    found = await store.get(ids)
    sets = {}
    for set_id in ids:
        record_set = parse_record_set(found.get(set_id), set_id)
        if record_set is not None:
            sets[set_id] = record_set
    return sets


async def resolve_latest_set(store: KeyValueStoreProtocol, area: Area) -> LatestSet:
    """
    Find the set that today's words go into.

    With no catalog (or an empty one) both the catalog and the set are new.
    If the catalog's latest set is missing from storage, the catalog is
    repaired: dangling ids are dropped, the word count is recomputed from
    the sets that remain, and a fresh set goes in front.
    """
    catalog = await load_catalog(store, area)
    if catalog is None or not catalog.data:
        latest_set = RecordSet.create()
        return LatestSet(Catalog(data=[latest_set.id]), latest_set)

    latest_id = catalog.data[0]
    found = await load_record_sets(store, [latest_id])
    if latest_id in found:
        return LatestSet(catalog, found[latest_id])

    latest_set = RecordSet.create()
    remaining = await load_record_sets(store, catalog.data[1:])
    kept = [set_id for set_id in catalog.data if set_id in remaining]
    logger.warning(
        "Catalog %s references missing set %s; dropped %d dangling id(s)",
        area.catalog_key, latest_id, len(catalog.data) - len(kept),
    )
    catalog.data = [latest_set.id] + kept
    catalog.word_count = sum(remaining[set_id].word_count for set_id in kept)
    return LatestSet(catalog, latest_set)
