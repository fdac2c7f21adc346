"""
Read paths and clearing for an area's records.

Missing or malformed data reads as "no data yet": empty lists, zero counts
and ``None`` pages. Only storage failures raise.
"""

import logging
from typing import Optional

from .catalog import load_catalog, load_record_sets
from .protocol import KeyValueStoreProtocol
from .types import Area, RecordPage

logger = logging.getLogger(__name__)


async def clear_records(store: KeyValueStoreProtocol, area: Area) -> None:
    """Remove every record set of the area, and its catalog."""
    catalog = await load_catalog(store, area)
    if catalog is None:
        return
    await store.remove([*catalog.data, area.catalog_key])
    logger.info("Cleared %d record set(s) from %s", len(catalog.data), area.name)


async def get_all_words(store: KeyValueStoreProtocol, area: Area) -> list[str]:
    """All words of the area, most recent first: by set, then day, then touch."""
    catalog = await load_catalog(store, area)
    if catalog is None:
        return []
    sets = await load_record_sets(store, catalog.data)
    words: list[str] = []
    for set_id in catalog.data:
        record_set = sets.get(set_id)
        if record_set is None:
            continue
        for record in record_set.data:
            words.extend(record.data)
    return words


async def get_record_set(
    store: KeyValueStoreProtocol,
    area: Area,
    index: int,
) -> Optional[RecordPage]:
    """The set at ``index`` (0 is the latest) with the page count, or None."""
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"Page index must be an int, got {type(index).__name__}")
    catalog = await load_catalog(store, area)
    if catalog is None or not 0 <= index < len(catalog.data):
        return None
    set_id = catalog.data[index]
    found = await load_record_sets(store, [set_id])
    if set_id not in found:
        return None
    return RecordPage(record_set=found[set_id], page_count=len(catalog.data))


async def get_word_count(store: KeyValueStoreProtocol, area: Area) -> int:
    """Total word events recorded in the area's live sets."""
    catalog = await load_catalog(store, area)
    return catalog.word_count if catalog is not None else 0
