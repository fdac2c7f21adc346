"""
Record-set rotation: today's record, set rollover and eviction.
"""

import logging
from typing import NamedTuple

from .catalog import load_record_sets
from .protocol import KeyValueStoreProtocol
from .types import MAX_RECORD_SETS, ROLLOVER_WORD_COUNT, Catalog, Record, RecordSet

logger = logging.getLogger(__name__)


class Rotation(NamedTuple):
    """Result of resolving today's record. ``evicted_ids`` are removed after the write."""
    catalog: Catalog
    latest_set: RecordSet
    today_record: Record
    evicted_ids: list[str]


async def resolve_today_record(
    store: KeyValueStoreProtocol,
    catalog: Catalog,
    latest_set: RecordSet,
    *,
    today: str,
    rollover_word_count: int = ROLLOVER_WORD_COUNT,
    max_record_sets: int = MAX_RECORD_SETS,
) -> Rotation:
    """
    Return the record for ``today``, starting a new set or record as needed.

    A full set only rolls over when a new day's record is started, so a set
    may exceed the threshold within one day.
    """
    current = latest_set.latest_record
    if current is not None and current.date == today:
        return Rotation(catalog, latest_set, current, [])

    today_record = Record(date=today)
    evicted_ids: list[str] = []

    if latest_set.word_count >= rollover_word_count:
        latest_set = RecordSet.create()
        catalog.data.insert(0, latest_set.id)
        logger.info("Rolled over to record set %s", latest_set.id)

        if len(catalog.data) > max_record_sets:
            evicted_ids = catalog.data[max_record_sets:]
            del catalog.data[max_record_sets:]
            evicted = await load_record_sets(store, evicted_ids)
            released = sum(s.word_count for s in evicted.values())
            catalog.word_count = max(0, catalog.word_count - released)
            logger.info(
                "Evicting %d record set(s) (%d words): %s",
                len(evicted_ids), released, ", ".join(evicted_ids),
            )

    latest_set.data.insert(0, today_record)
    return Rotation(catalog, latest_set, today_record, evicted_ids)
