"""
The write path: record one word into today's record of an area.
"""

import logging
from datetime import datetime
from typing import Callable

from .catalog import resolve_latest_set
from .protocol import KeyValueStoreProtocol
from .rotation import resolve_today_record
from .types import MAX_RECORD_SETS, ROLLOVER_WORD_COUNT, Area, date_key

logger = logging.getLogger(__name__)


async def append_word(
    store: KeyValueStoreProtocol,
    area: Area,
    word: str,
    *,
    clock: Callable[[], datetime] = datetime.now,
    rollover_word_count: int = ROLLOVER_WORD_COUNT,
    max_record_sets: int = MAX_RECORD_SETS,
) -> None:
    """
    Record ``word`` at the front of today's record.

    A word already recorded today moves to the front without counting
    again. The catalog and the latest set are written in one ``set`` call;
    evicted sets are removed only after that write succeeds, and a failure
    to remove them is logged rather than raised. Storage errors on the
    reads and the combined write propagate unchanged.
    """
    now = clock()
    catalog, latest_set = await resolve_latest_set(store, area)
    rotation = await resolve_today_record(
        store, catalog, latest_set,
        today=date_key(now),
        rollover_word_count=rollover_word_count,
        max_record_sets=max_record_sets,
    )
    catalog, latest_set, today_record, evicted_ids = rotation

    if today_record.touch(word):
        latest_set.word_count += 1
        catalog.word_count += 1
    catalog.timestamp = int(now.timestamp() * 1000)

    await store.set({
        area.catalog_key: catalog.to_dict(),
        latest_set.id: latest_set.to_dict(),
    })
    logger.debug(
        "Recorded %r in %s (set %s, %d words)",
        word, area.name, latest_set.id, catalog.word_count,
    )

    if evicted_ids:
        # The append has committed; a failed cleanup only leaves unreferenced sets
        try:
            await store.remove(evicted_ids)
        except Exception as e:
            logger.warning(
                "Could not remove evicted record set(s) %s from %s: %s",
                ", ".join(evicted_ids), area.name, e,
            )
