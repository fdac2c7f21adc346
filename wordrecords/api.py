"""
Core API for word records.

    keeper = RecordKeeper(MemoryKeyValueStore())
    await keeper.add_record("en", "serendipity")
    words = await keeper.get_all_words("en")

Each area is an independent namespace. ``keeper.area(name)`` returns a
handle bound to one area, so callers pass the namespace once instead of
repeating the name.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Union

from . import append, queries
from .config import Limits, StoreConfig, load_or_create_config
from .protocol import KeyValueStoreProtocol, Unsubscribe
from .types import Area, RecordPage, validate_word

logger = logging.getLogger(__name__)

AreaLike = Union[str, Area]


def _as_area(area: AreaLike) -> Area:
    return area if isinstance(area, Area) else Area(area)


class RecordKeeper:
    """
    Word records for any number of areas, over one key-value store.

    Every operation re-reads what it needs from the store; the keeper holds
    no cached state. Concurrent ``add_record`` calls on the same area are
    not serialized and may lose an update.
    """

    def __init__(
        self,
        store: KeyValueStoreProtocol,
        *,
        limits: Optional[Limits] = None,
        clock: Callable[[], datetime] = datetime.now,
        config: Optional[StoreConfig] = None,
    ):
        """
        Args:
            store: Key-value backend holding catalogs and record sets
            limits: Rollover and eviction limits (defaults: 500 words, 20 sets)
            clock: Returns the local wall-clock time; injectable for tests
            config: The store configuration, when opened from a store directory
        """
        self._store = store
        self._limits = limits or (config.limits if config else Limits())
        self._clock = clock
        self.config = config

    @classmethod
    def open(
        cls,
        store_path: Optional[Path] = None,
        *,
        backend: Optional[str] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "RecordKeeper":
        """Open (creating if needed) the store directory and its configured backend."""
        from .backend import create_store

        config = load_or_create_config(store_path, backend=backend)
        store = create_store(config)
        logger.debug("Opened %s store at %s", config.backend, config.path)
        return cls(store, config=config, clock=clock)

    @property
    def store(self) -> KeyValueStoreProtocol:
        return self._store

    @property
    def limits(self) -> Limits:
        return self._limits

    def area(self, name: str) -> "AreaRecords":
        """A handle bound to one area."""
        return AreaRecords(self, Area(name))

    # -- Write operations --

    async def add_record(self, area: AreaLike, word: str) -> None:
        """Record ``word`` at the front of today's record for ``area``."""
        validate_word(word)
        await append.append_word(
            self._store, _as_area(area), word,
            clock=self._clock,
            rollover_word_count=self._limits.rollover_word_count,
            max_record_sets=self._limits.max_record_sets,
        )

    async def clear_records(self, area: AreaLike) -> None:
        """Remove all records of ``area``."""
        await queries.clear_records(self._store, _as_area(area))

    def listen_record(self, area: AreaLike, callback: Any) -> Optional[Unsubscribe]:
        """
        Call ``callback`` with a StorageChange whenever the area's catalog
        changes. Returns an unsubscribe function, or None (and registers
        nothing) if ``callback`` is not callable.
        """
        if not callable(callback):
            return None
        return self._store.subscribe(_as_area(area).catalog_key, callback)

    # -- Query operations --

    async def get_all_words(self, area: AreaLike) -> list[str]:
        """All words of ``area``, most recent first."""
        return await queries.get_all_words(self._store, _as_area(area))

    async def get_record_set(self, area: AreaLike, index: int) -> Optional[RecordPage]:
        """The record set at page ``index`` (0 is the latest), or None."""
        return await queries.get_record_set(self._store, _as_area(area), index)

    async def get_word_count(self, area: AreaLike) -> int:
        """Word events recorded in ``area``."""
        return await queries.get_word_count(self._store, _as_area(area))

    # -- Lifecycle --

    def close(self) -> None:
        self._store.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class AreaRecords:
    """The operations of a RecordKeeper bound to a single area."""

    def __init__(self, keeper: RecordKeeper, area: Area):
        self._keeper = keeper
        self.area = area

    @property
    def name(self) -> str:
        return self.area.name

    async def add(self, word: str) -> None:
        await self._keeper.add_record(self.area, word)

    async def clear(self) -> None:
        await self._keeper.clear_records(self.area)

    def listen(self, callback: Any) -> Optional[Unsubscribe]:
        return self._keeper.listen_record(self.area, callback)

    async def words(self) -> list[str]:
        return await self._keeper.get_all_words(self.area)

    async def page(self, index: int) -> Optional[RecordPage]:
        return await self._keeper.get_record_set(self.area, index)

    async def word_count(self) -> int:
        return await self._keeper.get_word_count(self.area)

    def __repr__(self) -> str:
        return f"AreaRecords({self.area.name!r})"
