"""
Shared pytest fixtures for wordrecords tests.

Provides an in-memory store, a controllable clock and helpers to seed
catalogs and record sets directly in storage.
"""

from datetime import datetime, timedelta

import pytest

from wordrecords.api import RecordKeeper
from wordrecords.memory_store import MemoryKeyValueStore
from wordrecords.types import Catalog, Record, RecordSet, date_key


class FrozenClock:
    """Clock returning a fixed local time until advanced."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)

    @property
    def today(self) -> str:
        return date_key(self.now)


class FailingStore(MemoryKeyValueStore):
    """Memory store whose writes can be made to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_set = False
        self.fail_remove = False
        self.set_calls = 0
        self.remove_calls = []

    async def set(self, items):
        self.set_calls += 1
        if self.fail_set:
            raise OSError("simulated storage failure")
        await super().set(items)

    async def remove(self, keys):
        self.remove_calls.append(keys)
        if self.fail_remove:
            raise OSError("simulated storage failure")
        await super().remove(keys)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 3, 7, 9, 30))


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def keeper(store, clock):
    return RecordKeeper(store, clock=clock)


def make_set(set_id: str, word_count: int = 0, records=None) -> RecordSet:
    """A RecordSet with the given id, count and (date, words) records."""
    return RecordSet(
        id=set_id,
        data=[Record(date=d, data=list(w)) for d, w in (records or [])],
        word_count=word_count,
    )


async def seed(store, area: str, sets: list[RecordSet], *, missing: tuple = ()) -> Catalog:
    """
    Write a catalog for ``area`` referencing ``sets`` in order.

    Ids listed in ``missing`` are referenced by the catalog but not stored.
    """
    catalog = Catalog(
        data=[s.id for s in sets],
        word_count=sum(s.word_count for s in sets),
        timestamp=1,
    )
    items = {area + "Cat": catalog.to_dict()}
    for s in sets:
        if s.id not in missing:
            items[s.id] = s.to_dict()
    await store.set(items)
    return catalog
