"""
Tests for resolving the latest record set and catalog self-healing.
"""

import pytest

from tests.conftest import make_set, seed
from wordrecords.catalog import load_catalog, load_record_sets, resolve_latest_set
from wordrecords.types import Area


AREA = Area("en")


class TestResolveLatestSet:

    @pytest.mark.asyncio
    async def test_no_catalog_gives_fresh_state(self, store):
        catalog, latest = await resolve_latest_set(store, AREA)
        assert latest.data == [] and latest.word_count == 0
        assert catalog.data == [latest.id]
        assert catalog.word_count == 0
        # Nothing is written until the append commits
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_empty_catalog_gives_fresh_state(self, store):
        await store.set({"enCat": {"data": [], "wordCount": 0}})
        catalog, latest = await resolve_latest_set(store, AREA)
        assert catalog.data == [latest.id]

    @pytest.mark.asyncio
    async def test_malformed_catalog_gives_fresh_state(self, store):
        await store.set({"enCat": {"wordCount": "lots"}})
        catalog, latest = await resolve_latest_set(store, AREA)
        assert catalog.data == [latest.id]
        assert catalog.word_count == 0

    @pytest.mark.asyncio
    async def test_existing_latest_set_returned_unchanged(self, store):
        sets = [make_set("s2", 3, [("03072026", ["a", "b", "c"])]), make_set("s1", 5)]
        await seed(store, "en", sets)
        catalog, latest = await resolve_latest_set(store, AREA)
        assert catalog.data == ["s2", "s1"]
        assert catalog.word_count == 8
        assert latest == sets[0]


class TestSelfHeal:

    @pytest.mark.asyncio
    async def test_missing_latest_set_is_replaced(self, store):
        """Catalog of 3 ids with the first missing keeps the other 2."""
        sets = [make_set("s3", 7), make_set("s2", 4), make_set("s1", 9)]
        await seed(store, "en", sets, missing=("s3",))

        catalog, latest = await resolve_latest_set(store, AREA)

        assert latest.id not in ("s1", "s2", "s3")
        assert latest.word_count == 0 and latest.data == []
        assert catalog.data == [latest.id, "s2", "s1"]
        assert catalog.word_count == 13

    @pytest.mark.asyncio
    async def test_all_sets_missing(self, store):
        sets = [make_set("s3", 7), make_set("s2", 4)]
        await seed(store, "en", sets, missing=("s3", "s2"))
        catalog, latest = await resolve_latest_set(store, AREA)
        assert catalog.data == [latest.id]
        assert catalog.word_count == 0

    @pytest.mark.asyncio
    async def test_drops_missing_and_corrupt_older_sets(self, store):
        sets = [make_set("s4", 1), make_set("s3", 2), make_set("s2", 3), make_set("s1", 4)]
        await seed(store, "en", sets, missing=("s4", "s2"))
        await store.set({"s3": {"id": "s3", "data": "garbage", "wordCount": 2}})

        catalog, latest = await resolve_latest_set(store, AREA)

        assert catalog.data == [latest.id, "s1"]
        assert catalog.word_count == 4

    @pytest.mark.asyncio
    async def test_self_heal_is_logged(self, store, caplog):
        await seed(store, "en", [make_set("s2", 1), make_set("s1", 1)], missing=("s2",))
        await resolve_latest_set(store, AREA)
        assert "references missing set s2" in caplog.text


class TestLoaders:

    @pytest.mark.asyncio
    async def test_load_catalog_absent(self, store):
        assert await load_catalog(store, AREA) is None

    @pytest.mark.asyncio
    async def test_load_record_sets_skips_missing(self, store):
        await seed(store, "en", [make_set("s2", 1), make_set("s1", 2)], missing=("s2",))
        found = await load_record_sets(store, ["s2", "s1"])
        assert list(found) == ["s1"]
        assert await load_record_sets(store, []) == {}
