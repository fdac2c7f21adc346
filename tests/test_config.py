"""
Tests for store configuration and backend selection.
"""

import pytest

from wordrecords.api import RecordKeeper
from wordrecords.backend import create_store
from wordrecords.config import (
    CONFIG_FILENAME,
    Limits,
    StoreConfig,
    get_default_store_path,
    load_config,
    load_or_create_config,
    save_config,
)
from wordrecords.memory_store import MemoryKeyValueStore
from wordrecords.sqlite_store import SqliteKeyValueStore


class TestConfigFile:

    def test_created_with_defaults(self, tmp_path):
        config = load_or_create_config(tmp_path)
        assert (tmp_path / CONFIG_FILENAME).exists()
        assert config.backend == "sqlite"
        assert config.limits == Limits(rollover_word_count=500, max_record_sets=20)

    def test_saved_values_are_loaded(self, tmp_path):
        save_config(StoreConfig(
            path=tmp_path, backend="memory",
            limits=Limits(rollover_word_count=50, max_record_sets=5),
        ))
        config = load_or_create_config(tmp_path, backend="sqlite")
        assert config.backend == "memory"
        assert config.limits.rollover_word_count == 50
        assert config.limits.max_record_sets == 5

    def test_missing_config(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path)

    def test_newer_version_rejected(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("[store]\nversion = 99\n")
        with pytest.raises(ValueError, match="newer than supported"):
            load_config(tmp_path)

    def test_invalid_toml_rejected(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("[store\n")
        with pytest.raises(ValueError):
            load_config(tmp_path)

    def test_invalid_limits_rejected(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("[limits]\nmax_record_sets = 0\n")
        with pytest.raises(ValueError, match="max_record_sets"):
            load_config(tmp_path)

    def test_store_path_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("WORDRECORDS_STORE_PATH", str(tmp_path / "records"))
        assert get_default_store_path() == tmp_path / "records"


class TestBackends:

    def test_sqlite_backend(self, tmp_path):
        store = create_store(StoreConfig(path=tmp_path))
        assert isinstance(store, SqliteKeyValueStore)
        store.close()
        assert (tmp_path / "records.db").exists()

    def test_memory_backend(self, tmp_path):
        assert isinstance(create_store(StoreConfig(path=tmp_path, backend="memory")), MemoryKeyValueStore)

    def test_unknown_backend(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown backend"):
            create_store(StoreConfig(path=tmp_path, backend="nope"))


class TestOpen:

    @pytest.mark.asyncio
    async def test_records_persist_in_store_directory(self, tmp_path):
        async with RecordKeeper.open(tmp_path) as keeper:
            await keeper.add_record("en", "apple")
            await keeper.add_record("en", "pear")
        async with RecordKeeper.open(tmp_path) as keeper:
            assert await keeper.get_all_words("en") == ["pear", "apple"]
            assert await keeper.get_word_count("en") == 2

    def test_limits_come_from_config(self, tmp_path):
        save_config(StoreConfig(
            path=tmp_path, backend="memory",
            limits=Limits(rollover_word_count=7, max_record_sets=3),
        ))
        keeper = RecordKeeper.open(tmp_path)
        assert keeper.limits.rollover_word_count == 7
        assert keeper.limits.max_record_sets == 3
