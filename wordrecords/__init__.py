"""
Word Records

A bounded store of time-stamped words per namespace ("area"). Words are
grouped into daily records inside record sets; a set rolls over after 500
word events and only the latest 20 sets are kept.

Quick Start:
    from wordrecords import RecordKeeper

    keeper = RecordKeeper.open()  # uses ~/.wordrecords/
    await keeper.add_record("en", "serendipity")
    words = await keeper.get_all_words("en")

CLI Usage:
    wordrecords add en serendipity
    wordrecords words en
    wordrecords page en 0 --json

Environment Variables:
    WORDRECORDS_STORE_PATH  - Override default store location
    WORDRECORDS_VERBOSE     - Set to 1 for debug logging in the CLI
"""

from .api import AreaRecords, RecordKeeper
from .memory_store import MemoryKeyValueStore
from .protocol import KeyValueStoreProtocol, RecordKeeperProtocol, StorageChange
from .sqlite_store import SqliteKeyValueStore
from .types import Area, Catalog, Record, RecordPage, RecordSet, date_key

__version__ = "0.1.0"
__all__ = [
    "RecordKeeper",
    "AreaRecords",
    "Area",
    "Catalog",
    "Record",
    "RecordSet",
    "RecordPage",
    "StorageChange",
    "KeyValueStoreProtocol",
    "RecordKeeperProtocol",
    "MemoryKeyValueStore",
    "SqliteKeyValueStore",
    "date_key",
]
