"""
Data types for word records.

Stored values keep the camelCase field names of the storage layout
(``id``, ``date``, ``data``, ``wordCount``, ``timestamp``) so existing stores
stay readable.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

logger = logging.getLogger(__name__)


# Start a new RecordSet once the latest one holds this many word events
ROLLOVER_WORD_COUNT = 500

# Maximum RecordSet ids kept in a catalog; older sets are evicted
MAX_RECORD_SETS = 20

# Catalog keys are "<area>Cat"
CATALOG_KEY_SUFFIX = "Cat"


def date_key(when: Optional[datetime] = None) -> str:
    """Local calendar date as MMDDYYYY, each part zero padded."""
    d = when if when is not None else datetime.now()
    return f"{d.month:02d}{d.day:02d}{d.year:04d}"


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def new_set_id() -> str:
    """
    Allocate a RecordSet id.

    Time-derived like the catalog timestamp, with a random suffix so two
    namespaces sharing one key space never collide within a millisecond.
    """
    return f"{now_ms()}-{uuid.uuid4().hex[:8]}"


def validate_area(area: str) -> None:
    """Validate a namespace name."""
    if not isinstance(area, str):
        raise TypeError(f"Area must be a string, got {type(area).__name__}")
    if not area:
        raise ValueError("Area must not be empty")


def _is_count(value: Any) -> bool:
    """A stored non-negative integer count (bools are not counts)."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def validate_word(word: str) -> None:
    """Validate a word before it is recorded."""
    if not isinstance(word, str):
        raise TypeError(f"Word must be a string, got {type(word).__name__}")
    if not word:
        raise ValueError("Word must not be empty")


@dataclass(frozen=True)
class Area:
    """
    A namespace handle.

    The only place a namespace name is turned into a storage key.
    """
    name: str

    def __post_init__(self):
        validate_area(self.name)

    @property
    def catalog_key(self) -> str:
        return self.name + CATALOG_KEY_SUFFIX


@dataclass
class Record:
    """One calendar day of words, most recently touched first."""
    date: str
    data: list[str] = field(default_factory=list)

    def touch(self, word: str) -> bool:
        """
        Move ``word`` to the front, inserting it if absent.

        Returns True if the word was not already in this record.
        """
        try:
            self.data.remove(word)
            is_new = False
        except ValueError:
            is_new = True
        self.data.insert(0, word)
        return is_new

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "data": list(self.data)}

    @classmethod
    def from_dict(cls, value: dict[str, Any]) -> "Record":
        date = value["date"]
        data = value.get("data", [])
        if not isinstance(date, str) or not isinstance(data, list):
            raise ValueError("Record needs a string date and a word list")
        if not all(isinstance(w, str) for w in data):
            raise ValueError("Record words must be strings")
        return cls(date=date, data=list(data))


@dataclass
class RecordSet:
    """A bucket of daily records, most recent day first."""
    id: str
    data: list[Record] = field(default_factory=list)
    word_count: int = 0

    @classmethod
    def create(cls) -> "RecordSet":
        """A fresh, empty set with a new id."""
        return cls(id=new_set_id())

    @property
    def latest_record(self) -> Optional[Record]:
        return self.data[0] if self.data else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "data": [r.to_dict() for r in self.data],
            "wordCount": self.word_count,
        }

    @classmethod
    def from_dict(cls, value: dict[str, Any]) -> "RecordSet":
        set_id = value["id"]
        records = value.get("data", [])
        word_count = value.get("wordCount", 0)
        if not isinstance(set_id, str) or not isinstance(records, list):
            raise ValueError("RecordSet needs a string id and a record list")
        if not _is_count(word_count):
            raise ValueError(f"Invalid wordCount: {word_count!r}")
        return cls(
            id=set_id,
            data=[Record.from_dict(r) for r in records],
            word_count=word_count,
        )


@dataclass
class Catalog:
    """
    Per-namespace index of RecordSet ids, most recent first.

    ``word_count`` is the sum of the referenced sets' counts; ``timestamp``
    changes on every write so subscribers see each append.
    """
    data: list[str] = field(default_factory=list)
    word_count: int = 0
    timestamp: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        value: dict[str, Any] = {
            "data": list(self.data),
            "wordCount": self.word_count,
        }
        if self.timestamp is not None:
            value["timestamp"] = self.timestamp
        return value

    @classmethod
    def from_dict(cls, value: dict[str, Any]) -> "Catalog":
        data = value["data"]
        word_count = value.get("wordCount", 0)
        timestamp = value.get("timestamp")
        if not isinstance(data, list) or not all(isinstance(i, str) for i in data):
            raise ValueError("Catalog data must be a list of set ids")
        if not _is_count(word_count):
            raise ValueError(f"Invalid wordCount: {word_count!r}")
        if timestamp is not None and not _is_count(timestamp):
            raise ValueError(f"Invalid timestamp: {timestamp!r}")
        return cls(data=list(data), word_count=word_count, timestamp=timestamp)


@dataclass
class RecordPage:
    """One page (RecordSet) of a namespace and the total page count."""
    record_set: RecordSet
    page_count: int


def parse_catalog(value: Any, key: str = "") -> Optional[Catalog]:
    """Parse a stored catalog; None for absent or malformed values."""
    if value is None:
        return None
    try:
        return Catalog.from_dict(value)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Ignoring malformed catalog %s: %s", key, e)
        return None


def parse_record_set(value: Any, key: str = "") -> Optional[RecordSet]:
    """Parse a stored RecordSet; None for absent or malformed values."""
    if value is None:
        return None
    try:
        return RecordSet.from_dict(value)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Ignoring malformed record set %s: %s", key, e)
        return None
