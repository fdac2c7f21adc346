"""
Protocol definitions for the record keeper and its storage backends.

Defines interface contracts at two levels:
- RecordKeeperProtocol: the public API (CLI, embedding applications)
- KeyValueStoreProtocol: the storage backend (in-memory, SQLite, or any
  backend registered under the ``wordrecords.backends`` entry point group)
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol, Union, runtime_checkable

from .types import RecordPage


@dataclass(frozen=True)
class StorageChange:
    """A change to one key, delivered to subscribers after the write."""
    key: str
    old_value: Any = None
    new_value: Any = None


ChangeCallback = Callable[[StorageChange], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], None]


@runtime_checkable
class KeyValueStoreProtocol(Protocol):
    """
    Async key-value storage keyed by opaque string ids.

    Values are JSON-compatible (dicts, lists, strings, numbers).
    A single ``set`` call is atomic across all of its keys.
    """

    async def get(self, keys: Union[str, Iterable[str]]) -> dict[str, Any]:
        """Values by key; missing keys are absent from the result."""
        ...

    async def set(self, items: Mapping[str, Any]) -> None:
        """Write all keys, or none of them."""
        ...

    async def remove(self, keys: Union[str, Iterable[str]]) -> None:
        """Remove keys; missing keys are ignored."""
        ...

    def subscribe(self, key: str, callback: ChangeCallback) -> Unsubscribe:
        """Call ``callback`` whenever ``key`` changes. Returns an unsubscribe function."""
        ...

    def close(self) -> None: ...


@runtime_checkable
class RecordKeeperProtocol(Protocol):
    """The public interface for per-namespace word records."""

    # -- Write operations --

    async def add_record(self, area: str, word: str) -> None: ...

    async def clear_records(self, area: str) -> None: ...

    def listen_record(
        self, area: str, callback: Any,
    ) -> Optional[Unsubscribe]: ...

    # -- Query operations --

    async def get_all_words(self, area: str) -> list[str]: ...

    async def get_record_set(self, area: str, index: int) -> Optional[RecordPage]: ...

    async def get_word_count(self, area: str) -> int: ...


def normalize_keys(keys: Union[str, Iterable[str]]) -> list[str]:
    """Accept a single key or an iterable of keys; keep order, drop duplicates."""
    if isinstance(keys, str):
        return [keys]
    return list(dict.fromkeys(keys))
