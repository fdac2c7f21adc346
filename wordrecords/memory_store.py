"""
In-process key-value store.

Holds values for the lifetime of the process. Used for tests and for
applications that persist elsewhere. Values are kept JSON-encoded, like the
SQLite backend, so callers never share state with the store and values that
could not be persisted are rejected the same way.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from .protocol import ChangeCallback, StorageChange, Unsubscribe, normalize_keys
from .subscriptions import Subscribers

logger = logging.getLogger(__name__)


class MemoryKeyValueStore:
    """Dict-backed implementation of KeyValueStoreProtocol."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._data: dict[str, str] = {
            k: json.dumps(v, ensure_ascii=False) for k, v in (initial or {}).items()
        }
        self._subscribers = Subscribers()

    async def get(self, keys: Union[str, Iterable[str]]) -> dict[str, Any]:
        return {
            k: json.loads(self._data[k])
            for k in normalize_keys(keys)
            if k in self._data
        }

    async def set(self, items: Mapping[str, Any]) -> None:
        # Encode everything first so a bad value leaves the store untouched
        encoded = {k: json.dumps(v, ensure_ascii=False) for k, v in items.items()}
        changes = [
            StorageChange(
                k,
                json.loads(self._data[k]) if k in self._data else None,
                json.loads(encoded[k]),
            )
            for k in self._subscribers.watched(encoded)
        ]
        self._data.update(encoded)
        await self._subscribers.notify(changes)

    async def remove(self, keys: Union[str, Iterable[str]]) -> None:
        key_list = normalize_keys(keys)
        watched = set(self._subscribers.watched(key_list))
        changes = []
        for k in key_list:
            if k not in self._data:
                continue
            old = self._data.pop(k)
            if k in watched:
                changes.append(StorageChange(k, json.loads(old), None))
        await self._subscribers.notify(changes)

    def subscribe(self, key: str, callback: ChangeCallback) -> Unsubscribe:
        return self._subscribers.add(key, callback)

    def keys(self) -> list[str]:
        """All stored keys (for inspection and tests)."""
        return list(self._data)

    def close(self) -> None:
        self._subscribers.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data
