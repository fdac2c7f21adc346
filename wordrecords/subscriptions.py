"""
Change subscriptions shared by the storage backends.

Backends record the old and new value of each key they write and hand the
changes to ``Subscribers.notify`` once the write is durable.
"""

import inspect
import logging
from collections import defaultdict
from collections.abc import Iterable

from .protocol import ChangeCallback, StorageChange, Unsubscribe

logger = logging.getLogger(__name__)


class Subscribers:
    """Callbacks registered per key."""

    def __init__(self):
        self._callbacks: dict[str, list[ChangeCallback]] = defaultdict(list)

    def add(self, key: str, callback: ChangeCallback) -> Unsubscribe:
        self._callbacks[key].append(callback)

        def unsubscribe() -> None:
            callbacks = self._callbacks.get(key)
            if callbacks and callback in callbacks:
                callbacks.remove(callback)
                if not callbacks:
                    del self._callbacks[key]

        return unsubscribe

    def watched(self, keys: Iterable[str]) -> list[str]:
        """The subset of ``keys`` that has at least one subscriber."""
        return [k for k in keys if self._callbacks.get(k)]

    async def notify(self, changes: Iterable[StorageChange]) -> None:
        """
        Deliver changes to subscribers.

        A failing subscriber is logged and skipped; it never fails the
        write that produced the change.
        """
        for change in changes:
            for callback in list(self._callbacks.get(change.key, ())):
                try:
                    result = callback(change)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception("Subscriber for %s failed", change.key)

    def clear(self) -> None:
        self._callbacks.clear()
