"""
Key-value store using SQLite.

Each key is one row holding a JSON value. A multi-key ``set`` runs inside a
single IMMEDIATE transaction, so a catalog and its latest record set are
written together or not at all.

Blocking SQLite calls run in a worker thread (``asyncio.to_thread``); a
lock serializes access to the shared connection.
"""

import asyncio
import json
import logging
import sqlite3
import threading
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from .protocol import ChangeCallback, StorageChange, Unsubscribe, normalize_keys
from .subscriptions import Subscribers

logger = logging.getLogger(__name__)

# SQLite's default limit on host parameters is 999 on older builds
_MAX_PARAMS = 500


class SqliteKeyValueStore:
    """
    SQLite-backed implementation of KeyValueStoreProtocol.

    Change notifications are delivered to subscribers registered on this
    instance; writes made by other processes are not observed.
    """

    def __init__(self, db_path: Path):
        """
        Args:
            db_path: Path to SQLite database file
        """
        self._db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()
        self._subscribers = Subscribers()
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the SQLite database."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        # isolation_level=None gives manual transaction control
        self._conn = sqlite3.connect(
            str(self._db_path), check_same_thread=False,
            isolation_level=None,
        )
        # WAL for concurrent readers across processes
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA busy_timeout=5000")

        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value_json TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        logger.debug("Opened key-value store at %s", self._db_path)

    def _now(self) -> str:
        """Current timestamp in ISO format."""
        return datetime.now(timezone.utc).isoformat()

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise sqlite3.ProgrammingError("Key-value store is closed")
        return self._conn

    # -------------------------------------------------------------------------
    # Blocking operations (run in a worker thread)
    # -------------------------------------------------------------------------

    def _select(self, conn: sqlite3.Connection, keys: list[str]) -> dict[str, str]:
        found: dict[str, str] = {}
        for start in range(0, len(keys), _MAX_PARAMS):
            chunk = keys[start:start + _MAX_PARAMS]
            placeholders = ",".join("?" * len(chunk))
            cursor = conn.execute(
                f"SELECT key, value_json FROM kv WHERE key IN ({placeholders})",
                chunk,
            )
            for key, value_json in cursor:
                found[key] = value_json
        return found

    def _get_sync(self, keys: list[str]) -> dict[str, Any]:
        with self._lock:
            rows = self._select(self._require_conn(), keys)
        result = {}
        for key in keys:
            if key not in rows:
                continue
            try:
                result[key] = json.loads(rows[key])
            except json.JSONDecodeError as e:
                # Unreadable values look like missing ones to callers
                logger.warning("Skipping undecodable value for %s: %s", key, e)
        return result

    def _set_sync(
        self, encoded: dict[str, str], watched: list[str],
    ) -> dict[str, Optional[str]]:
        """Write all rows in one transaction. Returns previous JSON of watched keys."""
        now = self._now()
        with self._lock:
            conn = self._require_conn()
            conn.execute("BEGIN IMMEDIATE")
            try:
                previous = self._select(conn, watched) if watched else {}
                conn.executemany("""
                    INSERT OR REPLACE INTO kv (key, value_json, updated_at)
                    VALUES (?, ?, ?)
                """, [(k, v, now) for k, v in encoded.items()])
                conn.execute("COMMIT")
            except BaseException:
                conn.execute("ROLLBACK")
                raise
        return {k: previous.get(k) for k in watched}

    def _remove_sync(self, keys: list[str], watched: list[str]) -> dict[str, str]:
        """Delete rows in one transaction. Returns previous JSON of removed watched keys."""
        with self._lock:
            conn = self._require_conn()
            conn.execute("BEGIN IMMEDIATE")
            try:
                previous = self._select(conn, watched) if watched else {}
                conn.executemany(
                    "DELETE FROM kv WHERE key = ?", [(k,) for k in keys],
                )
                conn.execute("COMMIT")
            except BaseException:
                conn.execute("ROLLBACK")
                raise
        return previous

    # -------------------------------------------------------------------------
    # Async interface
    # -------------------------------------------------------------------------

    async def get(self, keys: Union[str, Iterable[str]]) -> dict[str, Any]:
        key_list = normalize_keys(keys)
        if not key_list:
            return {}
        return await asyncio.to_thread(self._get_sync, key_list)

    async def set(self, items: Mapping[str, Any]) -> None:
        if not items:
            return
        # Encode before opening the transaction: a bad value writes nothing
        encoded = {k: json.dumps(v, ensure_ascii=False) for k, v in items.items()}
        watched = self._subscribers.watched(encoded)
        previous = await asyncio.to_thread(self._set_sync, encoded, watched)
        await self._subscribers.notify(
            StorageChange(
                k,
                json.loads(previous[k]) if previous[k] is not None else None,
                json.loads(encoded[k]),
            )
            for k in watched
        )

    async def remove(self, keys: Union[str, Iterable[str]]) -> None:
        key_list = normalize_keys(keys)
        if not key_list:
            return
        watched = self._subscribers.watched(key_list)
        previous = await asyncio.to_thread(self._remove_sync, key_list, watched)
        await self._subscribers.notify(
            StorageChange(k, json.loads(v), None) for k, v in previous.items()
        )

    def subscribe(self, key: str, callback: ChangeCallback) -> Unsubscribe:
        return self._subscribers.add(key, callback)

    def count(self) -> int:
        """Number of stored keys."""
        with self._lock:
            cursor = self._require_conn().execute("SELECT COUNT(*) FROM kv")
            return cursor.fetchone()[0]

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the database connection."""
        self._subscribers.clear()
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.debug("Closed key-value store at %s", self._db_path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
