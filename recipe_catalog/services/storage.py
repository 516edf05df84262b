"""
KV store implementations.
SQLite table emulating key/value semantics, with in-memory support for testing.
"""

import json
import logging
import sqlite3
import threading
import time
from typing import Any, List, Optional, Tuple

from recipe_catalog.core.errors import StorageError
from recipe_catalog.services.prometheus_metrics import (
    record_kv_error,
    record_kv_operation,
    record_scan_duration,
)

logger = logging.getLogger(__name__)

BACKEND = "sqlite"


def _init_schema(conn: sqlite3.Connection) -> None:
    """Create kv_store table if not exists."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
    """)
    conn.commit()


def _decode(key: str, raw: str) -> dict[str, Any]:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(f"corrupt value under {key}: {e.msg}") from e


class SQLiteKeyValueStore:
    """SQLite-backed KV store implementing KeyValueStore."""

    def __init__(self, db_path: Optional[str] = None) -> None:
        self._db_path = db_path or ":memory:"
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
            _init_schema(self._conn)
        except sqlite3.Error as e:
            raise StorageError(f"cannot open KV store at {self._db_path}: {e}") from e

    def _execute(self, operation: str, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        record_kv_operation(BACKEND, operation)
        try:
            with self._lock:
                cur = self._conn.execute(sql, params)
                if operation in ("set", "delete"):
                    self._conn.commit()
                return cur
        except sqlite3.Error as e:
            record_kv_error(BACKEND, operation)
            logger.error("KV %s failed: %s", operation, e)
            raise StorageError("storage unavailable") from e

    def get(self, key: str) -> Optional[dict[str, Any]]:
        row = self._execute(
            "get", "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return None
        return _decode(key, row[0])

    def set(self, key: str, value: dict[str, Any]) -> None:
        self._execute(
            "set",
            "INSERT INTO kv_store (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, json.dumps(value)),
        )

    def delete(self, key: str) -> bool:
        cur = self._execute("delete", "DELETE FROM kv_store WHERE key = ?", (key,))
        return cur.rowcount > 0

    def scan_prefix(self, prefix: str) -> List[Tuple[str, dict[str, Any]]]:
        start = time.perf_counter()
        rows = self._execute(
            "scan",
            "SELECT key, value FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix),
        ).fetchall()
        record_scan_duration(BACKEND, time.perf_counter() - start)
        return [(key, _decode(key, raw)) for key, raw in rows]

    def get_by_prefix(self, prefix: str) -> List[dict[str, Any]]:
        return [value for _, value in self.scan_prefix(prefix)]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
