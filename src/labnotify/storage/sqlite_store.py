"""
SQLite key-value store for engine state.

Single-file, human-inspectable and survives process restarts.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from labnotify.errors import StorageError
from labnotify.storage.base import KeyValueStore


class SQLiteStore(KeyValueStore):
    """
    SQLite-based durable key-value store.

    Features:
    - ACID writes (one row per key)
    - WAL journal for concurrent readers
    - Portable single-file database
    """

    SCHEMA = """
    CREATE TABLE IF NOT EXISTS kv_entries (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """

    def __init__(self, db_path: str | Path):
        self._db_path = Path(db_path).expanduser()
        self._conn: sqlite3.Connection | None = None

    async def initialize(self) -> None:
        """Open the database and create the table."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(self.SCHEMA)
            self._conn.commit()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Cannot open {self._db_path}: {e}") from e

    async def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("SQLiteStore not initialized")
        return self._conn

    async def get(self, key: str) -> str | None:
        try:
            row = self.conn.execute(
                "SELECT value FROM kv_entries WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Read failed: {e}", key=key) from e
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        try:
            self.conn.execute(
                """
                INSERT INTO kv_entries (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now().isoformat()),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Write failed: {e}", key=key) from e

    async def remove(self, key: str) -> bool:
        try:
            cursor = self.conn.execute("DELETE FROM kv_entries WHERE key = ?", (key,))
            self.conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Delete failed: {e}", key=key) from e
        return cursor.rowcount > 0
