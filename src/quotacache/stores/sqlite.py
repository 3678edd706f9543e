"""
SQLiteStore: persistent host store backed by a single SQLite file.

Records live in one table:
- key (primary key)
- value (text)

Capacity is enforced on every write by summing key and value lengths, and
the engine's own "database or disk is full" error is reported as a quota
error too. Thread-safe for single-writer, multiple-reader scenarios.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from quotacache.exceptions import (
    ConfigurationError,
    QuotaExceededError,
    StoreError,
    UnsupportedStoreError,
)
from quotacache.logging import get_logger
from quotacache.stores.base import HostStore, record_size

logger = get_logger(__name__)


class SQLiteStore(HostStore):
    """SQLite-backed host store with a character quota."""

    def __init__(self, db_path: Path | str, capacity: int | None = None) -> None:
        """Initialize SQLiteStore.

        Args:
            db_path: Path to the database file, or ":memory:".
            capacity: Maximum characters (keys plus values), None for unbounded.
        """
        if capacity is not None and capacity <= 0:
            raise ConfigurationError(
                "Store capacity must be positive", context={"capacity": capacity}
            )
        self.db_path = db_path if db_path == ":memory:" else Path(db_path)
        self._capacity = capacity
        self._conn: sqlite3.Connection | None = None
        self._initialized = False

    def init(self) -> None:
        """Initialize the database schema.

        Creates the table if it doesn't exist. Safe to call multiple times.
        """
        if self._initialized:
            return

        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            conn = self._get_conn()
            conn.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()
        except sqlite3.Error as e:
            raise UnsupportedStoreError(
                f"Could not initialize store: {e}",
                context={"operation": "init", "path": str(self.db_path)},
            ) from e

        self._initialized = True
        logger.debug("SQLite store ready", path=str(self.db_path))

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(
                str(self.db_path),
                timeout=30.0,
                isolation_level="DEFERRED",
            )
        return self._conn

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._initialized = False

    def __enter__(self) -> SQLiteStore:
        self.init()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def capacity(self) -> int | None:
        return self._capacity

    @property
    def usage(self) -> int:
        row = self._execute(
            "usage",
            None,
            "SELECT COALESCE(SUM(LENGTH(key) + LENGTH(value)), 0) FROM records",
        ).fetchone()
        return int(row[0])

    def get(self, key: str) -> str | None:
        row = self._execute(
            "get", key, "SELECT value FROM records WHERE key = ?", (key,)
        ).fetchone()
        return None if row is None else row[0]

    def set(self, key: str, value: str) -> None:
        self.init()
        conn = self._get_conn()

        try:
            if self._capacity is not None:
                row = conn.execute(
                    """
                    SELECT COALESCE(SUM(LENGTH(key) + LENGTH(value)), 0)
                    FROM records WHERE key != ?
                    """,
                    (key,),
                ).fetchone()
                if int(row[0]) + record_size(key, value) > self._capacity:
                    raise QuotaExceededError(
                        "Host store quota exceeded",
                        context={
                            "key": key,
                            "required": record_size(key, value),
                            "capacity": self._capacity,
                        },
                    )

            conn.execute(
                "INSERT OR REPLACE INTO records (key, value) VALUES (?, ?)",
                (key, value),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            if getattr(e, "sqlite_errorcode", None) == sqlite3.SQLITE_FULL:
                raise QuotaExceededError(
                    "Database or disk is full", context={"key": key}
                ) from e
            raise StoreError(
                f"Could not write record: {e}",
                context={"operation": "set", "key": key},
            ) from e

    def remove(self, key: str) -> None:
        self._execute("remove", key, "DELETE FROM records WHERE key = ?", (key,))
        self._get_conn().commit()

    def keys(self) -> list[str]:
        rows = self._execute(
            "keys", None, "SELECT key FROM records ORDER BY rowid"
        ).fetchall()
        return [row[0] for row in rows]

    def __len__(self) -> int:
        row = self._execute("len", None, "SELECT COUNT(*) FROM records").fetchone()
        return int(row[0])

    def _execute(
        self,
        operation: str,
        key: str | None,
        sql: str,
        params: tuple[str, ...] = (),
    ) -> sqlite3.Cursor:
        self.init()
        try:
            return self._get_conn().execute(sql, params)
        except sqlite3.Error as e:
            raise StoreError(
                f"Store {operation} failed: {e}",
                context={"operation": operation, "key": key},
            ) from e
