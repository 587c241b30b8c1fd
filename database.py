"""
SQLite store for dayplan.
Self-bootstrapping: creates the DB file and tasks table on first run, then
applies the priority column migration for databases created before it existed.
"""
from __future__ import annotations

import logging
import sqlite3
import sys
import threading
from pathlib import Path
from typing import Any, Sequence

logger = logging.getLogger("database")

# Wait up to this many seconds for locks held by another process
_CONNECT_TIMEOUT = 30.0

_SCHEMA = """
CREATE TABLE IF NOT EXISTS tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    text TEXT NOT NULL,
    date TEXT,
    createdAt TEXT,
    priority TEXT DEFAULT 'low',
    completed INTEGER DEFAULT 0
)
"""


class StoreError(RuntimeError):
    """Any failure from the persistence layer. Message is the sqlite message."""


class Database:
    """One shared sqlite connection, serialized by a lock."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.connection: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def open(self) -> "Database":
        """
        Open (create if missing) the database file and bring the schema up to date.
        Never raises: failures are logged and later calls fail per request.
        """
        try:
            conn = sqlite3.connect(str(self.path), timeout=_CONNECT_TIMEOUT, check_same_thread=False)
        except sqlite3.Error as e:
            logger.error("Error opening database %s: %s", self.path, e)
            return self
        conn.row_factory = sqlite3.Row
        self.connection = conn
        logger.info("Connected to the SQLite database at %s", self.path)
        try:
            conn.execute(_SCHEMA)
            conn.commit()
        except sqlite3.Error as e:
            logger.error("Error creating tasks table: %s", e)
            return self
        self._migrate_priority_column(conn)
        return self

    def _migrate_priority_column(self, conn: sqlite3.Connection) -> None:
        # Databases created before priority existed
        try:
            conn.execute("ALTER TABLE tasks ADD COLUMN priority TEXT DEFAULT 'low'")
            conn.commit()
            logger.info("Added priority column to tasks")
        except sqlite3.OperationalError as e:
            if "duplicate column" not in str(e).lower():
                logger.warning("Priority column migration failed: %s", e)

    def _require(self) -> sqlite3.Connection:
        if self.connection is None:
            raise StoreError("Database is not open")
        return self.connection

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self._lock:
            conn = self._require()
            try:
                return conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StoreError(str(e)) from e

    def execute(self, sql: str, params: Sequence[Any] = ()) -> tuple[int | None, int]:
        """Run one write and commit. Returns (lastrowid, rowcount)."""
        with self._lock:
            conn = self._require()
            try:
                cur = conn.execute(sql, params)
                conn.commit()
            except sqlite3.Error as e:
                raise StoreError(str(e)) from e
            return cur.lastrowid, cur.rowcount

    def has_column(self, name: str) -> bool:
        """True if tasks.<name> exists."""
        rows = self.query("PRAGMA table_info(tasks)")
        return any(r["name"] == name for r in rows)

    def close(self) -> None:
        with self._lock:
            if self.connection is not None:
                self.connection.close()
                self.connection = None


def migrate(path: str | Path = "database.db") -> Path:
    """Run database init + migrations. Use this to migrate manually: python -m database [path]"""
    db = Database(path).open()
    db.close()
    return Path(path).resolve()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    p = migrate(*sys.argv[1:2])
    print("Database migrated:", p)
