# tests/test_database.py

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from database import Database, StoreError, migrate
from task_service import TaskRepository


def test_open_creates_file_and_table(tmp_path: Path) -> None:
    path = tmp_path / "fresh.db"
    db = Database(path).open()
    try:
        assert path.exists()
        for column in ("id", "text", "date", "createdAt", "priority", "completed"):
            assert db.has_column(column)
    finally:
        db.close()


def test_reopen_is_idempotent(tmp_path: Path) -> None:
    path = tmp_path / "tasks.db"
    first = Database(path).open()
    TaskRepository(first).create("keep me")
    first.close()

    second = Database(path).open()
    try:
        tasks = TaskRepository(second).list()
        assert [t.text for t in tasks] == ["keep me"]
    finally:
        second.close()


def test_migration_adds_priority_to_legacy_table(tmp_path: Path) -> None:
    path = tmp_path / "legacy.db"
    conn = sqlite3.connect(str(path))
    conn.execute(
        """CREATE TABLE tasks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            text TEXT NOT NULL,
            date TEXT,
            createdAt TEXT,
            completed INTEGER DEFAULT 0
        )"""
    )
    conn.execute("INSERT INTO tasks (text, date, completed) VALUES ('old task', '2026-01-02', 1)")
    conn.commit()
    conn.close()

    db = Database(path).open()
    try:
        assert db.has_column("priority")
        [task] = TaskRepository(db).list()
        assert task.text == "old task"
        assert task.priority == "low"
        assert task.completed is True
    finally:
        db.close()


def test_open_failure_is_logged_not_raised(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    db = Database(tmp_path / "missing-dir" / "tasks.db").open()
    assert db.connection is None
    assert "Error opening database" in caplog.text
    with pytest.raises(StoreError, match="not open"):
        TaskRepository(db).list()


def test_sqlite_errors_become_store_errors(db: Database) -> None:
    with pytest.raises(StoreError, match="no such table"):
        db.query("SELECT * FROM nope")


def test_execute_reports_lastrowid_and_rowcount(db: Database) -> None:
    rowid, count = db.execute("INSERT INTO tasks (text) VALUES (?)", ("a",))
    assert rowid == 1
    assert count == 1
    _, count = db.execute("UPDATE tasks SET text = ? WHERE id = ?", ("b", 99))
    assert count == 0


def test_migrate_helper(tmp_path: Path) -> None:
    path = tmp_path / "cli.db"
    assert migrate(path) == path.resolve()
    assert path.exists()
