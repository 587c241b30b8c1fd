"""
Task Service layer: all task reads and writes go through here.
Maps stored rows to Task values and back; no request handling.
"""
from __future__ import annotations

import logging
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field

from database import Database

logger = logging.getLogger("task_service")

PRIORITIES = ("low", "medium", "high")
DEFAULT_PRIORITY = "low"

Priority = Literal["low", "medium", "high"]

# Request field -> column, in the order updates are written
_UPDATABLE = ("text", "date", "priority", "completed")


class NoFieldsToUpdate(ValueError):
    def __init__(self) -> None:
        super().__init__("No fields to update")


class Task(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    text: str
    date: str | None = None
    created_at: str | None = Field(default=None, alias="createdAt")
    priority: Priority = DEFAULT_PRIORITY
    completed: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Task":
        d = dict(row)
        priority = d.get("priority")
        return cls(
            id=d["id"],
            text=d["text"],
            date=d.get("date"),
            created_at=d.get("createdAt"),
            # Missing or unrecognized values read back as low
            priority=priority if priority in PRIORITIES else DEFAULT_PRIORITY,
            completed=bool(d.get("completed")),
        )

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def _store_completed(value: Any) -> int:
    # JSON arrays and objects are truthy even when empty
    if isinstance(value, (list, dict)):
        return 1
    return 1 if value else 0


class TaskRepository:
    """CRUD over the tasks table in terms of Task values."""

    def __init__(self, db: Database):
        self.db = db

    def list(self, start_date: str | None = None, end_date: str | None = None) -> list[Task]:
        """
        Return every task in store order. The date range is accepted for
        client compatibility but not applied; the UI filters.
        """
        if start_date or end_date:
            logger.debug("list: ignoring date range %s..%s", start_date, end_date)
        rows = self.db.query("SELECT * FROM tasks")
        return [Task.from_row(r) for r in rows]

    def create(
        self,
        text: Any,
        date: Any = None,
        created_at: Any = None,
        priority: Any = None,
    ) -> Task:
        """
        Insert an incomplete task. Priority defaults to low. Values are bound
        as given; the TEXT columns store scalars as text, so the task is read
        back from the row rather than echoed.
        """
        eff_priority = priority or DEFAULT_PRIORITY
        task_id, _ = self.db.execute(
            "INSERT INTO tasks (text, date, createdAt, priority, completed) VALUES (?, ?, ?, ?, ?)",
            (text, date, created_at, eff_priority, 0),
        )
        logger.info("Created task %s", task_id)
        rows = self.db.query("SELECT * FROM tasks WHERE id = ?", (task_id,))
        return Task.from_row(rows[0])

    def update(self, task_id: int | str, changes: Mapping[str, Any]) -> int:
        """
        Partial update: only recognized keys present in changes are written.
        Raises NoFieldsToUpdate when there are none. Returns rows affected
        (0 for an unknown id).
        """
        updates: list[str] = []
        params: list[Any] = []
        for field in _UPDATABLE:
            if field not in changes:
                continue
            value = changes[field]
            if field == "completed":
                value = _store_completed(value)
            updates.append(f"{field} = ?")
            params.append(value)
        if not updates:
            raise NoFieldsToUpdate()
        params.append(task_id)
        _, changed = self.db.execute(f"UPDATE tasks SET {', '.join(updates)} WHERE id = ?", params)
        logger.info("Updated task %s (%s): %d row(s)", task_id, ", ".join(updates), changed)
        return changed

    def delete(self, task_id: int | str) -> int:
        """Delete one task. Unknown ids are not an error; returns rows affected."""
        _, changed = self.db.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        return changed

    def clear_completed(self) -> int:
        """Delete every completed task. Returns rows affected."""
        _, changed = self.db.execute("DELETE FROM tasks WHERE completed != 0")
        logger.info("Cleared %d completed task(s)", changed)
        return changed
