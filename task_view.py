"""
Presentation rules for the task list: date-range filter, ordering, and the
active/completed split. The API returns tasks unfiltered and unordered;
static/app.js applies the same rules in the browser.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from task_service import Task


def filter_by_date(tasks: Iterable[Task], start: str | None = None, end: str | None = None) -> list[Task]:
    """
    Keep tasks whose target date falls in [start, end]. Dates are YYYY-MM-DD
    strings, so plain string comparison orders them. With either bound set,
    tasks without a date are dropped.
    """
    tasks = list(tasks)
    if not start and not end:
        return tasks
    out = []
    for t in tasks:
        if not t.date:
            continue
        if start and t.date < start:
            continue
        if end and t.date > end:
            continue
        out.append(t)
    return out


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Incomplete before completed; newest (largest id) first within each group."""
    return sorted(tasks, key=lambda t: (t.completed, -t.id))


def partition(tasks: Sequence[Task]) -> tuple[list[Task], list[Task]]:
    """Split into (active, completed), preserving order."""
    active = [t for t in tasks if not t.completed]
    completed = [t for t in tasks if t.completed]
    return active, completed


def remaining_count(tasks: Iterable[Task]) -> int:
    return sum(1 for t in tasks if not t.completed)


def present(
    tasks: Iterable[Task], start: str | None = None, end: str | None = None
) -> tuple[list[Task], list[Task]]:
    """Filter, sort, and split in one pass, as the list view renders them."""
    return partition(sort_tasks(filter_by_date(tasks, start, end)))
