# tests/test_task_view.py

from __future__ import annotations

import itertools

from task_service import Task
from task_view import filter_by_date, partition, present, remaining_count, sort_tasks


def _task(id: int, date: str | None = None, completed: bool = False) -> Task:
    return Task(id=id, text=f"task {id}", date=date, completed=completed)


DATES = [None, "2026-01-30", "2026-02-01", "2026-02-07", "2026-02-28", "2026-03-01"]


def test_february_window() -> None:
    tasks = [_task(1, "2026-01-30"), _task(2, "2026-02-07"), _task(3, None)]
    out = filter_by_date(tasks, "2026-02-01", "2026-02-28")
    assert [t.date for t in out] == ["2026-02-07"]


def test_no_bounds_keeps_everything() -> None:
    tasks = [_task(1, None), _task(2, "2026-02-07")]
    assert filter_by_date(tasks) == tasks
    assert filter_by_date(tasks, "", "") == tasks


def test_single_bound_drops_undated() -> None:
    tasks = [_task(1, None), _task(2, "2026-02-07"), _task(3, "2026-01-01")]
    assert [t.id for t in filter_by_date(tasks, start="2026-02-01")] == [2]
    assert [t.id for t in filter_by_date(tasks, end="2026-02-01")] == [3]


def test_bounds_are_inclusive() -> None:
    tasks = [_task(1, "2026-02-01"), _task(2, "2026-02-28")]
    assert filter_by_date(tasks, "2026-02-01", "2026-02-28") == tasks


def test_filter_matches_definition_for_all_windows() -> None:
    tasks = [_task(i, d) for i, d in enumerate(DATES, start=1)]
    bounds = [d for d in DATES if d]
    for start, end in itertools.combinations_with_replacement(bounds, 2):
        expected = [t for t in tasks if t.date and start <= t.date <= end]
        assert filter_by_date(tasks, start, end) == expected


def test_sort_incomplete_first_then_newest() -> None:
    tasks = [_task(1), _task(2, completed=True), _task(3), _task(4, completed=True), _task(5)]
    assert [t.id for t in sort_tasks(tasks)] == [5, 3, 1, 4, 2]


def test_sort_does_not_mutate_input() -> None:
    tasks = [_task(1), _task(2)]
    sort_tasks(tasks)
    assert [t.id for t in tasks] == [1, 2]


def test_partition_and_count() -> None:
    tasks = sort_tasks([_task(1, completed=True), _task(2), _task(3)])
    active, completed = partition(tasks)
    assert [t.id for t in active] == [3, 2]
    assert [t.id for t in completed] == [1]
    assert remaining_count(tasks) == 2


def test_present_with_no_completed() -> None:
    active, completed = present([_task(1, "2026-02-07"), _task(2, "2026-03-07")], "2026-02-01", "2026-02-28")
    assert [t.id for t in active] == [1]
    assert completed == []
