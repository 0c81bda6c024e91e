"""List ordering shared by the API and the client.

Order: open tasks first, then tasks with a due date, earliest due date
first, newest first. Works on store rows (``due_date``/``created_at``)
as well as on DTO dicts (``dueDate``/``createdAt``).
"""
from datetime import datetime
from functools import cmp_to_key
from typing import Any, Iterable, List

from .models.task import as_utc


def _field(task: Any, *names: str) -> Any:
    for name in names:
        if isinstance(task, dict):
            if name in task:
                return task[name]
        elif hasattr(task, name):
            return getattr(task, name)
    return None


def _created_at(task: Any) -> str:
    value = _field(task, "created_at", "createdAt")
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    return "" if value is None else str(value)


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def compare_tasks(task_a: Any, task_b: Any) -> int:
    """Three-way comparison; negative when ``task_a`` sorts first."""
    completed_a = bool(_field(task_a, "completed"))
    completed_b = bool(_field(task_b, "completed"))
    if completed_a != completed_b:
        return 1 if completed_a else -1

    due_a = _field(task_a, "due_date", "dueDate")
    due_b = _field(task_b, "due_date", "dueDate")
    if due_a and not due_b:
        return -1
    if not due_a and due_b:
        return 1
    if due_a and due_b and due_a != due_b:
        return _cmp(due_a, due_b)

    # Newest first; ids only move forward so they settle identical timestamps
    by_created = _cmp(_created_at(task_b), _created_at(task_a))
    if by_created:
        return by_created
    return _cmp(_field(task_b, "id") or 0, _field(task_a, "id") or 0)


task_sort_key = cmp_to_key(compare_tasks)


def sort_tasks(tasks: Iterable[Any]) -> List[Any]:
    return sorted(tasks, key=task_sort_key)
