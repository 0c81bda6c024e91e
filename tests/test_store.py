# tests/test_store.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

from tasktracker.models.task import as_utc
from tasktracker.schemas.task import TaskCreate, TaskUpdate
from tasktracker.store import TaskStore


def test_create_get_update_delete(store: TaskStore) -> None:
    task = store.create_task(TaskCreate(title="Write docs", dueDate="2026-03-01"))
    assert task.id > 0
    assert task.completed is False
    assert task.created_at is not None

    fetched = store.get_task(task.id)
    assert fetched is not None
    assert fetched.title == "Write docs"

    updated = store.update_task(task.id, TaskUpdate(completed=True))
    assert updated.completed is True
    assert updated.title == "Write docs"
    assert updated.due_date == "2026-03-01"

    cleared = store.update_task(task.id, TaskUpdate(dueDate=None))
    assert cleared.due_date is None
    assert cleared.completed is True

    assert store.delete_task(task.id) is True
    assert store.delete_task(task.id) is False
    assert store.get_task(task.id) is None
    assert store.count_tasks() == 0


def test_update_missing_task_returns_none(store: TaskStore) -> None:
    assert store.update_task(404, TaskUpdate(title="ghost")) is None
    assert store.count_tasks() == 0


def test_list_is_ordered(store: TaskStore) -> None:
    undated = store.create_task(TaskCreate(title="undated"))
    dated = store.create_task(TaskCreate(title="dated", dueDate="2030-01-01"))
    done = store.create_task(TaskCreate(title="done"))
    store.update_task(done.id, TaskUpdate(completed=True))

    assert [task.id for task in store.list_tasks()] == [dated.id, undated.id, done.id]


def test_stores_are_isolated(store: TaskStore) -> None:
    store.create_task(TaskCreate(title="only here"))
    other = TaskStore.from_url("sqlite://")
    try:
        assert other.count_tasks() == 0
        assert store.count_tasks() == 1
    finally:
        other.close()


def test_file_backed_store_persists(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'tasks.db'}"
    first = TaskStore.from_url(url)
    created = first.create_task(TaskCreate(title="durable"))
    first.close()

    second = TaskStore.from_url(url)
    try:
        assert [task.id for task in second.list_tasks()] == [created.id]
    finally:
        second.close()


def test_created_at_round_trips_as_utc(store: TaskStore) -> None:
    before = datetime.now(timezone.utc)
    created = store.create_task(TaskCreate(title="stamped"))
    after = datetime.now(timezone.utc)

    fetched = store.get_task(created.id)
    stamped = as_utc(fetched.created_at)

    assert stamped.utcoffset() == timedelta(0)
    assert before - timedelta(seconds=1) <= stamped <= after + timedelta(seconds=1)
    assert as_utc(store.list_tasks()[0].created_at) == stamped
