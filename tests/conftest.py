# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tasktracker.database import create_db_engine
from tasktracker.main import create_app
from tasktracker.store import TaskStore


@pytest.fixture()
def store() -> Iterator[TaskStore]:
    """Fresh in-memory store per test, so nothing leaks between tests."""
    task_store = TaskStore(create_db_engine("sqlite://"))
    yield task_store
    task_store.close()


@pytest.fixture()
def app(store: TaskStore) -> FastAPI:
    return create_app(store)


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def create_task(client: TestClient):
    """POST a task and return its DTO."""

    def _create(title: str = "Temp Task", due_date: str | None = None) -> dict:
        response = client.post("/api/tasks", json={"title": title, "dueDate": due_date})
        assert response.status_code == 201
        assert "id" in response.json()
        return response.json()

    return _create
