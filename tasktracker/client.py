"""Client-side task list.

Keeps an in-memory copy of the list that is re-sorted after every
successful call. A failed call sets ``error`` and leaves the list as it
was. ``render()`` turns the current state into display lines.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .ordering import sort_tasks
from .validation import TITLE_REQUIRED

logger = logging.getLogger(__name__)

TASKS_PATH = "/api/tasks"

FILTER_ALL = "all"
FILTER_ACTIVE = "active"
FILTER_COMPLETED = "completed"
FILTERS = (FILTER_ALL, FILTER_ACTIVE, FILTER_COMPLETED)


class TaskRequestError(Exception):
    pass


# Anything that can go wrong between sending a request and decoding its reply
_REQUEST_ERRORS = (TaskRequestError, httpx.HTTPError, ValueError)


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _raise_for_error(response: httpx.Response, fallback: str) -> None:
    if response.is_success:
        return
    try:
        message = response.json().get("error") or fallback
    except (ValueError, AttributeError):
        message = fallback
    raise TaskRequestError(message)


class TaskClient:
    def __init__(self, http: httpx.Client) -> None:
        self.http = http
        self.tasks: List[Dict[str, Any]] = []
        self.loading = True
        self.error: Optional[str] = None
        self.validation_error = ""
        self.active_filter = FILTER_ALL

        self.editing_task_id: Optional[int] = None
        self.edit_title = ""
        self.edit_due_date = ""
        self.edit_validation_error = ""

    @classmethod
    def connect(cls, base_url: str, timeout: float = 10.0) -> "TaskClient":
        return cls(httpx.Client(base_url=base_url, timeout=timeout))

    # ---- network ----

    def fetch_tasks(self) -> None:
        self.loading = True
        try:
            response = self.http.get(TASKS_PATH)
            if not response.is_success:
                raise TaskRequestError("Network response was not ok")
            tasks = response.json()
            if not isinstance(tasks, list):
                raise TaskRequestError("Unexpected response body")
            self.tasks = sort_tasks(tasks)
            self.error = None
        except _REQUEST_ERRORS as exc:
            self._fail(f"Failed to fetch tasks: {exc}")
        finally:
            self.loading = False

    def create_task(self, title: str, due_date: str = "") -> bool:
        if not title.strip():
            self.validation_error = TITLE_REQUIRED
            return False

        try:
            response = self.http.post(
                TASKS_PATH,
                json={"title": title.strip(), "dueDate": due_date or None},
            )
            _raise_for_error(response, "Failed to create task")
            created = response.json()
        except _REQUEST_ERRORS as exc:
            self._fail(f"Error creating task: {exc}")
            return False

        self.tasks = sort_tasks([*self.tasks, created])
        self.validation_error = ""
        self.error = None
        return True

    def update_task(self, task_id: int, changes: Dict[str, Any]) -> bool:
        try:
            response = self.http.patch(f"{TASKS_PATH}/{task_id}", json=changes)
            _raise_for_error(response, "Failed to update task")
            updated = response.json()
        except _REQUEST_ERRORS as exc:
            self._fail(f"Error updating task: {exc}")
            return False

        self.tasks = sort_tasks(updated if task["id"] == task_id else task for task in self.tasks)
        self.error = None
        return True

    def delete_task(self, task_id: int) -> bool:
        try:
            response = self.http.delete(f"{TASKS_PATH}/{task_id}")
            _raise_for_error(response, "Failed to delete task")
        except _REQUEST_ERRORS as exc:
            self._fail(f"Error deleting task: {exc}")
            return False

        self.tasks = [task for task in self.tasks if task["id"] != task_id]
        self.error = None
        return True

    def toggle_task_completion(self, task: Dict[str, Any]) -> bool:
        return self.update_task(task["id"], {"completed": not task["completed"]})

    def _fail(self, message: str) -> None:
        logger.warning(message)
        self.error = message

    # ---- editing ----

    def start_editing(self, task: Dict[str, Any]) -> None:
        self.editing_task_id = task["id"]
        self.edit_title = task["title"]
        self.edit_due_date = task.get("dueDate") or ""
        self.edit_validation_error = ""

    def cancel_editing(self) -> None:
        self.editing_task_id = None
        self.edit_title = ""
        self.edit_due_date = ""
        self.edit_validation_error = ""

    def save_task_changes(self, task_id: int) -> bool:
        if not self.edit_title.strip():
            self.edit_validation_error = TITLE_REQUIRED
            return False

        saved = self.update_task(
            task_id,
            {"title": self.edit_title.strip(), "dueDate": self.edit_due_date or None},
        )
        if saved:
            self.cancel_editing()
        return saved

    # ---- view ----

    def set_filter(self, name: str) -> None:
        if name not in FILTERS:
            raise ValueError(f"Unknown filter: {name}")
        self.active_filter = name

    def visible_tasks(self) -> List[Dict[str, Any]]:
        if self.active_filter == FILTER_ACTIVE:
            return [task for task in sort_tasks(self.tasks) if not task["completed"]]
        if self.active_filter == FILTER_COMPLETED:
            return [task for task in sort_tasks(self.tasks) if task["completed"]]
        return sort_tasks(self.tasks)

    @staticmethod
    def is_overdue(task: Dict[str, Any], today: Optional[date] = None) -> bool:
        if task["completed"] or not task.get("dueDate"):
            return False
        today = today or _utc_today()
        return task["dueDate"] < today.isoformat()

    def render(self, today: Optional[date] = None) -> List[str]:
        lines = []
        if self.validation_error:
            lines.append(self.validation_error)
        if self.loading:
            lines.append("Loading tasks...")
            return lines
        if self.error:
            lines.append(self.error)
            return lines

        visible = self.visible_tasks()
        if not visible:
            lines.append("No tasks found for this filter.")
            return lines

        for task in visible:
            if task["id"] == self.editing_task_id:
                line = f"[edit] {self.edit_title}"
                if self.edit_due_date:
                    line += f"  Due: {self.edit_due_date}"
                if self.edit_validation_error:
                    line += f"  ({self.edit_validation_error})"
                lines.append(line)
                continue

            line = f"[{'x' if task['completed'] else ' '}] {task['title']}"
            if task.get("dueDate"):
                line += f"  Due: {task['dueDate']}"
            if self.is_overdue(task, today):
                line += " (overdue)"
            lines.append(line)
        return lines
