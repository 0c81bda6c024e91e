import logging
from typing import Any, List, Mapping

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError

from ..models import Task as TaskModel
from ..models.task import as_utc
from ..schemas.task import ErrorResponse, TaskDeleted, TaskRead
from ..store import TaskStore
from ..validation import (
    INVALID_BODY,
    MAX_TASK_ID,
    TASK_NOT_FOUND,
    TaskValidationError,
    ensure_json_object,
    parse_task_id,
    validate_create,
    validate_update,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_store(request: Request) -> TaskStore:
    """Dependency returning the store the app was built with."""
    return request.app.state.store


def to_task_dto(task: TaskModel) -> TaskRead:
    return TaskRead(
        id=task.id,
        title=task.title,
        completed=bool(task.completed),
        due_date=task.due_date,
        created_at=as_utc(task.created_at),
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TASK_NOT_FOUND)


async def _read_json_object(request: Request) -> Mapping[str, Any]:
    # A missing body reads as {} so that POST without one reports the missing title
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = await request.json()
    except ValueError:
        raise TaskValidationError(INVALID_BODY) from None
    return ensure_json_object(payload)


def _store_failure(action: str, message: str) -> HTTPException:
    logger.exception("Error %s", action)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@router.get("/tasks", response_model=List[TaskRead], responses={500: _ERRORS[500]})
def list_tasks(store: TaskStore = Depends(get_store)):
    """Get every task, open ones first, then by due date, newest first."""
    try:
        tasks = store.list_tasks()
    except SQLAlchemyError:
        raise _store_failure("fetching tasks", "Failed to fetch tasks")
    return [to_task_dto(task) for task in tasks]


@router.post("/tasks", response_model=TaskRead, status_code=status.HTTP_201_CREATED,
             responses={400: _ERRORS[400], 500: _ERRORS[500]})
async def create_task(request: Request, store: TaskStore = Depends(get_store)):
    """Create a new task."""
    payload = await _read_json_object(request)
    task_create = validate_create(payload)

    try:
        task = store.create_task(task_create)
    except SQLAlchemyError:
        raise _store_failure("creating task", "Failed to create task")
    return to_task_dto(task)


@router.patch("/tasks/{task_id}", response_model=TaskRead, responses=_ERRORS)
async def update_task(task_id: str, request: Request, store: TaskStore = Depends(get_store)):
    """Update the supplied fields of a task; everything else is left alone."""
    task_pk = parse_task_id(task_id)
    if task_pk > MAX_TASK_ID:
        raise _not_found()

    try:
        existing = store.get_task(task_pk)
    except SQLAlchemyError:
        raise _store_failure("updating task", "Failed to update task")
    if existing is None:
        raise _not_found()

    payload = await _read_json_object(request)
    task_update = validate_update(payload)

    try:
        task = store.update_task(task_pk, task_update)
    except SQLAlchemyError:
        raise _store_failure("updating task", "Failed to update task")
    if task is None:
        raise _not_found()
    return to_task_dto(task)


@router.delete("/tasks/{task_id}", response_model=TaskDeleted, responses=_ERRORS)
def delete_task(task_id: str, store: TaskStore = Depends(get_store)):
    """Hard-delete a task. Deleting it again reports 404."""
    task_pk = parse_task_id(task_id)
    if task_pk > MAX_TASK_ID:
        raise _not_found()

    try:
        deleted = store.delete_task(task_pk)
    except SQLAlchemyError:
        raise _store_failure("deleting task", "Failed to delete task")
    if not deleted:
        raise _not_found()
    return TaskDeleted(id=task_pk)
