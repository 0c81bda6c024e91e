"""Request validation for the task endpoints.

Field rules live on the pydantic schemas; this module turns their
``ValidationError`` into the single message the API reports, and checks
the parts of a request the schemas never see (path id, body shape).
"""
import re
from typing import Any, Dict, Mapping

from pydantic import ValidationError

from .schemas.task import TaskCreate, TaskUpdate

TITLE_REQUIRED = "Task title is required"
INVALID_DUE_DATE = "Due date must be in YYYY-MM-DD format"
INVALID_COMPLETED = "Completed must be a boolean value"
INVALID_TASK_ID = "Valid task ID is required"
TASK_NOT_FOUND = "Task not found"
INVALID_BODY = "Request body must be a JSON object"

# Largest id a SQLite INTEGER column can hold; anything above cannot exist
MAX_TASK_ID = 2**63 - 1

_TASK_ID_RE = re.compile(r"[0-9]+")

# Field location -> message, in the order the checks are reported
_FIELD_MESSAGES = (
    ("title", TITLE_REQUIRED),
    ("completed", INVALID_COMPLETED),
    ("dueDate", INVALID_DUE_DATE),
)


class TaskValidationError(Exception):
    """Client input error, rendered as ``{"error": message}``."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def parse_task_id(raw: Any) -> int:
    """Turn a path segment into a positive task id."""
    text = str(raw).strip()
    if not _TASK_ID_RE.fullmatch(text):
        raise TaskValidationError(INVALID_TASK_ID)

    task_id = int(text)
    if task_id <= 0:
        raise TaskValidationError(INVALID_TASK_ID)
    return task_id


def ensure_json_object(payload: Any) -> Mapping[str, Any]:
    """Objects pass through; an array carries no fields and reads as ``{}``."""
    if isinstance(payload, dict):
        return payload
    if isinstance(payload, list):
        return {}
    raise TaskValidationError(INVALID_BODY)


def _to_task_error(exc: ValidationError) -> TaskValidationError:
    failed = {str(error["loc"][0]) for error in exc.errors() if error["loc"]}
    for field, message in _FIELD_MESSAGES:
        if field in failed:
            return TaskValidationError(message)
    return TaskValidationError(INVALID_BODY)


def validate_create(payload: Mapping[str, Any]) -> TaskCreate:
    try:
        return TaskCreate.model_validate(dict(payload))
    except ValidationError as exc:
        raise _to_task_error(exc) from None


def validate_update(payload: Mapping[str, Any]) -> TaskUpdate:
    """Check the supplied fields of a partial update.

    Unknown keys are ignored; an empty payload is a valid no-op update.
    """
    fields: Dict[str, Any] = {key: payload[key] for key in ("title", "completed", "dueDate") if key in payload}
    try:
        return TaskUpdate.model_validate(fields)
    except ValidationError as exc:
        raise _to_task_error(exc) from None
