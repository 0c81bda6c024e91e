import re
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator

_DUE_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def check_title(value: str) -> str:
    if not value.strip():
        raise ValueError("title cannot be empty")
    return value.strip()


def check_due_date(value: Optional[str]) -> Optional[str]:
    """Empty means no due date; anything else must be a real YYYY-MM-DD date."""
    if not value:
        return None
    if not _DUE_DATE_RE.fullmatch(value):
        raise ValueError("due date must look like YYYY-MM-DD")
    date.fromisoformat(value)
    return value


class TaskCreate(BaseModel):
    """Body of a create request; anything besides title and dueDate is ignored."""
    title: StrictStr
    due_date: Optional[StrictStr] = Field(default=None, alias="dueDate")

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v):
        return check_title(v)

    @field_validator("due_date")
    @classmethod
    def due_date_is_real(cls, v):
        return check_due_date(v)


class TaskUpdate(BaseModel):
    """Body of a partial update.

    Only supplied keys end up in ``model_fields_set``; those are the ones
    written back to the row. A null title or completion flag is rejected,
    a null due date clears it.
    """
    title: Optional[StrictStr] = None
    completed: Optional[StrictBool] = None
    due_date: Optional[StrictStr] = Field(default=None, alias="dueDate")

    @field_validator("title", "completed", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v):
        return check_title(v)

    @field_validator("due_date")
    @classmethod
    def due_date_is_real(cls, v):
        return check_due_date(v)


class TaskRead(BaseModel):
    """Task as it goes over the wire."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    completed: bool
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    created_at: datetime = Field(alias="createdAt")


class TaskDeleted(BaseModel):
    message: str = "Task deleted successfully"
    id: int


class ErrorResponse(BaseModel):
    error: str
