from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite may hand timestamps back without an offset; they were written as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Task(SQLModel, table=True):
    """Task row.

    ``due_date`` is kept as the ``YYYY-MM-DD`` text it was submitted as.
    AUTOINCREMENT keeps SQLite from handing out the id of a deleted row again.
    """
    __tablename__ = "tasks"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(sa_column_kwargs={"nullable": False})
    completed: bool = Field(default=False, sa_column_kwargs={"nullable": False})
    due_date: Optional[str] = Field(default=None)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
