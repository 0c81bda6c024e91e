import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session, select

from .database import create_db_engine, create_tables
from .models import Task
from .ordering import sort_tasks
from .schemas.task import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


def _get_update_data(task_update: TaskUpdate) -> dict:
    return task_update.model_dump(exclude_unset=True)


class TaskStore:
    """
    Task persistence over a single ``tasks`` table.

    The store owns its engine; build one per app (or per test) and hand it
    to ``create_app``. Each method opens its own short-lived session and
    runs one statement against the table.
    """

    def __init__(self, engine: Optional[Engine] = None) -> None:
        self._engine = engine if engine is not None else create_db_engine()
        self._session_factory = sessionmaker(
            bind=self._engine,
            class_=Session,
            autoflush=False,
            expire_on_commit=False,
        )
        create_tables(self._engine)
        logger.info("TaskStore ready url=%s", self._engine.url)

    @classmethod
    def from_url(cls, url: str) -> "TaskStore":
        return cls(create_db_engine(url))

    def close(self) -> None:
        self._engine.dispose()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Get a database session (context manager style)."""
        session = self._session_factory()
        try:
            yield session
        finally:
            session.close()

    # ---- queries ----

    def list_tasks(self) -> List[Task]:
        with self.session() as session:
            tasks = session.exec(select(Task)).all()
        return sort_tasks(tasks)

    def get_task(self, task_id: int) -> Optional[Task]:
        with self.session() as session:
            return session.get(Task, task_id)

    def count_tasks(self) -> int:
        with self.session() as session:
            return session.exec(select(func.count()).select_from(Task)).one()

    # ---- mutations ----

    def create_task(self, task_create: TaskCreate) -> Task:
        with self.session() as session:
            task = Task(title=task_create.title, due_date=task_create.due_date)
            session.add(task)
            session.commit()
            session.refresh(task)
        logger.info("Created task id=%s due_date=%s", task.id, task.due_date)
        return task

    def update_task(self, task_id: int, task_update: TaskUpdate) -> Optional[Task]:
        """Apply the supplied fields; returns None if the task does not exist."""
        with self.session() as session:
            task = session.get(Task, task_id)
            if task is None:
                return None

            for field, value in _get_update_data(task_update).items():
                setattr(task, field, value)

            session.add(task)
            session.commit()
            session.refresh(task)
        logger.info("Updated task id=%s completed=%s due_date=%s", task.id, task.completed, task.due_date)
        return task

    def delete_task(self, task_id: int) -> bool:
        with self.session() as session:
            task = session.get(Task, task_id)
            if task is None:
                return False

            session.delete(task)
            session.commit()
        logger.info("Deleted task id=%s", task_id)
        return True
