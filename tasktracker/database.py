from sqlmodel import SQLModel, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool, StaticPool

from .config import DATABASE_URL

# Import all models to ensure they are registered with SQLModel metadata
from .models import Task  # noqa: F401


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def create_db_engine(url: str = DATABASE_URL) -> Engine:
    """Build an engine for the given database URL."""
    if url.startswith("sqlite"):
        if _is_memory_sqlite(url):
            # One shared connection, otherwise every session gets its own empty database
            return create_engine(
                url,
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    # Postgres and friends: no pooling, pre-ping stale connections
    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        poolclass=NullPool,
    )


def create_tables(engine: Engine) -> None:
    """Create all database tables."""
    SQLModel.metadata.create_all(bind=engine)
