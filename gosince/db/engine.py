"""SQLite engine setup for the goapis database."""

import os
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import QueuePool

DEFAULT_DB_PATH = Path.home() / ".gosince" / "gosince.db"


def get_database_url(db_path: Path | str | None = None) -> str:
    """
    Resolve where the goapis table lives.

    An explicit `--file` path wins, then DATABASE_URL (a file path or a
    full sqlite URL), then ~/.gosince/gosince.db. The directory of a file
    path is created if needed, so this may raise OSError.
    """
    env_url = os.environ.get("DATABASE_URL")
    if db_path is None and env_url and env_url.startswith("sqlite"):
        return env_url

    path = Path(db_path or env_url or DEFAULT_DB_PATH).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{path}"


def create_db_engine(db_path: Path | str | None = None, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for SQLite.

    SQLite does not support concurrent writers across connections, so the
    pool holds a single connection. It may be used from a worker thread,
    but only by one owner at a time.

    Args:
        db_path: Optional path to the database file.
        echo: If True, log all SQL statements.

    Returns:
        SQLAlchemy Engine instance.
    """
    url = get_database_url(db_path)
    return create_engine(
        url,
        echo=echo,
        poolclass=QueuePool,
        pool_size=1,
        max_overflow=0,
        connect_args={"check_same_thread": False},
    )


def ensure_schema(engine: Engine) -> None:
    """Create the goapis table and its index if they do not exist."""
    from gosince.db.models import Base

    Base.metadata.create_all(bind=engine)


# Shared by the lookup service; built on first use
_lookup_engine: Engine | None = None


def _shared_engine() -> Engine:
    global _lookup_engine
    if _lookup_engine is None:
        _lookup_engine = create_db_engine()
    return _lookup_engine


def reset_engine() -> None:
    """Drop the shared lookup engine so the next use re-reads DATABASE_URL."""
    global _lookup_engine
    if _lookup_engine is not None:
        _lookup_engine.dispose()
    _lookup_engine = None


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Yield a read session on the shared lookup engine."""
    session = Session(_shared_engine(), autoflush=False)
    try:
        yield session
    finally:
        session.close()


def init_db(db_path: Path | str | None = None) -> None:
    """
    Create the goapis table.

    Without a path this prepares the database the lookup service reads.
    With a path it uses a throwaway engine for that file.
    """
    if db_path is None:
        ensure_schema(_shared_engine())
        return

    engine = create_db_engine(db_path)
    try:
        ensure_schema(engine)
    finally:
        engine.dispose()
