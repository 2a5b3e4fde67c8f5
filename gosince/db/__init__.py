"""Database initialization and persistence layer."""

from gosince.db.engine import (
    create_db_engine,
    ensure_schema,
    get_database_url,
    get_session,
    init_db,
    reset_engine,
)
from gosince.db.models import Base, GoAPIDB
from gosince.db.repositories import APIRecordRepository
from gosince.db.store import RecordStore

__all__ = [
    # Engine
    "create_db_engine",
    "ensure_schema",
    "get_database_url",
    "get_session",
    "init_db",
    "reset_engine",
    # Models
    "Base",
    "GoAPIDB",
    # Repositories
    "APIRecordRepository",
    "RecordStore",
]
