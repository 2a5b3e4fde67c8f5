"""Single-writer record store used by the ingestion pipeline."""

from __future__ import annotations

from sqlalchemy import Engine
from sqlalchemy.orm import sessionmaker

from gosince.core.enums import Category
from gosince.core.schema import APIRecord
from gosince.db.engine import ensure_schema
from gosince.db.repositories import APIRecordRepository


class RecordStore:
    """
    Owns the one session that writes to the database.

    Only the ingestion consumer may call `insert_ignore`; producers hand
    their records over through the queue instead.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
        self._repository = APIRecordRepository(self._session)

    def ensure_schema(self) -> None:
        """Create the table and index if missing. Safe on every startup."""
        ensure_schema(self.engine)

    def insert_ignore(self, record: APIRecord) -> bool:
        """Insert a record; return False when it was already stored."""
        return self._repository.insert_ignore(record)

    def query(self, name_pattern: str, category: Category | str | None = None) -> list[APIRecord]:
        """Return matching records, newest version first."""
        try:
            return self._repository.query(name_pattern, category)
        finally:
            # Hand the pooled connection back
            self._session.rollback()

    def count(self) -> int:
        """Return the number of stored records."""
        try:
            return self._repository.count()
        finally:
            self._session.rollback()

    def close(self) -> None:
        """Release the session."""
        self._session.close()
