"""Repository classes for database operations."""

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gosince.core.enums import Category
from gosince.core.errors import StoreWriteError
from gosince.core.schema import APIRecord
from gosince.db.models import UNIQUE_COLUMNS, GoAPIDB


class APIRecordRepository:
    """Repository for APIRecord insert and lookup operations."""

    def __init__(self, session: Session):
        self.session = session

    def insert_ignore(self, record: APIRecord) -> bool:
        """
        Insert a record unless an identical one is already stored.

        Args:
            record: The APIRecord to persist.

        Returns:
            True if a row was written, False if the record already existed.

        Raises:
            StoreWriteError: the insert failed for any other reason.
        """
        stmt = (
            sqlite_insert(GoAPIDB.__table__)
            .values(
                name=record.name,
                category=record.category.value,
                version=record.version,
                package_name=record.package_name,
                description=record.description,
                golang_url=record.golang_url,
            )
            .on_conflict_do_nothing(index_elements=list(UNIQUE_COLUMNS))
        )
        try:
            inserted = self.session.execute(stmt).rowcount == 1
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreWriteError(f"Failed to insert {record.package_name}.{record.name}: {e}") from e
        return inserted

    def query(self, name_pattern: str, category: Category | str | None = None) -> list[APIRecord]:
        """
        Find records by name and optional category.

        Newest versions come first. Versions are compared by length before
        text so that "10" sorts above "2".

        Args:
            name_pattern: SQL LIKE pattern matched against the name.
            category: Optional category filter.

        Returns:
            List of APIRecord domain models.
        """
        stmt = select(GoAPIDB).where(GoAPIDB.name.like(name_pattern))
        if category:
            stmt = stmt.where(GoAPIDB.category == Category(category).value)
        stmt = stmt.order_by(
            func.length(GoAPIDB.version).desc(),
            GoAPIDB.version.desc(),
            GoAPIDB.package_name,
        )
        result = self.session.execute(stmt).scalars().all()
        return [self._to_domain(row) for row in result]

    def count(self) -> int:
        """Return the number of stored records."""
        stmt = select(func.count()).select_from(GoAPIDB)
        return self.session.execute(stmt).scalar_one()

    def _to_domain(self, db_record: GoAPIDB) -> APIRecord:
        """Convert database model to domain model."""
        return APIRecord(
            name=db_record.name,
            category=Category(db_record.category),
            version=db_record.version,
            package_name=db_record.package_name,
            description=db_record.description,
            golang_url=db_record.golang_url,
        )
