"""SQLAlchemy ORM models for the gosince database."""

from sqlalchemy import CheckConstraint, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from gosince.core.enums import Category

CATEGORY_CHECK = "category IN ({})".format(", ".join(f"'{c}'" for c in Category.values()))

# Columns that together identify a record
UNIQUE_COLUMNS = ("name", "category", "version", "package_name", "description")


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class GoAPIDB(Base):
    """
    Database model for Go API records.

    The same signature may appear once per platform build tag in the source
    files, so the description is part of the uniqueness key.
    """

    __tablename__ = "goapis"
    __table_args__ = (
        CheckConstraint(CATEGORY_CHECK, name="category_valid"),
        UniqueConstraint(*UNIQUE_COLUMNS, name="row_unique"),
        Index("goapis_name", "name"),
    )

    # Alias for the SQLite rowid
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    version: Mapped[str] = mapped_column(String(5), nullable=False)
    package_name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    golang_url: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<GoAPIDB(name='{self.name}', category='{self.category}', version='{self.version}')>"
