"""Tests for database persistence layer."""

import tempfile
from pathlib import Path

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.orm import Session, sessionmaker

from gosince.core.enums import Category
from gosince.core.errors import StoreWriteError
from gosince.core.schema import APIRecord
from gosince.db.engine import (
    create_db_engine,
    ensure_schema,
    get_database_url,
    get_session,
    init_db,
    reset_engine,
)
from gosince.db.repositories import APIRecordRepository
from gosince.db.store import RecordStore


def make_record(**overrides) -> APIRecord:
    """Build a record with sensible defaults."""
    data = {
        "name": "String",
        "category": Category.METHOD,
        "version": "1",
        "package_name": "database/sql",
        "description": "method (IsolationLevel) String() string",
        "golang_url": "https://golang.org/pkg/database/sql/#IsolationLevel.String",
    }
    data.update(overrides)
    return APIRecord(**data)


@pytest.fixture
def temp_db_path():
    """Create a temporary database file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def engine(temp_db_path):
    """Create a test database engine."""
    engine = create_db_engine(temp_db_path)
    ensure_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Create a database session for testing."""
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


class TestSchema:
    """Tests for table creation."""

    def test_ensure_schema_is_idempotent(self, engine) -> None:
        """Test that creating the schema twice is harmless."""
        ensure_schema(engine)
        ensure_schema(engine)

        inspector = inspect(engine)
        assert "goapis" in inspector.get_table_names()

    def test_columns_and_index(self, engine) -> None:
        """Test the persisted columns and the name index."""
        inspector = inspect(engine)
        columns = {c["name"] for c in inspector.get_columns("goapis")}

        assert {"name", "category", "version", "package_name", "description", "golang_url"} <= columns
        assert any(index["name"] == "goapis_name" for index in inspector.get_indexes("goapis"))

    def test_unique_constraint(self, engine) -> None:
        inspector = inspect(engine)
        uniques = inspector.get_unique_constraints("goapis")

        assert any(
            u["column_names"] == ["name", "category", "version", "package_name", "description"]
            for u in uniques
        )


class TestAPIRecordRepository:
    """Tests for APIRecordRepository."""

    def test_insert(self, session: Session) -> None:
        repo = APIRecordRepository(session)

        assert repo.insert_ignore(make_record()) is True
        assert repo.count() == 1

    def test_insert_twice_is_noop(self, session: Session) -> None:
        """Test that an identical tuple is stored once."""
        repo = APIRecordRepository(session)

        assert repo.insert_ignore(make_record()) is True
        assert repo.insert_ignore(make_record()) is False
        assert repo.count() == 1

    def test_description_is_part_of_key(self, session: Session) -> None:
        """Test that a different signature is a different row."""
        repo = APIRecordRepository(session)

        repo.insert_ignore(make_record())
        repo.insert_ignore(make_record(description="method (*Builder) String() string"))

        assert repo.count() == 2

    def test_non_duplicate_failure_raises(self, session: Session) -> None:
        """Test that a non-duplicate failure is reported."""
        repo = APIRecordRepository(session)
        record = make_record().model_copy(update={"golang_url": None})

        with pytest.raises(StoreWriteError):
            repo.insert_ignore(record)

        # The session is still usable after the failure
        assert repo.insert_ignore(make_record()) is True

    def test_query_orders_versions_by_length(self, session: Session) -> None:
        """Test that versions sort length first, then text, descending."""
        repo = APIRecordRepository(session)
        for version in ("1", "10", "2"):
            repo.insert_ignore(make_record(version=version))

        records = repo.query("String")

        assert [r.version for r in records] == ["10", "2", "1"]

    def test_query_orders_packages_ascending(self, session: Session) -> None:
        repo = APIRecordRepository(session)
        repo.insert_ignore(make_record(package_name="strings"))
        repo.insert_ignore(make_record(package_name="bytes"))

        records = repo.query("String")

        assert [r.package_name for r in records] == ["bytes", "strings"]

    def test_query_category_filter(self, session: Session) -> None:
        repo = APIRecordRepository(session)
        repo.insert_ignore(make_record())
        repo.insert_ignore(
            make_record(category=Category.FUNC, description="func String() string")
        )

        assert len(repo.query("String")) == 2
        records = repo.query("String", Category.FUNC)
        assert len(records) == 1
        assert records[0].category == Category.FUNC
        assert len(repo.query("String", "method")) == 1

    def test_query_no_match(self, session: Session) -> None:
        repo = APIRecordRepository(session)
        repo.insert_ignore(make_record())

        assert repo.query("Other") == []

    def test_query_like_pattern(self, session: Session) -> None:
        """Test that the name is matched with LIKE."""
        repo = APIRecordRepository(session)
        repo.insert_ignore(make_record())
        repo.insert_ignore(make_record(name="Stringer", description="type Stringer interface"))

        assert {r.name for r in repo.query("String%")} == {"String", "Stringer"}


class TestRecordStore:
    """Tests for the single-writer store."""

    def test_store_round_trip(self, temp_db_path) -> None:
        engine = create_db_engine(temp_db_path)
        store = RecordStore(engine)
        try:
            store.ensure_schema()
            assert store.insert_ignore(make_record()) is True
            assert store.insert_ignore(make_record()) is False
            assert store.count() == 1
            assert store.query("String")[0].golang_url.endswith("#IsolationLevel.String")
        finally:
            store.close()
            engine.dispose()

    def test_engine_has_single_connection(self, temp_db_path) -> None:
        """Test that the pool never hands out a second connection."""
        engine = create_db_engine(temp_db_path)
        try:
            assert engine.pool.size() == 1
            with engine.connect() as conn:
                assert conn.execute(text("SELECT 1")).scalar_one() == 1
        finally:
            engine.dispose()


class TestDatabaseLocation:
    """Tests for database path resolution and the shared lookup engine."""

    def test_explicit_path_wins(self, temp_db_path, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "/elsewhere/gosince.db")

        assert get_database_url(temp_db_path) == f"sqlite:///{temp_db_path}"

    def test_env_path(self, temp_db_path, monkeypatch) -> None:
        """Test that a plain path in DATABASE_URL is used and its directory created."""
        target = temp_db_path.parent / "nested" / "gosince.db"
        monkeypatch.setenv("DATABASE_URL", str(target))

        assert get_database_url() == f"sqlite:///{target}"
        assert target.parent.is_dir()

    def test_env_sqlite_url_is_kept(self, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")

        assert get_database_url() == "sqlite:///:memory:"

    def test_init_db_with_path(self, temp_db_path) -> None:
        init_db(temp_db_path)

        engine = create_db_engine(temp_db_path)
        try:
            assert "goapis" in inspect(engine).get_table_names()
        finally:
            engine.dispose()

    def test_shared_session_follows_env(self, temp_db_path, monkeypatch) -> None:
        """Test that the lookup session reads the DATABASE_URL database."""
        monkeypatch.setenv("DATABASE_URL", str(temp_db_path))
        reset_engine()
        try:
            init_db()
            with get_session() as session:
                APIRecordRepository(session).insert_ignore(make_record())
            with get_session() as session:
                assert APIRecordRepository(session).count() == 1
        finally:
            reset_engine()
