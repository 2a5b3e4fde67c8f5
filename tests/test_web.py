"""Tests for the lookup web service."""

import tempfile
from contextlib import contextmanager
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from gosince.core.enums import Category
from gosince.core.schema import APIRecord
from gosince.db.engine import create_db_engine, ensure_schema
from gosince.db.repositories import APIRecordRepository


@pytest.fixture
def temp_db_path():
    """Create a temporary database file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def test_engine(temp_db_path):
    """Create a test database engine with a few records."""
    engine = create_db_engine(temp_db_path)
    ensure_schema(engine)

    session = sessionmaker(bind=engine)()
    repo = APIRecordRepository(session)
    for version, package_name, category, description in [
        ("1", "strings", Category.METHOD, "method (*Builder) String() string"),
        ("10", "database/sql", Category.METHOD, "method (IsolationLevel) String() string"),
        ("2", "bytes", Category.METHOD, "method (*Buffer) String() string"),
        ("2", "archive", Category.FUNC, "func String() string"),
    ]:
        repo.insert_ignore(
            APIRecord(
                name="String",
                category=category,
                version=version,
                package_name=package_name,
                description=description,
                golang_url=f"https://golang.org/pkg/{package_name}/#String",
            )
        )
    session.close()

    yield engine
    engine.dispose()


@pytest.fixture
def client(test_engine, monkeypatch):
    """Create a test client with mocked database."""
    TestSessionLocal = sessionmaker(bind=test_engine)

    @contextmanager
    def mock_get_session():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    monkeypatch.setattr("gosince.web.routes.lookup.get_session", mock_get_session)
    monkeypatch.setattr("gosince.web.app.init_db", lambda: None)

    from gosince.web.app import create_app

    return TestClient(create_app())


class TestLookupRoute:
    """Tests for GET /v1."""

    def test_lookup_sorted(self, client: TestClient) -> None:
        """Test that results are newest version first, then by package."""
        response = client.get("/v1", params={"name": "String"})

        assert response.status_code == 200
        data = response.json()
        assert [(r["version"], r["package_name"]) for r in data] == [
            ("10", "database/sql"),
            ("2", "archive"),
            ("2", "bytes"),
            ("1", "strings"),
        ]

    def test_lookup_fields(self, client: TestClient) -> None:
        response = client.get("/v1", params={"name": "String", "cat": "func"})

        assert response.json() == [
            {
                "name": "String",
                "category": "func",
                "version": "2",
                "package_name": "archive",
                "description": "func String() string",
                "golang_url": "https://golang.org/pkg/archive/#String",
            }
        ]

    def test_lookup_headers(self, client: TestClient) -> None:
        response = client.get("/v1", params={"name": "String"})

        assert response.headers["content-type"] == "application/json; charset=utf-8"
        assert response.headers["cache-control"] == "max-age=3600"

    def test_lookup_no_match(self, client: TestClient) -> None:
        response = client.get("/v1", params={"name": "Nothing"})

        assert response.status_code == 200
        assert response.json() == []

    def test_name_is_trimmed(self, client: TestClient) -> None:
        response = client.get("/v1", params={"name": "  String "})

        assert response.status_code == 200
        assert len(response.json()) == 4

    @pytest.mark.parametrize("name", ["ab&", "ab-", "", "a b", "Str%"])
    def test_invalid_name(self, client: TestClient, name: str) -> None:
        """Test that names with non-word characters are rejected."""
        response = client.get("/v1", params={"name": name})

        assert response.status_code == 400
        assert "should only contains [A-Za-z0-9_]" in response.text

    def test_invalid_category(self, client: TestClient) -> None:
        """Test that an unknown category is rejected."""
        response = client.get("/v1", params={"name": "String", "cat": "label"})

        assert response.status_code == 400
        assert "label is not one of" in response.text


class TestLookupQuery:
    """Tests for lookup parameter validation."""

    @pytest.mark.parametrize("name", ["abc", "a1", "Open", "_ab"])
    def test_valid_names(self, name: str) -> None:
        from gosince.core.schema import LookupQuery

        assert LookupQuery(name=name).name == name

    def test_blank_category_is_none(self) -> None:
        from gosince.core.schema import LookupQuery

        assert LookupQuery(name="abc", category="").category is None
        assert LookupQuery(name="abc", category="var").category == Category.VAR
