"""
Shared pytest fixtures.

The application is pointed at a shared in-memory SQLite database and
rate limiting is switched off before ``app`` is imported anywhere.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.infrastructure.persistence.database import build_engine, get_engine, init_schema  # noqa: E402
from app.infrastructure.persistence.tables import metadata  # noqa: E402


@pytest.fixture
def engine():
    """A fresh in-memory database with every table created."""
    db = build_engine("sqlite://")
    init_schema(db)
    yield db
    db.dispose()


@pytest.fixture
def app_db():
    """The application's shared engine, emptied after each test."""
    db = get_engine()
    init_schema(db)
    yield db
    with db.begin() as conn:
        for table in reversed(metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def client(app_db):
    """TestClient over the real app; dependency overrides reset afterwards."""
    from app.main import app

    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def login_as(client: TestClient):
    """Return a helper that registers a user and yields its bearer headers."""

    def _login(email: str = "trader@example.com") -> dict[str, str]:
        client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": "secret123", "name": "Trader"},
        )
        response = client.post(
            "/api/v1/auth/login", json={"email": email, "password": "secret123"}
        )
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
