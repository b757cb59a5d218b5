"""
Card Activation Backend — Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test that touches the database gets its own SQLite file under
       pytest's tmp_path, so tests never share state.

Fixture Hierarchy:
    test_settings      Settings bound to a temp SQLite file
    ├── database       connected Database with tables created
    │   └── (services open sessions with `async with database.session()`)
    ├── app            FastAPI app with its lifespan running (seeded)
    │   └── test_client  HTTPX AsyncClient over ASGITransport
    mock_db_session    AsyncMock session for failure-path unit tests
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set before any cardactivation import so the module-level settings are sane
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-the-test-suite-only")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from cardactivation.config import Settings  # noqa: E402
from cardactivation.database import Database  # noqa: E402

TEST_JWT_SECRET = "test-jwt-secret-for-the-test-suite-only"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a fresh SQLite file; one connection attempt, no waits."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret=TEST_JWT_SECRET,
        admin_username=ADMIN_USERNAME,
        admin_password=ADMIN_PASSWORD,
        db_connect_attempts=1,
        db_reconnect_interval=0,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    """A connected Database with all tables created but nothing seeded."""
    db = Database(test_settings)
    await db.connect()
    await db.create_all()
    yield db
    await db.close()


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.flush.side_effect = SQLAlchemyError("boom")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session


@pytest.fixture
def valid_activation():
    """A submission that passes every validation step."""
    return {
        "cardType": "Visa Classic",
        "lastSixDigits": "123456",
        "holderName": "Ada Lovelace",
        "currency": "USD",
        "dailyLimit": 1000,
        "accept": True,
        "pin": "4321",
    }


@pytest_asyncio.fixture
async def app(test_settings):
    """
    A FastAPI app with its lifespan running.

    ASGITransport does not send lifespan events, so the lifespan context is
    entered here directly: tables are created, the admin and the zero-priced
    fee ledger are seeded.
    """
    from cardactivation.main import create_app, lifespan

    application = create_app(test_settings)
    async with lifespan(application):
        yield application


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def admin_token(test_client):
    """Bearer token obtained through the real login endpoint."""
    response = await test_client.post(
        "/admin/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return response.json()["token"]
