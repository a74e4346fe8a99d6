"""
Library Store Backend - Test Configuration (conftest.py)
=========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own in-memory SQLite database (aiosqlite +
       StaticPool), so services run real SQL without a PostgreSQL server.

Fixture Hierarchy (all function-scoped):
    ├── test_settings:    Settings built from the test environment below
    ├── database:         Database with all tables created
    ├── db_session:       AsyncSession on that database
    ├── seed:             one user, two genres, two books (ids only)
    ├── auth_headers:     Authorization header for the seeded user
    ├── test_client:      HTTPX AsyncClient bound to create_app(database=...)
    └── mock_db_session:  AsyncMock session for failure-path tests
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from typing import AsyncGenerator, Dict
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before any library_api import builds the default Settings.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-0123456789"
os.environ["LOG_LEVEL"] = "WARNING"

from library_api.config import Settings  # noqa: E402
from library_api.database import Database  # noqa: E402
from library_api.main import create_app  # noqa: E402
from library_api.models import Book, BookCondition, Genre, User  # noqa: E402
from library_api.security import create_access_token, hash_password  # noqa: E402

TEST_PASSWORD = "Secret#123"


@dataclass
class SeedData:
    user_id: UUID
    fiction_id: UUID
    science_id: UUID
    # Dune: Fiction, 10.50, 5 in stock
    dune_id: UUID
    # Cosmos: Science, 20.00, 2 in stock
    cosmos_id: UUID


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings() -> Settings:
    return Settings()


@pytest_asyncio.fixture
async def database(test_settings) -> AsyncGenerator[Database, None]:
    db = Database(test_settings)
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed(database) -> SeedData:
    """
    Committed baseline data, created in its own (closed) session.

    Tests receive ids only; re-read rows through their own session.
    """
    async with database.session_factory() as session:
        user = User(
            email="reader@example.com",
            password=hash_password(TEST_PASSWORD),
            username="reader",
        )
        fiction = Genre(name="Fiction")
        science = Genre(name="Science")
        session.add_all([user, fiction, science])
        await session.flush()

        dune = Book(
            title="Dune",
            writer="Frank Herbert",
            publisher="Chilton",
            publication_year=1965,
            price=Decimal("10.50"),
            stock_quantity=5,
            condition=BookCondition.NEW,
            genre_id=fiction.id,
        )
        cosmos = Book(
            title="Cosmos",
            writer="Carl Sagan",
            publisher="Random House",
            publication_year=1980,
            price=Decimal("20.00"),
            stock_quantity=2,
            condition=BookCondition.USED,
            genre_id=science.id,
        )
        session.add_all([dune, cosmos])
        await session.commit()

        return SeedData(
            user_id=user.id,
            fiction_id=fiction.id,
            science_id=science.id,
            dune_id=dune.id,
            cosmos_id=cosmos.id,
        )


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def auth_headers(database, seed, test_settings) -> Dict[str, str]:
    async with database.session_factory() as session:
        user = await session.get(User, seed.user_id)
    token = create_access_token(user, test_settings)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_client(database, test_settings) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX client wired straight to the ASGI app (no network, no lifespan).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health-check")
            assert response.status_code == 200
    """
    app = create_app(settings=test_settings, database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Mocks
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for driving storage failures.

    Usage:
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.scalar = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session
