"""
Library Store Backend - Database Session Management
====================================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       FastAPI session dependency.
How:   A `Database` object owns one engine and one session factory. The
       application factory creates it and stores it on `app.state.database`;
       `get_db_session` reads it back from the incoming request. Nothing in the
       package holds a module-level engine, so tests can hand the app an
       in-memory SQLite database.
Who:   Route handlers (via Depends), the health check, Alembic and the seed command.

Connection Pooling:
    pool_size / max_overflow come from settings for server databases.
    SQLite URLs skip pool sizing; in-memory SQLite uses StaticPool so every
    session sees the same connection (and therefore the same data).
    pool_recycle=3600 recycles connections every hour.
"""

import logging
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from library_api.config import Settings

logger = logging.getLogger(__name__)

# Deterministic constraint names keep Alembic migrations stable across databases.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp used as the Python-side column default."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers with this metadata, which Alembic reads for
    autogenerate and which tests use for `create_all()`.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class Database:
    """
    Owns the async engine and the session factory for one database URL.

    Lifecycle:
        1. Built by create_app() (or a test fixture) from Settings
        2. Stored on app.state.database
        3. Sessions are opened per request through get_db_session()
        4. dispose() closes pooled connections at shutdown
    """

    def __init__(self, settings: Settings, engine: Optional[AsyncEngine] = None):
        self.settings = settings
        self.engine = engine or self._build_engine(settings)
        # expire_on_commit=False: response models read attributes after commit.
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @staticmethod
    def _build_engine(settings: Settings) -> AsyncEngine:
        echo = settings.log_level == "DEBUG"
        if settings.is_sqlite:
            kwargs = {"connect_args": {"check_same_thread": False}}
            if ":memory:" in settings.database_url:
                kwargs["poolclass"] = StaticPool
            return create_async_engine(settings.database_url, echo=echo, **kwargs)

        return create_async_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
            echo=echo,
        )

    async def create_all(self) -> None:
        """Create every table registered on Base. Used by tests and local SQLite runs."""
        # Import for side effects: registers all models on Base.metadata.
        import library_api.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """
        What:  Gracefully closes all connections in the pool.
        When:  Application shutdown (lifespan handler).
        """
        await self.engine.dispose()
        logger.info("Database engine disposed")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the Database stored on the application
        2. Yields it to the route handler
        3. On success: commits (a no-op when the service already committed)
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session, returning the connection to the pool

    Example usage in a route:
        @router.get("/books")
        async def list_books(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
