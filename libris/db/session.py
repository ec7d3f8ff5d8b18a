"""Database session management with async engine and session factory."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from libris.config import settings

# Register table metadata before create_all
from libris.db import models  # noqa: F401


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite engines use the driver's default pool; server databases get a
    connection pool sized for the API and CLI.

    Args:
        database_url: SQLAlchemy database URL with async driver
        echo: Echo SQL queries to console

    Returns:
        AsyncEngine instance
    """
    engine_kwargs: dict[str, Any] = {"echo": echo}
    if not database_url.startswith("sqlite"):
        engine_kwargs.update(pool_size=10, max_overflow=20, pool_pre_ping=True)
    return create_async_engine(database_url, **engine_kwargs)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to an engine."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


# Create async engine with connection pooling
engine = build_engine(settings.database_url, echo=settings.database_echo)

# Create async session factory
AsyncSessionLocal = build_session_factory(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency injection function for FastAPI.

    Provides an async database session with automatic cleanup.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Initialize database tables.

    Creates all tables defined in SQLModel metadata.

    Args:
        bind: Engine to create tables on (defaults to the module engine)
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db() -> None:
    """Close database engine and connections."""
    await engine.dispose()
