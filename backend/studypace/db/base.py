"""
Database Base Configuration

Sets up the async SQLAlchemy engine and session management. PostgreSQL
(asyncpg) is the production target; any async SQLAlchemy URL works through
DATABASE_URL_OVERRIDE (SQLite via aiosqlite for local runs and tests).

Usage:
    from studypace.db.base import async_session_maker, Base

    # In a route
    async with async_session_maker() as session:
        result = await session.execute(...)
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from studypace.config import settings, yaml_config


def _engine_options(url: str) -> dict[str, Any]:
    """Build engine keyword arguments; SQLite does not take pool sizing."""
    if url.startswith("sqlite"):
        return {"echo": settings.DEBUG}

    # Get pool configuration from yaml config
    db_config: dict[str, Any] = yaml_config.get("database", {})
    return {
        "pool_size": db_config.get("pool_size", 5),
        "max_overflow": db_config.get("max_overflow", 10),
        "pool_timeout": db_config.get("pool_timeout", 30),
        "echo": settings.DEBUG,
    }


# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    **_engine_options(settings.DATABASE_URL),
)

# Create async session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


# Import models AFTER Base is defined to avoid circular imports.
# This ensures all models are registered with Base.metadata.
from studypace.db import models  # noqa: F401, E402


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database sessions in FastAPI routes.

    Usage:
        @app.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """
    Initialize database tables.

    Called on application startup to create tables that don't exist.
    For production, use Alembic migrations instead.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a block of work as one transaction.

    Commits when the block exits normally and rolls back on any exception,
    so a multi-row update (e.g. ledger entry plus category counter) is
    either fully applied or not at all.

    Usage:
        async with atomic(self.db):
            entry.completed = value
            category.completed += delta
    """
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
