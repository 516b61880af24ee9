"""
Shared Test Fixtures and Configuration

This module provides pytest fixtures used across unit and integration tests.

Every test gets its own in-memory SQLite database (aiosqlite) with the full
schema, and services run against a fixed clock so "today" is predictable.
"""

import os
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio

# Add the backend directory to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Settings are read once at import time, so the test configuration must be
# in place before anything from studypace is imported.
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["TIMEZONE"] = "UTC"
os.environ["DEBUG"] = "true"

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from studypace.db.base import Base  # noqa: E402
from studypace.db.models import Category, Course, Milestone, User  # noqa: E402


# ============================================================================
# Clock
# ============================================================================

NOW = datetime(2024, 5, 2, 12, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


class FakeClock:
    """Settable clock for services; call it to read the current time."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.now = self.now + timedelta(days=days, hours=hours)

    @property
    def today(self) -> date:
        return self.now.date()


@pytest.fixture
def clock() -> FakeClock:
    """A clock fixed at 2024-05-02 12:00 UTC."""
    return FakeClock()


# ============================================================================
# Database
# ============================================================================


@pytest_asyncio.fixture(scope="function")
async def session_maker() -> AsyncGenerator[async_sessionmaker, None]:
    """
    Session factory bound to a fresh in-memory database.

    StaticPool keeps a single connection, so every session made by this
    factory sees the same database.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


# ============================================================================
# Seed Data
# ============================================================================


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    """A user with an empty streak."""
    row = User(name="Ada", email="ada@example.com", current_streak=0, longest_streak=0)
    db_session.add(row)
    await db_session.commit()
    return row


@pytest_asyncio.fixture
async def course(db_session: AsyncSession, user: User) -> Course:
    """A course ending 10 days after TODAY, last touched yesterday."""
    row = Course(
        user_id=user.id,
        title="Japanese N5",
        end_date=NOW + timedelta(days=10),
        last_updated=NOW - timedelta(days=1),
        checked_items=[],
        color="emerald",
        icon="book-open",
    )
    db_session.add(row)
    await db_session.commit()
    return row


@pytest_asyncio.fixture
async def categories(db_session: AsyncSession, course: Course) -> list[Category]:
    """Two categories: 50 vocabulary items (10 done) and 20 kanji (none done)."""
    rows = [
        Category(
            course_id=course.id,
            name="Vocabulary",
            icon="book-open",
            color="emerald",
            total=50,
            completed=10,
            today_completed=0,
            order=0,
        ),
        Category(
            course_id=course.id,
            name="Kanji",
            icon="pen",
            color="sky",
            total=20,
            completed=0,
            today_completed=0,
            order=1,
        ),
    ]
    db_session.add_all(rows)
    await db_session.commit()
    return rows


@pytest.fixture
def make_milestone(db_session: AsyncSession) -> Callable:
    """Factory for milestones owned by a user."""

    async def _make(user_id: int, deadline: datetime) -> Milestone:
        row = Milestone(user_id=user_id, title="JLPT", description="", deadline=deadline)
        db_session.add(row)
        await db_session.commit()
        return row

    return _make


@pytest.fixture
def ids(user: User, course: Course, categories: list[Category]) -> SimpleNamespace:
    """
    Plain ids of the seed rows.

    A failed service call rolls the session back, which expires loaded rows;
    tests that assert after a failure read ids from here.
    """
    return SimpleNamespace(
        user=user.id,
        course=course.id,
        vocabulary=categories[0].id,
        kanji=categories[1].id,
    )
