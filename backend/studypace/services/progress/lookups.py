"""
Row lookups shared by the progress services.

Each fetch raises NotFoundError for a missing id. Pass for_update=True when
the caller is about to read-modify-write the row, so concurrent writers to
the same record serialize on the row lock (PostgreSQL; SQLite ignores it).
"""

from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studypace.db.models import Category, Course, DailyEntry, Milestone, User
from studypace.middleware.error_handling import InvariantViolationError, NotFoundError


async def fetch_user(db: AsyncSession, user_id: int, for_update: bool = False) -> User:
    """Fetch a user or raise NotFoundError."""
    query = select(User).where(User.id == user_id)
    if for_update:
        query = query.with_for_update()
    user = (await db.execute(query)).scalar_one_or_none()
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


async def fetch_course(
    db: AsyncSession, course_id: int, for_update: bool = False
) -> Course:
    """Fetch a course or raise NotFoundError."""
    query = select(Course).where(Course.id == course_id)
    if for_update:
        query = query.with_for_update()
    course = (await db.execute(query)).scalar_one_or_none()
    if course is None:
        raise NotFoundError(f"Course {course_id} not found")
    return course


async def fetch_category(
    db: AsyncSession, category_id: int, for_update: bool = False
) -> Category:
    """Fetch a category or raise NotFoundError."""
    query = select(Category).where(Category.id == category_id)
    if for_update:
        query = query.with_for_update()
    category = (await db.execute(query)).scalar_one_or_none()
    if category is None:
        raise NotFoundError(f"Category {category_id} not found")
    return category


async def fetch_entry(
    db: AsyncSession, entry_id: int, for_update: bool = False
) -> DailyEntry:
    """Fetch a daily entry or raise NotFoundError."""
    query = select(DailyEntry).where(DailyEntry.id == entry_id)
    if for_update:
        query = query.with_for_update()
    entry = (await db.execute(query)).scalar_one_or_none()
    if entry is None:
        raise NotFoundError(f"Daily entry {entry_id} not found")
    return entry


async def fetch_course_categories(
    db: AsyncSession, course_id: int, for_update: bool = False
) -> list[Category]:
    """All categories of a course in display order."""
    query = (
        select(Category)
        .where(Category.course_id == course_id)
        .order_by(Category.order, Category.id)
    )
    if for_update:
        query = query.with_for_update()
    return list((await db.execute(query)).scalars().all())


async def fetch_milestone(db: AsyncSession, milestone_id: Optional[int]) -> Optional[Milestone]:
    """Fetch a milestone, or None when the id is None or unknown."""
    if milestone_id is None:
        return None
    return await db.get(Milestone, milestone_id)


async def fetch_day_entry(
    db: AsyncSession, category_id: int, entry_date: date
) -> Optional[DailyEntry]:
    """
    The locked entry for (category, date), if any.

    Raises:
        InvariantViolationError: If more than one entry exists for the key.
    """
    result = await db.execute(
        select(DailyEntry)
        .where(DailyEntry.category_id == category_id, DailyEntry.date == entry_date)
        .with_for_update()
    )
    rows = result.scalars().all()
    if len(rows) > 1:
        raise InvariantViolationError(
            f"{len(rows)} daily entries exist for category {category_id} on {entry_date}",
            details={"category_id": category_id, "date": entry_date.isoformat()},
        )
    return rows[0] if rows else None
