"""
Daily Entry Service

The per-date completion ledger. Each (category, date) has at most one entry
holding the committed count for that day. Writes reconcile into the
category's lifetime counter by delta, never by absolute value, so
overwriting an entry cannot double count.

Responsibilities:
- Upsert single entries and save whole days in one transaction
- Remove entries, giving their count back
- Date, range, category and user queries
- Keep the owner's cached streak in step with the ledger

Usage:
    from studypace.services.progress import DailyEntryService

    service = DailyEntryService(db)
    entry = await service.upsert_entry(
        category_id=3, course_id=1, user_id=1, date="2024-05-02", completed=5
    )
"""

import logging
from datetime import date
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from studypace.db.base import atomic
from studypace.db.models import Category, DailyEntry
from studypace.middleware.error_handling import (
    InvalidArgumentError,
    InvariantViolationError,
)
from studypace.models.progress import DailyEntryResponse, SaveDayEntry, SaveDayResponse
from studypace.services.progress.calendar import Clock, parse_calendar_date, utc_now
from studypace.services.progress.lookups import (
    fetch_category,
    fetch_course,
    fetch_day_entry,
    fetch_entry,
    fetch_user,
)
from studypace.services.progress.streak_tracking import StreakTrackingService

logger = logging.getLogger(__name__)


def _validate_completed(completed: int) -> None:
    if completed < 0:
        raise InvalidArgumentError(
            f"Completed count must not be negative (got {completed})",
            details={"completed": completed},
        )


class DailyEntryService:
    """
    Service for the (category, date) completion ledger.
    """

    def __init__(self, db: AsyncSession, clock: Optional[Clock] = None):
        """
        Initialize the daily entry service.

        Args:
            db: SQLAlchemy async database session.
            clock: Source of the current time (defaults to UTC wall clock).
        """
        self.db = db
        self.clock = clock or utc_now
        self.streaks = StreakTrackingService(db, clock=self.clock)

    # ===========================================
    # Writes
    # ===========================================

    async def upsert_entry(
        self,
        category_id: int,
        course_id: int,
        user_id: int,
        date: Union[str, date],
        completed: int,
    ) -> DailyEntryResponse:
        """
        Create or overwrite the entry for a category on a date.

        An existing entry is patched and the category's completed counter
        moves by (completed - previous value), floored at 0. A new entry adds
        its full value to the counter.

        Args:
            category_id: Category the work belongs to.
            course_id: Course owning the category.
            user_id: User who did the work.
            date: Calendar date, "YYYY-MM-DD" or a date.
            completed: Items completed on that date.

        Returns:
            The stored entry.

        Raises:
            NotFoundError: If the user, course or category doesn't exist.
            InvalidArgumentError: If the date is malformed, completed is
                negative, or the category belongs to another course.
            InvariantViolationError: If the ledger holds (or would hold) two
                entries for the same category and date.
        """
        entry_date = parse_calendar_date(date)
        _validate_completed(completed)

        async with atomic(self.db):
            await self._check_owner(course_id, user_id)
            entry = await self._write_entry(
                category_id, course_id, user_id, entry_date, completed
            )
            await self.streaks.sync_user_streak(user_id)

        return DailyEntryResponse.model_validate(entry)

    async def save_day(
        self,
        course_id: int,
        user_id: int,
        date: Union[str, date],
        entries: list[SaveDayEntry],
    ) -> SaveDayResponse:
        """
        Upsert the counts of several categories for one date.

        Entries with completed == 0 and no existing record are skipped so the
        ledger doesn't fill up with empty rows; an existing entry can still be
        overwritten down to 0. The whole batch is one transaction.

        Raises:
            NotFoundError: If the user, course or a category doesn't exist.
            InvalidArgumentError: If the date is malformed, a count is
                negative, or a category belongs to another course.
            InvariantViolationError: See upsert_entry.
        """
        entry_date = parse_calendar_date(date)
        for item in entries:
            _validate_completed(item.completed)

        saved = 0
        skipped = 0

        async with atomic(self.db):
            await self._check_owner(course_id, user_id)

            for item in entries:
                if item.completed == 0:
                    existing = await fetch_day_entry(self.db, item.category_id, entry_date)
                    if existing is None:
                        skipped += 1
                        continue

                await self._write_entry(
                    item.category_id, course_id, user_id, entry_date, item.completed
                )
                saved += 1

            await self.streaks.sync_user_streak(user_id)

        logger.info(
            f"Saved {entry_date} for course {course_id}: "
            f"{saved} entries written, {skipped} skipped"
        )
        return SaveDayResponse(
            course_id=course_id, date=entry_date, saved=saved, skipped=skipped
        )

    async def remove_entry(self, entry_id: int) -> None:
        """
        Delete an entry and subtract its count from the category.

        The category's completed counter is floored at 0.

        Raises:
            NotFoundError: If the entry doesn't exist.
        """
        async with atomic(self.db):
            entry = await fetch_entry(self.db, entry_id, for_update=True)
            category = await self.db.get(Category, entry.category_id, with_for_update=True)
            if category is not None:
                category.completed = max(0, category.completed - entry.completed)

            user_id = entry.user_id
            await self.db.delete(entry)
            await self.streaks.sync_user_streak(user_id)

        logger.info(f"Removed daily entry {entry_id}")

    # ===========================================
    # Queries
    # ===========================================

    async def get_entries_for_date(
        self, course_id: int, date: Union[str, date]
    ) -> list[DailyEntryResponse]:
        """Entries of a course on one date."""
        entry_date = parse_calendar_date(date)
        await fetch_course(self.db, course_id)
        return await self._query(
            DailyEntry.course_id == course_id, DailyEntry.date == entry_date
        )

    async def get_entries_in_range(
        self,
        course_id: int,
        start: Union[str, date],
        end: Union[str, date],
    ) -> list[DailyEntryResponse]:
        """
        Entries of a course between start and end, both inclusive.

        Raises:
            InvalidArgumentError: If a date is malformed or start is after end.
        """
        start_date = parse_calendar_date(start)
        end_date = parse_calendar_date(end)
        if start_date > end_date:
            raise InvalidArgumentError(
                f"Range start {start_date} is after end {end_date}"
            )

        await fetch_course(self.db, course_id)
        return await self._query(
            DailyEntry.course_id == course_id,
            DailyEntry.date >= start_date,
            DailyEntry.date <= end_date,
        )

    async def get_entries_by_category(self, category_id: int) -> list[DailyEntryResponse]:
        """All entries of a category."""
        await fetch_category(self.db, category_id)
        return await self._query(DailyEntry.category_id == category_id)

    async def get_entries_by_user(self, user_id: int) -> list[DailyEntryResponse]:
        """All entries of a user."""
        await fetch_user(self.db, user_id)
        return await self._query(DailyEntry.user_id == user_id)

    # ===========================================
    # Internals
    # ===========================================

    async def _check_owner(self, course_id: int, user_id: int) -> None:
        """Ensure the user and course exist."""
        await fetch_user(self.db, user_id)
        await fetch_course(self.db, course_id)

    async def _write_entry(
        self,
        category_id: int,
        course_id: int,
        user_id: int,
        entry_date: date,
        completed: int,
    ) -> DailyEntry:
        """
        Upsert one entry and apply the delta to its category.

        Runs inside the caller's transaction.
        """
        category = await fetch_category(self.db, category_id, for_update=True)
        if category.course_id != course_id:
            raise InvalidArgumentError(
                f"Category {category_id} does not belong to course {course_id}",
                details={"category_id": category_id, "course_id": course_id},
            )

        now = self.clock()
        entry = await fetch_day_entry(self.db, category_id, entry_date)

        if entry is not None:
            delta = completed - entry.completed
            entry.completed = completed
            entry.updated_at = now
            category.completed = max(0, category.completed + delta)
            logger.debug(
                f"Updated entry {entry.id} ({category_id}, {entry_date}): delta {delta:+d}"
            )
            return entry

        entry = DailyEntry(
            category_id=category_id,
            course_id=course_id,
            user_id=user_id,
            date=entry_date,
            completed=completed,
            created_at=now,
            updated_at=now,
        )
        self.db.add(entry)
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise InvariantViolationError(
                f"Concurrent write created a second entry for category "
                f"{category_id} on {entry_date}",
                details={"category_id": category_id, "date": entry_date.isoformat()},
            ) from e

        category.completed = category.completed + completed
        return entry

    async def _query(self, *conditions) -> list[DailyEntryResponse]:
        result = await self.db.execute(
            select(DailyEntry)
            .where(*conditions)
            .order_by(DailyEntry.date.desc(), DailyEntry.category_id)
        )
        return [DailyEntryResponse.model_validate(e) for e in result.scalars().all()]
