"""
Streak Tracking Service

Derives study streaks from the distinct calendar dates on which a user
recorded activity (daily entries with completions, and study logs).

Responsibilities:
- Calculate current and longest streaks
- Track streak milestones
- Keep the cached streak fields on the user row in step with the ledger

A streak is judged off the last completed day, not today-in-progress: a user
who studied yesterday but not yet today keeps their streak. It only resets
once a full calendar day is skipped.

Usage:
    from studypace.services.progress.streak_tracking import StreakTrackingService

    service = StreakTrackingService(db)
    streak = await service.get_streak_data(user_id=1)
"""

import logging
from datetime import date, timedelta
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studypace.config import settings
from studypace.db.base import atomic
from studypace.db.models import DailyEntry, StudyLog
from studypace.enums.progress import ActivitySource
from studypace.models.progress import StreakData
from studypace.services.progress.calendar import Clock, local_today, utc_now
from studypace.services.progress.lookups import fetch_user

logger = logging.getLogger(__name__)


def calculate_current_streak(activity_dates: Iterable[date], today: date) -> int:
    """
    Count consecutive activity days ending today (or yesterday).

    Walks back from today one day at a time. A missing entry for today is
    skipped rather than ending the walk; any later missing day ends it.

    Args:
        activity_dates: Dates with activity, any order, duplicates allowed.
        today: Current local calendar date.

    Returns:
        Number of consecutive days in the current streak.
    """
    dates = set(activity_dates)
    if not dates:
        return 0

    streak = 0
    for offset in range(len(dates) + 1):
        if today - timedelta(days=offset) in dates:
            streak += 1
        elif offset == 0:
            continue
        else:
            break

    return streak


def calculate_longest_streak(activity_dates: Iterable[date]) -> int:
    """
    Length of the longest run of consecutive activity days.

    Args:
        activity_dates: Dates with activity, any order, duplicates allowed.

    Returns:
        int: Length of the longest consecutive run, 0 when there are no dates.
    """
    sorted_dates = sorted(set(activity_dates))
    if not sorted_dates:
        return 0

    longest = 1
    current = 1

    for i in range(1, len(sorted_dates)):
        if sorted_dates[i] == sorted_dates[i - 1] + timedelta(days=1):
            current += 1
            longest = max(longest, current)
        else:
            current = 1

    return longest


class StreakTrackingService:
    """
    Service for study streak calculation and the user's cached streak.
    """

    def __init__(self, db: AsyncSession, clock: Optional[Clock] = None):
        """
        Initialize the streak tracking service.

        Args:
            db: SQLAlchemy async database session.
            clock: Source of the current time (defaults to UTC wall clock).
        """
        self.db = db
        self.clock = clock or utc_now

    async def get_streak_data(self, user_id: int) -> StreakData:
        """
        Get streak information for a user.

        Reads the most recent STREAK_LOOKBACK_RECORDS distinct activity dates.

        Returns:
            StreakData with current/longest streak, total days logged, the
            most recent dates (newest first) and milestone progress.

        Raises:
            NotFoundError: If the user doesn't exist.
        """
        user = await fetch_user(self.db, user_id)
        activity_dates = await self._fetch_activity_dates(user_id)
        today = local_today(self.clock)

        current_streak = calculate_current_streak(activity_dates, today)
        longest_streak = max(
            calculate_longest_streak(activity_dates), user.longest_streak or 0
        )

        milestones = settings.STREAK_MILESTONES
        reached = [m for m in milestones if longest_streak >= m]
        next_milestone = next((m for m in milestones if m > current_streak), None)

        return StreakData(
            current_streak=current_streak,
            longest_streak=longest_streak,
            total_days=len(activity_dates),
            recent_dates=activity_dates[: settings.STREAK_RECENT_DATES],
            last_activity=activity_dates[0] if activity_dates else None,
            is_active_today=bool(activity_dates) and activity_dates[0] == today,
            milestones_reached=reached,
            next_milestone=next_milestone,
        )

    async def refresh_user_streak(self, user_id: int) -> StreakData:
        """
        Recompute and store the user's cached streak fields.

        Returns:
            The freshly computed StreakData.

        Raises:
            NotFoundError: If the user doesn't exist.
        """
        async with atomic(self.db):
            await self.sync_user_streak(user_id)
        return await self.get_streak_data(user_id)

    async def sync_user_streak(self, user_id: int) -> None:
        """
        Update the cached streak on the user row without committing.

        Called by ledger writers inside their own transaction so the cache
        changes together with the records it is derived from. The longest
        streak never decreases.
        """
        await self.db.flush()
        user = await fetch_user(self.db, user_id, for_update=True)
        activity_dates = await self._fetch_activity_dates(user_id)
        today = local_today(self.clock)

        user.current_streak = calculate_current_streak(activity_dates, today)
        user.longest_streak = max(
            user.longest_streak or 0,
            calculate_longest_streak(activity_dates),
        )
        user.last_completed_date = activity_dates[0] if activity_dates else None

        logger.debug(
            f"User {user_id} streak: current={user.current_streak}, "
            f"longest={user.longest_streak}"
        )

    async def _fetch_activity_dates(self, user_id: int) -> list[date]:
        """
        Distinct activity dates for a user, newest first.

        Merges every ActivitySource and keeps the most recent
        STREAK_LOOKBACK_RECORDS dates.
        """
        limit = settings.STREAK_LOOKBACK_RECORDS
        dates: set[date] = set()
        for source in ActivitySource:
            dates.update(await self._fetch_source_dates(source, user_id, limit))
        return sorted(dates, reverse=True)[:limit]

    async def _fetch_source_dates(
        self, source: ActivitySource, user_id: int, limit: int
    ) -> list[date]:
        """Most recent distinct dates recorded by one activity source."""
        if source == ActivitySource.DAILY_ENTRY:
            query = (
                select(DailyEntry.date)
                .where(DailyEntry.user_id == user_id, DailyEntry.completed > 0)
                .distinct()
                .order_by(DailyEntry.date.desc())
                .limit(limit)
            )
        else:
            query = (
                select(StudyLog.date)
                .where(StudyLog.user_id == user_id)
                .distinct()
                .order_by(StudyLog.date.desc())
                .limit(limit)
            )

        result = await self.db.execute(query)
        return [row[0] for row in result.all()]
