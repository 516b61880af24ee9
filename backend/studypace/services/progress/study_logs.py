"""
Study Log Service

Per-course daily feedback: how many items the learner reports, their mood
and the perceived difficulty. One log per (course, date); logging the same
day again overwrites it. Every logged day counts as activity for streaks.

Usage:
    from studypace.services.progress import StudyLogService

    service = StudyLogService(db)
    log = await service.log_study_day(
        user_id=1, course_id=1, mood=4, difficulty=2, items_completed=12
    )
"""

import logging
from datetime import date
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studypace.db.base import atomic
from studypace.db.models import StudyLog
from studypace.middleware.error_handling import InvalidArgumentError
from studypace.models.progress import StudyLogResponse
from studypace.services.progress.calendar import (
    Clock,
    local_today,
    parse_calendar_date,
    utc_now,
)
from studypace.services.progress.lookups import fetch_course, fetch_user
from studypace.services.progress.streak_tracking import StreakTrackingService

logger = logging.getLogger(__name__)


class StudyLogService:
    """Service for per-course daily study feedback."""

    def __init__(self, db: AsyncSession, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or utc_now
        self.streaks = StreakTrackingService(db, clock=self.clock)

    async def log_study_day(
        self,
        user_id: int,
        course_id: int,
        mood: int,
        difficulty: int,
        items_completed: int = 0,
        note: Optional[str] = None,
        date: Optional[Union[str, date]] = None,
    ) -> StudyLogResponse:
        """
        Record (or overwrite) the study log of a course for a date.

        Args:
            user_id: Learner writing the log.
            course_id: Course the log is about.
            mood: 1 (poor) to 5 (great).
            difficulty: 1 (easy) to 5 (hard).
            items_completed: Items the learner reports for the day.
            note: Optional free text.
            date: "YYYY-MM-DD" or a date; defaults to today.

        Returns:
            The stored log.

        Raises:
            NotFoundError: If the user or course doesn't exist.
            InvalidArgumentError: If the date is malformed, the course belongs
                to another user, or a rating is out of range.
        """
        log_date = parse_calendar_date(date) if date is not None else local_today(self.clock)
        for field, value in (("mood", mood), ("difficulty", difficulty)):
            if not 1 <= value <= 5:
                raise InvalidArgumentError(
                    f"{field} must be between 1 and 5 (got {value})",
                    details={field: value},
                )
        if items_completed < 0:
            raise InvalidArgumentError(
                f"items_completed must not be negative (got {items_completed})",
                details={"items_completed": items_completed},
            )

        async with atomic(self.db):
            await fetch_user(self.db, user_id)
            course = await fetch_course(self.db, course_id)
            if course.user_id != user_id:
                raise InvalidArgumentError(
                    f"Course {course_id} does not belong to user {user_id}",
                    details={"course_id": course_id, "user_id": user_id},
                )

            log = (
                await self.db.execute(
                    select(StudyLog)
                    .where(StudyLog.course_id == course_id, StudyLog.date == log_date)
                    .with_for_update()
                )
            ).scalar_one_or_none()

            now = self.clock()
            if log is None:
                log = StudyLog(
                    user_id=user_id,
                    course_id=course_id,
                    date=log_date,
                )
                self.db.add(log)

            log.items_completed = items_completed
            log.mood = mood
            log.difficulty = difficulty
            log.note = note
            log.completed_at = now

            await self.streaks.sync_user_streak(user_id)

        logger.info(f"Logged study day {log_date} for course {course_id} (user {user_id})")
        return StudyLogResponse.model_validate(log)

    async def get_logs_by_course(self, course_id: int) -> list[StudyLogResponse]:
        """All logs of a course, newest first."""
        await fetch_course(self.db, course_id)
        result = await self.db.execute(
            select(StudyLog)
            .where(StudyLog.course_id == course_id)
            .order_by(StudyLog.date.desc())
        )
        return [StudyLogResponse.model_validate(log) for log in result.scalars().all()]
