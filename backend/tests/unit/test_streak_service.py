"""
Unit tests for StreakTrackingService and StudyLogService.

Tests streak data read from the database:
- Activity from daily entries (completed > 0) and study logs
- Milestones and recent dates
- The cached streak on the user row
"""

from datetime import date, timedelta

import pytest

from studypace.config import settings
from studypace.db.models import DailyEntry, StudyLog, User
from studypace.middleware.error_handling import InvalidArgumentError, NotFoundError
from studypace.services.progress.streak_tracking import StreakTrackingService
from studypace.services.progress.study_logs import StudyLogService


@pytest.fixture
def service(db_session, clock):
    """Create a StreakTrackingService with a fixed clock."""
    return StreakTrackingService(db_session, clock=clock)


@pytest.fixture
def log_service(db_session, clock):
    """Create a StudyLogService with a fixed clock."""
    return StudyLogService(db_session, clock=clock)


@pytest.fixture
def add_entries(db_session, clock, user, course, categories):
    """Insert daily entries for the given day offsets before today."""

    async def _add(*offsets: int, completed: int = 1) -> None:
        for offset in offsets:
            db_session.add(
                DailyEntry(
                    category_id=categories[0].id,
                    course_id=course.id,
                    user_id=user.id,
                    date=clock.today - timedelta(days=offset),
                    completed=completed,
                )
            )
        await db_session.commit()

    return _add


# ============================================================================
# Streak Data
# ============================================================================


class TestGetStreakData:
    """Tests for get_streak_data."""

    @pytest.mark.asyncio
    async def test_no_activity(self, service, user):
        streak = await service.get_streak_data(user.id)

        assert streak.current_streak == 0
        assert streak.longest_streak == 0
        assert streak.total_days == 0
        assert streak.last_activity is None
        assert streak.is_active_today is False
        assert streak.next_milestone == 3

    @pytest.mark.asyncio
    async def test_forgives_open_today(self, service, add_entries, user):
        await add_entries(1, 2)

        streak = await service.get_streak_data(user.id)

        assert streak.current_streak == 2
        assert streak.is_active_today is False

    @pytest.mark.asyncio
    async def test_gap_breaks(self, service, add_entries, user):
        await add_entries(0, 2)

        streak = await service.get_streak_data(user.id)

        assert streak.current_streak == 1
        assert streak.is_active_today is True

    @pytest.mark.asyncio
    async def test_zero_entries_are_not_activity(self, service, add_entries, user):
        await add_entries(0, 1, completed=0)

        streak = await service.get_streak_data(user.id)

        assert streak.current_streak == 0
        assert streak.total_days == 0

    @pytest.mark.asyncio
    async def test_study_logs_count_as_activity(self, service, db_session, clock, user, course, add_entries):
        await add_entries(0)
        db_session.add(
            StudyLog(
                user_id=user.id,
                course_id=course.id,
                date=clock.today - timedelta(days=1),
                mood=4,
                difficulty=2,
            )
        )
        await db_session.commit()

        streak = await service.get_streak_data(user.id)

        assert streak.current_streak == 2

    @pytest.mark.asyncio
    async def test_milestones_and_recent_dates(self, service, add_entries, clock, user):
        await add_entries(*range(0, 8), 12, 13)

        streak = await service.get_streak_data(user.id)

        assert streak.current_streak == 8
        assert streak.longest_streak == 8
        assert streak.total_days == 10
        assert streak.milestones_reached == [3, 7]
        assert streak.next_milestone == 14
        assert len(streak.recent_dates) == settings.STREAK_RECENT_DATES
        assert streak.recent_dates[0] == clock.today
        assert streak.last_activity == clock.today

    @pytest.mark.asyncio
    async def test_longest_uses_cached_best(self, service, db_session, add_entries, user):
        user.longest_streak = 21
        await db_session.commit()
        await add_entries(0)

        streak = await service.get_streak_data(user.id)

        assert streak.longest_streak == 21
        assert 30 not in streak.milestones_reached
        assert streak.milestones_reached == [3, 7, 14]

    @pytest.mark.asyncio
    async def test_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            await service.get_streak_data(77)


class TestRefreshUserStreak:
    """Tests for refresh_user_streak."""

    @pytest.mark.asyncio
    async def test_writes_cache(self, service, db_session, add_entries, clock, user):
        await add_entries(1, 2, 3)

        streak = await service.refresh_user_streak(user.id)

        refreshed = await db_session.get(User, user.id)
        assert streak.current_streak == 3
        assert refreshed.current_streak == 3
        assert refreshed.longest_streak == 3
        assert refreshed.last_completed_date == clock.today - timedelta(days=1)

    @pytest.mark.asyncio
    async def test_longest_never_decreases(self, service, db_session, add_entries, user):
        user.longest_streak = 9
        await db_session.commit()
        await add_entries(0)

        await service.refresh_user_streak(user.id)

        refreshed = await db_session.get(User, user.id)
        assert refreshed.current_streak == 1
        assert refreshed.longest_streak == 9


# ============================================================================
# Study Logs
# ============================================================================


class TestStudyLogs:
    """Tests for StudyLogService."""

    @pytest.mark.asyncio
    async def test_defaults_to_today(self, log_service, clock, user, course):
        log = await log_service.log_study_day(user.id, course.id, mood=4, difficulty=3)

        assert log.date == clock.today
        assert log.items_completed == 0

    @pytest.mark.asyncio
    async def test_same_day_overwrites(self, log_service, user, course):
        first = await log_service.log_study_day(
            user.id, course.id, mood=2, difficulty=5, note="hard", date="2024-05-01"
        )
        second = await log_service.log_study_day(
            user.id, course.id, mood=5, difficulty=1, items_completed=9, date="2024-05-01"
        )

        logs = await log_service.get_logs_by_course(course.id)
        assert second.id == first.id
        assert len(logs) == 1
        assert logs[0].mood == 5
        assert logs[0].note is None

    @pytest.mark.asyncio
    async def test_updates_user_streak(self, log_service, db_session, user, course):
        await log_service.log_study_day(user.id, course.id, mood=3, difficulty=3, date="2024-05-01")

        refreshed = await db_session.get(User, user.id)
        assert refreshed.current_streak == 1
        assert refreshed.last_completed_date == date(2024, 5, 1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"mood": 0, "difficulty": 3},
            {"mood": 3, "difficulty": 6},
            {"mood": 3, "difficulty": 3, "items_completed": -1},
            {"mood": 3, "difficulty": 3, "date": "2024-5-1"},
        ],
        ids=["mood-low", "difficulty-high", "negative-items", "bad-date"],
    )
    async def test_invalid_arguments(self, log_service, ids, kwargs):
        with pytest.raises(InvalidArgumentError):
            await log_service.log_study_day(ids.user, ids.course, **kwargs)

    @pytest.mark.asyncio
    async def test_course_of_other_user(self, log_service, db_session, ids):
        stranger = User(name="Grace")
        db_session.add(stranger)
        await db_session.commit()
        stranger_id = stranger.id

        with pytest.raises(InvalidArgumentError):
            await log_service.log_study_day(stranger_id, ids.course, mood=3, difficulty=3)

    @pytest.mark.asyncio
    async def test_unknown_course(self, log_service, user):
        with pytest.raises(NotFoundError):
            await log_service.log_study_day(user.id, 404, mood=3, difficulty=3)

