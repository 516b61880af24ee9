"""
Unit tests for DailyEntryService.

Tests the per-date completion ledger:
- Delta reconciliation into category.completed
- Idempotent upserts and one entry per (category, date)
- Removal symmetry
- save_day batching and zero-value skipping
- Validation and the user's streak cache
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select

from studypace.db.models import Category, Course, DailyEntry, User
from studypace.middleware.error_handling import (
    InvalidArgumentError,
    InvariantViolationError,
    NotFoundError,
)
from studypace.models.progress import SaveDayEntry
from studypace.services.progress.daily_entries import DailyEntryService
from studypace.services.progress.lookups import fetch_day_entry


@pytest.fixture
def service(db_session, clock):
    """Create a DailyEntryService with a fixed clock."""
    return DailyEntryService(db_session, clock=clock)


async def completed_of(db_session, category_id: int) -> int:
    return (await db_session.get(Category, category_id)).completed


async def entry_count(db_session, category_id: int, on: date) -> int:
    return (
        await db_session.execute(
            select(func.count(DailyEntry.id)).where(
                DailyEntry.category_id == category_id, DailyEntry.date == on
            )
        )
    ).scalar()


# ============================================================================
# Upsert
# ============================================================================


class TestUpsertEntry:
    """Tests for upsert_entry."""

    @pytest.mark.asyncio
    async def test_new_entry_adds_to_counter(self, service, db_session, user, course, categories):
        entry = await service.upsert_entry(
            categories[0].id, course.id, user.id, "2024-05-01", 5
        )

        assert entry.completed == 5
        assert entry.date == date(2024, 5, 1)
        assert await completed_of(db_session, categories[0].id) == 15

    @pytest.mark.asyncio
    async def test_overwrite_applies_delta(self, service, db_session, user, course, categories):
        await service.upsert_entry(categories[0].id, course.id, user.id, "2024-05-01", 5)
        await service.upsert_entry(categories[0].id, course.id, user.id, "2024-05-01", 2)

        assert await completed_of(db_session, categories[0].id) == 12
        assert await entry_count(db_session, categories[0].id, date(2024, 5, 1)) == 1

    @pytest.mark.asyncio
    async def test_same_value_twice_is_idempotent(self, service, db_session, user, course, categories):
        first = await service.upsert_entry(categories[1].id, course.id, user.id, "2024-05-01", 7)
        second = await service.upsert_entry(categories[1].id, course.id, user.id, "2024-05-01", 7)

        assert first.id == second.id
        assert await completed_of(db_session, categories[1].id) == 7

    @pytest.mark.asyncio
    async def test_delta_floors_at_zero(self, service, db_session, user, course, categories):
        await service.upsert_entry(categories[1].id, course.id, user.id, "2024-05-01", 4)
        category = await db_session.get(Category, categories[1].id)
        category.completed = 1
        await db_session.commit()

        await service.upsert_entry(categories[1].id, course.id, user.id, "2024-05-01", 0)

        assert await completed_of(db_session, categories[1].id) == 0

    @pytest.mark.asyncio
    async def test_one_entry_per_key_over_many_writes(self, service, db_session, user, course, categories):
        for value in (1, 4, 0, 9, 3):
            await service.upsert_entry(categories[0].id, course.id, user.id, "2024-04-30", value)

        assert await entry_count(db_session, categories[0].id, date(2024, 4, 30)) == 1
        assert await completed_of(db_session, categories[0].id) == 13

    @pytest.mark.asyncio
    async def test_negative_completed(self, service, user, course, categories):
        with pytest.raises(InvalidArgumentError):
            await service.upsert_entry(categories[0].id, course.id, user.id, "2024-05-01", -1)

    @pytest.mark.asyncio
    async def test_malformed_date(self, service, user, course, categories):
        with pytest.raises(InvalidArgumentError):
            await service.upsert_entry(categories[0].id, course.id, user.id, "05/01/2024", 1)

    @pytest.mark.asyncio
    async def test_category_from_other_course(self, service, db_session, ids):
        other = Course(user_id=ids.user, title="Other", checked_items=[])
        db_session.add(other)
        await db_session.commit()
        other_id = other.id

        with pytest.raises(InvalidArgumentError):
            await service.upsert_entry(ids.vocabulary, other_id, ids.user, "2024-05-01", 1)
        assert await completed_of(db_session, ids.vocabulary) == 10

    @pytest.mark.asyncio
    async def test_unknown_ids(self, service, ids):
        with pytest.raises(NotFoundError):
            await service.upsert_entry(ids.vocabulary, ids.course, 999, "2024-05-01", 1)
        with pytest.raises(NotFoundError):
            await service.upsert_entry(999, ids.course, ids.user, "2024-05-01", 1)

    @pytest.mark.asyncio
    async def test_updates_user_streak(self, service, db_session, user, course, categories):
        await service.upsert_entry(categories[0].id, course.id, user.id, "2024-05-01", 2)
        await service.upsert_entry(categories[0].id, course.id, user.id, "2024-04-30", 2)

        refreshed = await db_session.get(User, user.id)
        assert refreshed.current_streak == 2
        assert refreshed.longest_streak == 2
        assert refreshed.last_completed_date == date(2024, 5, 1)


# ============================================================================
# Removal
# ============================================================================


class TestRemoveEntry:
    """Tests for remove_entry."""

    @pytest.mark.asyncio
    async def test_remove_restores_counter(self, service, db_session, user, course, categories):
        entry = await service.upsert_entry(categories[0].id, course.id, user.id, "2024-05-01", 6)

        await service.remove_entry(entry.id)

        assert await completed_of(db_session, categories[0].id) == 10
        assert await entry_count(db_session, categories[0].id, date(2024, 5, 1)) == 0

    @pytest.mark.asyncio
    async def test_remove_floors_at_zero(self, service, db_session, user, course, categories):
        entry = await service.upsert_entry(categories[1].id, course.id, user.id, "2024-05-01", 6)
        category = await db_session.get(Category, categories[1].id)
        category.completed = 2
        await db_session.commit()

        await service.remove_entry(entry.id)

        assert await completed_of(db_session, categories[1].id) == 0

    @pytest.mark.asyncio
    async def test_remove_unknown(self, service, categories):
        with pytest.raises(NotFoundError):
            await service.remove_entry(12345)

    @pytest.mark.asyncio
    async def test_remove_resets_streak(self, service, db_session, user, course, categories):
        entry = await service.upsert_entry(categories[0].id, course.id, user.id, "2024-05-01", 1)

        await service.remove_entry(entry.id)

        refreshed = await db_session.get(User, user.id)
        assert refreshed.current_streak == 0
        assert refreshed.longest_streak == 1  # Never decreases
        assert refreshed.last_completed_date is None


# ============================================================================
# save_day
# ============================================================================


class TestSaveDay:
    """Tests for save_day."""

    @pytest.mark.asyncio
    async def test_zero_without_existing_is_skipped(self, service, db_session, user, course, categories):
        result = await service.save_day(
            course.id,
            user.id,
            "2024-05-01",
            [
                SaveDayEntry(category_id=categories[0].id, completed=3),
                SaveDayEntry(category_id=categories[1].id, completed=0),
            ],
        )

        assert result.saved == 1
        assert result.skipped == 1
        assert await entry_count(db_session, categories[1].id, date(2024, 5, 1)) == 0
        assert await completed_of(db_session, categories[0].id) == 13

    @pytest.mark.asyncio
    async def test_zero_overwrites_existing(self, service, db_session, user, course, categories):
        await service.upsert_entry(categories[1].id, course.id, user.id, "2024-05-01", 4)

        result = await service.save_day(
            course.id,
            user.id,
            "2024-05-01",
            [SaveDayEntry(category_id=categories[1].id, completed=0)],
        )

        assert result.saved == 1
        assert await completed_of(db_session, categories[1].id) == 0
        assert await entry_count(db_session, categories[1].id, date(2024, 5, 1)) == 1

    @pytest.mark.asyncio
    async def test_batch_is_atomic(self, service, db_session, ids):
        with pytest.raises(NotFoundError):
            await service.save_day(
                ids.course,
                ids.user,
                "2024-05-01",
                [
                    SaveDayEntry(category_id=ids.vocabulary, completed=3),
                    SaveDayEntry(category_id=4242, completed=1),
                ],
            )

        assert await completed_of(db_session, ids.vocabulary) == 10
        assert await entry_count(db_session, ids.vocabulary, date(2024, 5, 1)) == 0


# ============================================================================
# Queries
# ============================================================================


class TestQueries:
    """Tests for the entry queries."""

    @pytest.mark.asyncio
    async def test_for_date_and_range(self, service, user, course, categories):
        for day in ("2024-04-28", "2024-04-30", "2024-05-01"):
            await service.upsert_entry(categories[0].id, course.id, user.id, day, 1)

        on_day = await service.get_entries_for_date(course.id, "2024-04-30")
        in_range = await service.get_entries_in_range(course.id, "2024-04-29", "2024-05-01")

        assert [e.date for e in on_day] == [date(2024, 4, 30)]
        assert [e.date for e in in_range] == [date(2024, 5, 1), date(2024, 4, 30)]

    @pytest.mark.asyncio
    async def test_range_start_after_end(self, service, course):
        with pytest.raises(InvalidArgumentError):
            await service.get_entries_in_range(course.id, "2024-05-02", "2024-05-01")

    @pytest.mark.asyncio
    async def test_by_category_and_user(self, service, user, course, categories):
        await service.upsert_entry(categories[0].id, course.id, user.id, "2024-05-01", 1)
        await service.upsert_entry(categories[1].id, course.id, user.id, "2024-05-01", 2)

        by_category = await service.get_entries_by_category(categories[1].id)
        by_user = await service.get_entries_by_user(user.id)

        assert [e.completed for e in by_category] == [2]
        assert len(by_user) == 2


# ============================================================================
# Duplicate Guard
# ============================================================================


class TestFetchDayEntry:
    """Tests for the shared (category, date) entry lookup."""

    @pytest.fixture
    def mock_db(self):
        mock = MagicMock()
        mock.execute = AsyncMock()
        return mock

    def rows(self, mock_db, *entries) -> None:
        result = MagicMock()
        result.scalars.return_value.all.return_value = list(entries)
        mock_db.execute.return_value = result

    @pytest.mark.asyncio
    async def test_single_entry(self, mock_db):
        entry = DailyEntry(category_id=1, date=date(2024, 5, 1), completed=2)
        self.rows(mock_db, entry)

        assert await fetch_day_entry(mock_db, 1, date(2024, 5, 1)) is entry

    @pytest.mark.asyncio
    async def test_missing_entry(self, mock_db):
        self.rows(mock_db)

        assert await fetch_day_entry(mock_db, 1, date(2024, 5, 1)) is None

    @pytest.mark.asyncio
    async def test_duplicate_entries(self, mock_db):
        self.rows(
            mock_db,
            DailyEntry(category_id=1, date=date(2024, 5, 1), completed=2),
            DailyEntry(category_id=1, date=date(2024, 5, 1), completed=3),
        )

        with pytest.raises(InvariantViolationError) as exc_info:
            await fetch_day_entry(mock_db, 1, date(2024, 5, 1))

        assert exc_info.value.details == {"category_id": 1, "date": "2024-05-01"}
