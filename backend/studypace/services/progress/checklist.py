"""
Daily Checklist Service

Each course keeps the set of today's checked quota slots. A slot is one of
the daily_quota items of a category, identified as "<category_id>_<index>".

Day rollover is lazy: a course whose last_updated falls on an earlier local
calendar date is STALE, its checked items are ignored on read and discarded
by the next mutation. Nothing runs at midnight.

Responsibilities:
- Build today's checklist from recomputed quotas
- Toggle checklist items
- Complete the day: fold today's counters into lifetime progress and record
  the folded amounts in today's daily entries

Usage:
    from studypace.services.progress import ChecklistService

    service = ChecklistService(db)
    await service.toggle_item(course_id=1, item_id="3_0", checked=True)
    result = await service.complete_day(course_id=1)
"""

import logging
from datetime import date, datetime
from typing import NamedTuple, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from studypace.db.base import atomic
from studypace.db.models import Category, Course, DailyEntry
from studypace.enums.progress import ChecklistState
from studypace.middleware.error_handling import InvalidArgumentError, NotFoundError
from studypace.models.progress import (
    CategoryQuota,
    CategoryResponse,
    ChecklistItemResponse,
    CompleteDayResponse,
    CourseChecklistResponse,
)
from studypace.services.progress.calendar import (
    Clock,
    DateLike,
    local_today,
    to_local_date,
    utc_now,
)
from studypace.services.progress.lookups import (
    fetch_category,
    fetch_course,
    fetch_course_categories,
    fetch_day_entry,
    fetch_milestone,
)
from studypace.services.progress.quota import (
    daily_quota,
    days_left,
    progress_percent,
    remaining_items,
)
from studypace.services.progress.streak_tracking import StreakTrackingService

logger = logging.getLogger(__name__)


class ChecklistItem(NamedTuple):
    """
    One quota slot of a category for today.

    Serialized as "<category_id>_<index>" only at the API boundary.
    """

    category_id: int
    index: int

    @classmethod
    def parse(cls, item_id: str) -> "ChecklistItem":
        """
        Parse "<category_id>_<index>".

        Raises:
            InvalidArgumentError: If the id isn't two non-negative integers
                joined by an underscore.
        """
        category_part, sep, index_part = (item_id or "").rpartition("_")
        if not sep or not category_part.isdigit() or not index_part.isdigit():
            raise InvalidArgumentError(
                f"Invalid checklist item id '{item_id}': expected '<category_id>_<index>'",
                details={"item_id": item_id},
            )
        return cls(int(category_part), int(index_part))

    def __str__(self) -> str:
        return f"{self.category_id}_{self.index}"


def checklist_state(last_updated: Optional[datetime], today: date) -> ChecklistState:
    """Day state of a course: ACTIVE_TODAY only if last touched today."""
    if last_updated is not None and to_local_date(last_updated) == today:
        return ChecklistState.ACTIVE_TODAY
    return ChecklistState.STALE


def roll_over(course: Course, today: date) -> bool:
    """
    Discard a stale course's checked items before a mutation stamps it.

    Returns True if the course was stale.
    """
    if checklist_state(course.last_updated, today) == ChecklistState.ACTIVE_TODAY:
        return False
    if course.checked_items:
        logger.debug(f"Course {course.id} rolled over to {today}; clearing checklist")
    course.checked_items = []
    return True


def todays_checked_items(course: Course, today: date) -> list[str]:
    """Stored checked items, or none when they belong to an earlier day."""
    if checklist_state(course.last_updated, today) == ChecklistState.STALE:
        return []
    return list(course.checked_items or [])


def _parse_stored_items(raw_items: Optional[list]) -> set[ChecklistItem]:
    """Stored item ids as structured items; unparseable legacy ids are dropped."""
    items = set()
    for raw in raw_items or []:
        try:
            items.add(ChecklistItem.parse(raw))
        except InvalidArgumentError:
            logger.debug(f"Ignoring malformed stored checklist item '{raw}'")
    return items


def _serialize_items(items: set[ChecklistItem]) -> list[str]:
    return [str(item) for item in sorted(items)]


class ChecklistService:
    """
    Service for the per-course daily checklist and day completion.
    """

    def __init__(self, db: AsyncSession, clock: Optional[Clock] = None):
        """
        Initialize the checklist service.

        Args:
            db: SQLAlchemy async database session.
            clock: Source of the current time (defaults to UTC wall clock).
        """
        self.db = db
        self.clock = clock or utc_now
        self.streaks = StreakTrackingService(db, clock=self.clock)

    async def get_today_checklist(self, course_id: int) -> CourseChecklistResponse:
        """
        Build today's checklist for a course.

        Quotas are recomputed from each category's remaining work and the
        course deadline. Checked items from an earlier day, and items beyond a
        category's current quota, are not shown as checked.

        Raises:
            NotFoundError: If the course doesn't exist.
        """
        course = await fetch_course(self.db, course_id)
        categories = await fetch_course_categories(self.db, course_id)
        today = local_today(self.clock)
        deadline = await self._course_deadline(course)

        state = checklist_state(course.last_updated, today)
        checked = (
            _parse_stored_items(course.checked_items)
            if state == ChecklistState.ACTIVE_TODAY
            else set()
        )

        category_quotas = []
        for category in categories:
            quota = daily_quota(category.total, category.completed, deadline, today)
            items = [
                ChecklistItemResponse(
                    item_id=str(ChecklistItem(category.id, index)),
                    category_id=category.id,
                    index=index,
                    checked=ChecklistItem(category.id, index) in checked,
                )
                for index in range(quota)
            ]
            category_quotas.append(
                CategoryQuota(
                    category_id=category.id,
                    name=category.name,
                    icon=category.icon,
                    color=category.color,
                    total=category.total,
                    completed=category.completed,
                    today_completed=category.today_completed,
                    remaining=remaining_items(category.total, category.completed),
                    daily_quota=quota,
                    progress_percent=progress_percent(category.completed, category.total),
                    items=items,
                )
            )

        total_items = sum(c.daily_quota for c in category_quotas)
        checked_count = sum(
            1 for c in category_quotas for item in c.items if item.checked
        )

        return CourseChecklistResponse(
            course_id=course.id,
            date=today,
            state=state,
            deadline=to_local_date(deadline) if deadline is not None else None,
            days_left=days_left(deadline, today),
            categories=category_quotas,
            checked_count=checked_count,
            total_items=total_items,
            all_complete=total_items > 0 and checked_count == total_items,
        )

    async def toggle_item(self, course_id: int, item_id: str, checked: bool) -> list[str]:
        """
        Check or uncheck one of today's checklist items.

        A stale course starts the day from an empty set. Checking is
        idempotent; unchecking a missing item is a no-op. Always stamps the
        course's last_updated.

        Args:
            course_id: Course owning the checklist.
            item_id: "<category_id>_<index>".
            checked: True to check, False to uncheck.

        Returns:
            The course's checked item ids after the change.

        Raises:
            NotFoundError: If the course doesn't exist, or the category isn't
                part of the course.
            InvalidArgumentError: If item_id is malformed, or a checked index
                lies outside today's quota.
        """
        item = ChecklistItem.parse(item_id)

        async with atomic(self.db):
            course = await fetch_course(self.db, course_id, for_update=True)
            category = await self._course_category(course, item.category_id)
            today = local_today(self.clock)

            roll_over(course, today)
            items = _parse_stored_items(course.checked_items)

            if checked:
                deadline = await self._course_deadline(course)
                quota = daily_quota(category.total, category.completed, deadline, today)
                if item.index >= quota:
                    raise InvalidArgumentError(
                        f"Item index {item.index} is outside today's quota of {quota} "
                        f"for category {category.id}",
                        details={"item_id": item_id, "daily_quota": quota},
                    )
                items.add(item)
            else:
                items.discard(item)

            course.checked_items = _serialize_items(items)
            course.last_updated = self.clock()

        return list(course.checked_items)

    async def complete_day(self, course_id: int) -> CompleteDayResponse:
        """
        Finish the day for a course.

        For every category: completed = min(total, completed + today_completed)
        and today_completed = 0. The amount actually added to completed is
        recorded in the category's daily entry for today (without touching the
        counter again). The checklist is cleared and the owner's streak cache
        refreshed. Calling it again the same day changes nothing but the
        timestamp.

        Raises:
            NotFoundError: If the course doesn't exist.
        """
        async with atomic(self.db):
            course = await fetch_course(self.db, course_id, for_update=True)
            categories = await fetch_course_categories(self.db, course_id, for_update=True)
            today = local_today(self.clock)
            now = self.clock()

            items_folded = 0
            for category in categories:
                previous = category.completed
                category.completed = min(
                    category.total, category.completed + category.today_completed
                )
                category.today_completed = 0

                folded = category.completed - previous
                if folded > 0:
                    items_folded += folded
                    await self._record_folded(course, category, today, folded, now)

            course.checked_items = []
            course.last_updated = now

            if items_folded > 0:
                await self.streaks.sync_user_streak(course.user_id)

        logger.info(
            f"Completed day {today} for course {course_id}: "
            f"{items_folded} items folded across {len(categories)} categories"
        )
        return CompleteDayResponse(
            course_id=course_id,
            date=today,
            items_folded=items_folded,
            categories=[CategoryResponse.model_validate(c) for c in categories],
        )

    async def _record_folded(
        self,
        course: Course,
        category: Category,
        today: date,
        folded: int,
        now: datetime,
    ) -> None:
        """Add folded completions to today's entry; the counter is already updated."""
        entry = await fetch_day_entry(self.db, category.id, today)

        if entry is None:
            self.db.add(
                DailyEntry(
                    category_id=category.id,
                    course_id=course.id,
                    user_id=course.user_id,
                    date=today,
                    completed=folded,
                    created_at=now,
                    updated_at=now,
                )
            )
        else:
            entry.completed += folded
            entry.updated_at = now

    async def _course_category(self, course: Course, category_id: int) -> Category:
        """Fetch a category and make sure it belongs to the course."""
        category = await fetch_category(self.db, category_id)
        if category.course_id != course.id:
            raise NotFoundError(
                f"Category {category_id} not found in course {course.id}",
                details={"category_id": category_id, "course_id": course.id},
            )
        return category

    async def _course_deadline(self, course: Course) -> Optional[DateLike]:
        """Course end date, falling back to the milestone deadline."""
        if course.end_date is not None:
            return course.end_date
        milestone = await fetch_milestone(self.db, course.milestone_id)
        return milestone.deadline if milestone is not None else None
