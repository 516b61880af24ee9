"""
Category Ledger Service

Owns the per-category progress counters:
- total: items to complete overall
- completed: lifetime progress, soft-bounded to [0, total]
- today_completed: same-day scratch counter, floored at 0 only

Responsibilities:
- List, create, update, reorder and remove categories
- Apply progress increments (and "undo one" decrements) without ever failing
  on out-of-range values: counters clamp instead
- Bulk daily reset of the scratch counters

Usage:
    from studypace.services.progress import CategoryLedgerService

    service = CategoryLedgerService(db)
    category = await service.update_progress(category_id=3, increment=1)
"""

import logging
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from studypace.db.base import atomic
from studypace.db.models import Category, DailyEntry
from studypace.middleware.error_handling import InvalidArgumentError
from studypace.models.progress import CategoryResponse
from studypace.services.progress.calendar import Clock, local_today, utc_now
from studypace.services.progress.checklist import roll_over
from studypace.services.progress.lookups import (
    fetch_category,
    fetch_course,
    fetch_course_categories,
)

logger = logging.getLogger(__name__)


def clamp(value: int, low: int, high: int) -> int:
    """Limit value to [low, high]. A negative high collapses to low."""
    return max(low, min(high, value))


def _validate_total(total: int) -> None:
    if total < 0:
        raise InvalidArgumentError(
            f"Category total must not be negative (got {total})",
            details={"total": total},
        )


class CategoryLedgerService:
    """
    Service for category counters and category management.

    Every mutation is a single transaction that commits on success and
    rolls back on error.
    """

    def __init__(self, db: AsyncSession, clock: Optional[Clock] = None):
        """
        Initialize the ledger service.

        Args:
            db: SQLAlchemy async database session.
            clock: Source of the current time (defaults to UTC wall clock).
        """
        self.db = db
        self.clock = clock or utc_now

    async def get_categories_by_course(self, course_id: int) -> list[CategoryResponse]:
        """
        Get a course's categories sorted by display order.

        Raises:
            NotFoundError: If the course doesn't exist.
        """
        await fetch_course(self.db, course_id)
        categories = await fetch_course_categories(self.db, course_id)
        return [CategoryResponse.model_validate(c) for c in categories]

    async def create_category(
        self,
        course_id: int,
        name: str,
        icon: str,
        color: str,
        total: int,
    ) -> CategoryResponse:
        """
        Add a category at the end of the course's display order.

        The new category gets order = max(existing order) + 1, or 0 for the
        first category, and starts with both counters at 0.

        Raises:
            NotFoundError: If the course doesn't exist.
            InvalidArgumentError: If total is negative.
        """
        _validate_total(total)

        async with atomic(self.db):
            await fetch_course(self.db, course_id, for_update=True)

            max_order = (
                await self.db.execute(
                    select(func.max(Category.order)).where(
                        Category.course_id == course_id
                    )
                )
            ).scalar()

            category = Category(
                course_id=course_id,
                name=name,
                icon=icon,
                color=color,
                total=total,
                completed=0,
                today_completed=0,
                order=0 if max_order is None else max_order + 1,
            )
            self.db.add(category)
            await self.db.flush()

        logger.info(
            f"Created category {category.id} '{name}' in course {course_id} "
            f"(total={total}, order={category.order})"
        )
        return CategoryResponse.model_validate(category)

    async def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        icon: Optional[str] = None,
        color: Optional[str] = None,
        total: Optional[int] = None,
    ) -> CategoryResponse:
        """
        Partially update a category.

        Lowering total below completed clamps completed down to the new total.

        Raises:
            NotFoundError: If the category doesn't exist.
            InvalidArgumentError: If total is negative.
        """
        if total is not None:
            _validate_total(total)

        async with atomic(self.db):
            category = await fetch_category(self.db, category_id, for_update=True)

            if name is not None:
                category.name = name
            if icon is not None:
                category.icon = icon
            if color is not None:
                category.color = color
            if total is not None:
                category.total = total
                category.completed = clamp(category.completed, 0, total)

        return CategoryResponse.model_validate(category)

    async def update_progress(self, category_id: int, increment: int) -> CategoryResponse:
        """
        Apply a progress increment to a category.

        completed moves by increment and is clamped to [0, total];
        today_completed moves by increment and is only floored at 0, so it
        can run ahead of total until the day is completed. Touches the
        parent course's last_updated, first discarding a checklist left
        over from an earlier day.

        Args:
            category_id: Category to adjust.
            increment: Items completed (positive) or undone (negative).

        Returns:
            The category after the update.

        Raises:
            NotFoundError: If the category doesn't exist.
        """
        async with atomic(self.db):
            category = await fetch_category(self.db, category_id, for_update=True)
            course = await fetch_course(self.db, category.course_id, for_update=True)

            category.completed = clamp(category.completed + increment, 0, category.total)
            category.today_completed = max(0, category.today_completed + increment)
            roll_over(course, local_today(self.clock))
            course.last_updated = self.clock()

        logger.debug(
            f"Category {category_id} progress {increment:+d} → "
            f"completed={category.completed}, today={category.today_completed}"
        )
        return CategoryResponse.model_validate(category)

    async def reset_daily(self, course_id: int) -> int:
        """
        Zero today_completed for every category of a course.

        Returns:
            Number of categories reset.

        Raises:
            NotFoundError: If the course doesn't exist.
        """
        async with atomic(self.db):
            await fetch_course(self.db, course_id)
            categories = await fetch_course_categories(
                self.db, course_id, for_update=True
            )
            for category in categories:
                category.today_completed = 0

        logger.info(f"Reset daily counters for {len(categories)} categories of course {course_id}")
        return len(categories)

    async def reorder_categories(
        self, course_id: int, category_ids: list[int]
    ) -> list[CategoryResponse]:
        """
        Set display order to the position of each id in category_ids.

        Raises:
            NotFoundError: If the course doesn't exist.
            InvalidArgumentError: If an id doesn't belong to the course or
                appears twice.
        """
        if len(set(category_ids)) != len(category_ids):
            raise InvalidArgumentError("Category ids must be unique")

        async with atomic(self.db):
            await fetch_course(self.db, course_id)
            categories = {
                c.id: c
                for c in await fetch_course_categories(self.db, course_id, for_update=True)
            }

            unknown = [cid for cid in category_ids if cid not in categories]
            if unknown:
                raise InvalidArgumentError(
                    f"Categories {unknown} do not belong to course {course_id}",
                    details={"category_ids": unknown},
                )

            for position, category_id in enumerate(category_ids):
                categories[category_id].order = position

        ordered = sorted(categories.values(), key=lambda c: (c.order, c.id))
        return [CategoryResponse.model_validate(c) for c in ordered]

    async def remove_category(self, category_id: int) -> int:
        """
        Delete a category together with its daily entries.

        Returns:
            Number of daily entries deleted with the category.

        Raises:
            NotFoundError: If the category doesn't exist.
        """
        async with atomic(self.db):
            category = await fetch_category(self.db, category_id, for_update=True)

            result = await self.db.execute(
                delete(DailyEntry).where(DailyEntry.category_id == category_id)
            )
            await self.db.delete(category)

        removed_entries = result.rowcount or 0
        logger.info(f"Removed category {category_id} and {removed_entries} daily entries")
        return removed_entries
