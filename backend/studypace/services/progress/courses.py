"""
Course Service

Creates courses and reads a course together with its categories. Courses
start with an empty checklist stamped at creation time.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from studypace.db.base import atomic
from studypace.db.models import Course
from studypace.middleware.error_handling import InvalidArgumentError
from studypace.models.progress import (
    CategoryResponse,
    CourseCreate,
    CourseResponse,
    CourseWithCategoriesResponse,
)
from studypace.services.progress.calendar import Clock, local_today, to_local_date, utc_now
from studypace.services.progress.checklist import todays_checked_items
from studypace.services.progress.lookups import (
    fetch_course,
    fetch_course_categories,
    fetch_milestone,
    fetch_user,
)

logger = logging.getLogger(__name__)


class CourseService:
    """Service for course creation and lookup."""

    def __init__(self, db: AsyncSession, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or utc_now

    async def create_course(self, request: CourseCreate) -> CourseResponse:
        """
        Create a course for a user.

        Raises:
            NotFoundError: If the user doesn't exist.
            InvalidArgumentError: If the milestone is unknown or belongs to
                another user, or end_date precedes start_date.
        """
        if (
            request.start_date is not None
            and request.end_date is not None
            and to_local_date(request.end_date) < to_local_date(request.start_date)
        ):
            raise InvalidArgumentError(
                "Course end_date must not precede start_date",
                details={
                    "start_date": request.start_date.isoformat(),
                    "end_date": request.end_date.isoformat(),
                },
            )

        async with atomic(self.db):
            await fetch_user(self.db, request.user_id)

            if request.milestone_id is not None:
                milestone = await fetch_milestone(self.db, request.milestone_id)
                if milestone is None or milestone.user_id != request.user_id:
                    raise InvalidArgumentError(
                        f"Milestone {request.milestone_id} is not a milestone of "
                        f"user {request.user_id}",
                        details={"milestone_id": request.milestone_id},
                    )

            course = Course(
                user_id=request.user_id,
                milestone_id=request.milestone_id,
                title=request.title,
                description=request.description,
                start_date=request.start_date,
                end_date=request.end_date,
                color=request.color,
                icon=request.icon,
                checked_items=[],
                last_updated=self.clock(),
            )
            self.db.add(course)
            await self.db.flush()

        logger.info(f"Created course {course.id} '{course.title}' for user {course.user_id}")
        return CourseResponse.model_validate(course)

    async def get_course_with_categories(
        self, course_id: int
    ) -> CourseWithCategoriesResponse:
        """
        A course and its categories in display order.

        checked_items is empty when the stored checklist is from an earlier day.

        Raises:
            NotFoundError: If the course doesn't exist.
        """
        course = await fetch_course(self.db, course_id)
        categories = await fetch_course_categories(self.db, course_id)

        response = CourseWithCategoriesResponse.model_validate(course)
        response.checked_items = todays_checked_items(course, local_today(self.clock))
        response.categories = [CategoryResponse.model_validate(c) for c in categories]
        return response
