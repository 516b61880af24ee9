"""
Courses API Router

Endpoints for courses and their daily checklist.

Endpoints:
- POST /api/courses - Create a course
- GET /api/courses/{course_id} - Course with its categories
- GET /api/courses/{course_id}/checklist - Today's checklist with quotas
- POST /api/courses/{course_id}/checklist/toggle - Check or uncheck an item
- POST /api/courses/{course_id}/complete-day - Fold today's progress
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from studypace.db.base import get_db
from studypace.middleware.rate_limit import limit_write
from studypace.models.progress import (
    CompleteDayResponse,
    CourseChecklistResponse,
    CourseCreate,
    CourseResponse,
    CourseWithCategoriesResponse,
    ToggleItemRequest,
    ToggleItemResponse,
)
from studypace.services.progress import ChecklistService, CourseService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/courses", tags=["courses"])


# ===========================================
# Dependency Injection
# ===========================================


async def get_course_service(
    db: AsyncSession = Depends(get_db),
) -> CourseService:
    """Get course service."""
    return CourseService(db)


async def get_checklist_service(
    db: AsyncSession = Depends(get_db),
) -> ChecklistService:
    """Get checklist service."""
    return ChecklistService(db)


# ===========================================
# Course Endpoints
# ===========================================


@router.post("", response_model=CourseResponse, status_code=201)
@limit_write
async def create_course(
    request: Request,
    body: CourseCreate,
    service: CourseService = Depends(get_course_service),
) -> CourseResponse:
    """Create a course for a user."""
    return await service.create_course(body)


@router.get("/{course_id}", response_model=CourseWithCategoriesResponse)
async def get_course(
    course_id: int,
    service: CourseService = Depends(get_course_service),
) -> CourseWithCategoriesResponse:
    """Get a course with its categories in display order."""
    return await service.get_course_with_categories(course_id)


# ===========================================
# Checklist Endpoints
# ===========================================


@router.get("/{course_id}/checklist", response_model=CourseChecklistResponse)
async def get_checklist(
    course_id: int,
    service: ChecklistService = Depends(get_checklist_service),
) -> CourseChecklistResponse:
    """
    Get today's checklist.

    Quotas are recomputed on every call; items checked on an earlier day are
    reported unchecked.
    """
    return await service.get_today_checklist(course_id)


@router.post("/{course_id}/checklist/toggle", response_model=ToggleItemResponse)
@limit_write
async def toggle_item(
    request: Request,
    course_id: int,
    body: ToggleItemRequest,
    service: ChecklistService = Depends(get_checklist_service),
) -> ToggleItemResponse:
    """Check or uncheck one of today's quota slots."""
    checked_items = await service.toggle_item(course_id, body.item_id, body.checked)
    return ToggleItemResponse(course_id=course_id, checked_items=checked_items)


@router.post("/{course_id}/complete-day", response_model=CompleteDayResponse)
@limit_write
async def complete_day(
    request: Request,
    course_id: int,
    service: ChecklistService = Depends(get_checklist_service),
) -> CompleteDayResponse:
    """
    Finish the day.

    Folds today's counters into lifetime progress, records the folded amounts
    as today's daily entries and clears the checklist.
    """
    return await service.complete_day(course_id)
