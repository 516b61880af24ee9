"""
Streaks API Router

Endpoints for study streaks and daily study logs.

Endpoints:
- GET /api/users/{user_id}/streak - Streak information
- POST /api/users/{user_id}/study-logs - Log a study day for a course
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from studypace.db.base import get_db
from studypace.middleware.rate_limit import limit_write
from studypace.models.progress import StreakData, StudyLogRequest, StudyLogResponse
from studypace.services.progress import StreakTrackingService, StudyLogService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/users", tags=["streaks"])


async def get_streak_service(
    db: AsyncSession = Depends(get_db),
) -> StreakTrackingService:
    """Get streak tracking service."""
    return StreakTrackingService(db)


async def get_study_log_service(
    db: AsyncSession = Depends(get_db),
) -> StudyLogService:
    """Get study log service."""
    return StudyLogService(db)


@router.get("/{user_id}/streak", response_model=StreakData)
async def get_streak(
    user_id: int,
    service: StreakTrackingService = Depends(get_streak_service),
) -> StreakData:
    """
    Get study streak information.

    A day not yet logged today does not break the current streak.
    """
    return await service.get_streak_data(user_id)


@router.post("/{user_id}/study-logs", response_model=StudyLogResponse)
@limit_write
async def log_study_day(
    request: Request,
    user_id: int,
    body: StudyLogRequest,
    service: StudyLogService = Depends(get_study_log_service),
) -> StudyLogResponse:
    """Record (or overwrite) a course's study log for a date; defaults to today."""
    return await service.log_study_day(
        user_id=user_id,
        course_id=body.course_id,
        mood=body.mood,
        difficulty=body.difficulty,
        items_completed=body.items_completed,
        note=body.note,
        date=body.date,
    )
