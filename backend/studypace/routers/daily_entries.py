"""
Daily Entries API Router

Endpoints for the per-date completion ledger.

Endpoints:
- PUT /api/daily-entries - Create or overwrite one entry
- DELETE /api/daily-entries/{entry_id} - Remove an entry
- PUT /api/courses/{course_id}/days/{date} - Save a whole day
- GET /api/courses/{course_id}/daily-entries - Entries by date or date range
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from studypace.db.base import get_db
from studypace.middleware.error_handling import InvalidArgumentError
from studypace.middleware.rate_limit import limit_write
from studypace.models.base import SuccessResponse
from studypace.models.progress import (
    DailyEntryResponse,
    DailyEntryUpsertRequest,
    SaveDayRequest,
    SaveDayResponse,
)
from studypace.services.progress import DailyEntryService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["daily-entries"])


async def get_daily_entry_service(
    db: AsyncSession = Depends(get_db),
) -> DailyEntryService:
    """Get daily entry service."""
    return DailyEntryService(db)


@router.put("/daily-entries", response_model=DailyEntryResponse)
@limit_write
async def upsert_entry(
    request: Request,
    body: DailyEntryUpsertRequest,
    service: DailyEntryService = Depends(get_daily_entry_service),
) -> DailyEntryResponse:
    """
    Create or overwrite the entry for a category on a date.

    The category's completed counter moves by the difference to the
    previous value.
    """
    return await service.upsert_entry(
        category_id=body.category_id,
        course_id=body.course_id,
        user_id=body.user_id,
        date=body.date,
        completed=body.completed,
    )


@router.delete("/daily-entries/{entry_id}", response_model=SuccessResponse)
@limit_write
async def remove_entry(
    request: Request,
    entry_id: int,
    service: DailyEntryService = Depends(get_daily_entry_service),
) -> SuccessResponse:
    """Remove an entry and give its count back to the category."""
    await service.remove_entry(entry_id)
    return SuccessResponse(message=f"Daily entry {entry_id} deleted")


@router.put("/courses/{course_id}/days/{day}", response_model=SaveDayResponse)
@limit_write
async def save_day(
    request: Request,
    course_id: int,
    day: str,
    body: SaveDayRequest,
    service: DailyEntryService = Depends(get_daily_entry_service),
) -> SaveDayResponse:
    """
    Save the counts of several categories for one date.

    Zero counts without an existing entry are skipped.
    """
    return await service.save_day(
        course_id=course_id,
        user_id=body.user_id,
        date=day,
        entries=body.entries,
    )


@router.get("/courses/{course_id}/daily-entries", response_model=list[DailyEntryResponse])
async def list_entries(
    course_id: int,
    date: Optional[str] = Query(None, description="Single date, YYYY-MM-DD"),
    start: Optional[str] = Query(None, description="Range start, YYYY-MM-DD (inclusive)"),
    end: Optional[str] = Query(None, description="Range end, YYYY-MM-DD (inclusive)"),
    service: DailyEntryService = Depends(get_daily_entry_service),
) -> list[DailyEntryResponse]:
    """
    Entries of a course on one date, or within an inclusive date range.

    Pass either `date`, or both `start` and `end`.
    """
    if date is not None:
        return await service.get_entries_for_date(course_id, date)
    if start is not None and end is not None:
        return await service.get_entries_in_range(course_id, start, end)
    raise InvalidArgumentError(
        "Pass either 'date' or both 'start' and 'end'",
        details={"date": date, "start": start, "end": end},
    )
