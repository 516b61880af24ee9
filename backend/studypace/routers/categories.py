"""
Categories API Router

Endpoints for category management and progress counters.

Endpoints:
- GET /api/courses/{course_id}/categories - Categories of a course in display order
- POST /api/courses/{course_id}/categories - Add a category
- PUT /api/courses/{course_id}/categories/order - Reorder categories
- POST /api/courses/{course_id}/reset-daily - Zero today's counters
- PATCH /api/categories/{category_id} - Partially update a category
- POST /api/categories/{category_id}/progress - Increment or undo progress
- DELETE /api/categories/{category_id} - Remove a category and its entries
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from studypace.db.base import get_db
from studypace.middleware.rate_limit import limit_write
from studypace.models.base import SuccessResponse
from studypace.models.progress import (
    CategoryCreate,
    CategoryReorderRequest,
    CategoryResponse,
    CategoryUpdate,
    ProgressUpdateRequest,
)
from studypace.services.progress import CategoryLedgerService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["categories"])


# ===========================================
# Dependency Injection
# ===========================================


async def get_ledger_service(
    db: AsyncSession = Depends(get_db),
) -> CategoryLedgerService:
    """Get category ledger service."""
    return CategoryLedgerService(db)


# ===========================================
# Course-scoped Endpoints
# ===========================================


@router.get("/courses/{course_id}/categories", response_model=list[CategoryResponse])
async def get_categories(
    course_id: int,
    service: CategoryLedgerService = Depends(get_ledger_service),
) -> list[CategoryResponse]:
    """Get a course's categories sorted by display order."""
    return await service.get_categories_by_course(course_id)


@router.post(
    "/courses/{course_id}/categories",
    response_model=CategoryResponse,
    status_code=201,
)
@limit_write
async def create_category(
    request: Request,
    course_id: int,
    body: CategoryCreate,
    service: CategoryLedgerService = Depends(get_ledger_service),
) -> CategoryResponse:
    """
    Add a category at the end of the course's display order.

    Both counters start at 0.
    """
    return await service.create_category(
        course_id=course_id,
        name=body.name,
        icon=body.icon,
        color=body.color,
        total=body.total,
    )


@router.put(
    "/courses/{course_id}/categories/order",
    response_model=list[CategoryResponse],
)
@limit_write
async def reorder_categories(
    request: Request,
    course_id: int,
    body: CategoryReorderRequest,
    service: CategoryLedgerService = Depends(get_ledger_service),
) -> list[CategoryResponse]:
    """Set display order to the position of each id in the request."""
    return await service.reorder_categories(course_id, body.category_ids)


@router.post("/courses/{course_id}/reset-daily", response_model=SuccessResponse)
@limit_write
async def reset_daily(
    request: Request,
    course_id: int,
    service: CategoryLedgerService = Depends(get_ledger_service),
) -> SuccessResponse:
    """Zero today_completed for every category of the course."""
    count = await service.reset_daily(course_id)
    return SuccessResponse(message=f"Reset {count} categories")


# ===========================================
# Category Endpoints
# ===========================================


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
@limit_write
async def update_category(
    request: Request,
    category_id: int,
    body: CategoryUpdate,
    service: CategoryLedgerService = Depends(get_ledger_service),
) -> CategoryResponse:
    """
    Partially update a category.

    Lowering total below completed clamps completed.
    """
    return await service.update_category(
        category_id,
        name=body.name,
        icon=body.icon,
        color=body.color,
        total=body.total,
    )


@router.post("/categories/{category_id}/progress", response_model=CategoryResponse)
@limit_write
async def update_progress(
    request: Request,
    category_id: int,
    body: ProgressUpdateRequest,
    service: CategoryLedgerService = Depends(get_ledger_service),
) -> CategoryResponse:
    """
    Record (positive) or undo (negative) progress on a category.

    Counters clamp instead of failing on out-of-range results.
    """
    return await service.update_progress(category_id, body.increment)


@router.delete("/categories/{category_id}", response_model=SuccessResponse)
@limit_write
async def remove_category(
    request: Request,
    category_id: int,
    service: CategoryLedgerService = Depends(get_ledger_service),
) -> SuccessResponse:
    """Remove a category together with its daily entries."""
    removed = await service.remove_category(category_id)
    return SuccessResponse(
        message=f"Category {category_id} deleted with {removed} daily entries"
    )
