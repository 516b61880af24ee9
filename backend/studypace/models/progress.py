"""
Progress Tracking API Models (Pydantic)

Request/response schemas for:
- Categories and their progress counters
- Courses and the daily checklist
- Daily entries (the per-date completion ledger)
- Streaks and study logs

ARCHITECTURE NOTE:
    This file contains PYDANTIC models for API validation.
    There is a corresponding SQLAlchemy file: studypace/db/models.py

    Data flows: API Request → Pydantic → Service → SQLAlchemy → Database

API Contract:
    Request models use StrictRequest (extra="forbid") to reject unknown fields.
    Dates travel as "YYYY-MM-DD" strings in requests and are parsed by the
    services, so a malformed date is reported as invalid_argument.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field

from studypace.enums.progress import ChecklistState
from studypace.models.base import StrictRequest, StrictResponse


# ===========================================
# Category Models
# ===========================================


class CategoryCreate(StrictRequest):
    """Request to add a category to a course."""

    name: str = Field(..., min_length=1, max_length=200)
    icon: str = Field("book-open", max_length=50)
    color: str = Field("emerald", max_length=50)
    total: int = Field(..., description="Total items to complete; must not be negative")


class CategoryUpdate(StrictRequest):
    """Partial category update. Omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)
    total: Optional[int] = None


class ProgressUpdateRequest(StrictRequest):
    """
    Adjust a category's progress counters.

    Positive increments record work, negative increments undo it. The
    lifetime counter is clamped to [0, total]; the same-day counter is only
    floored at 0.
    """

    increment: int


class CategoryReorderRequest(StrictRequest):
    """New display order: category ids in their desired sequence."""

    category_ids: list[int]


class CategoryResponse(StrictResponse):
    """Category with its counters."""

    id: int
    course_id: int
    name: str
    icon: str
    color: str
    total: int
    completed: int
    today_completed: int
    order: int


# ===========================================
# Course Models
# ===========================================


class CourseCreate(StrictRequest):
    """Request to create a course."""

    user_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    milestone_id: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    color: str = Field("emerald", max_length=50)
    icon: str = Field("book-open", max_length=50)


class CourseResponse(StrictResponse):
    """Course as stored."""

    id: int
    user_id: int
    milestone_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    last_updated: datetime
    checked_items: list[str] = Field(default_factory=list)
    color: str
    icon: str


class CourseWithCategoriesResponse(CourseResponse):
    """Course with its categories in display order."""

    categories: list[CategoryResponse] = Field(default_factory=list)


# ===========================================
# Checklist Models
# ===========================================


class ToggleItemRequest(StrictRequest):
    """
    Check or uncheck one of today's quota slots.

    item_id has the form "<category_id>_<index>".
    """

    item_id: str = Field(..., min_length=3)
    checked: bool


class ChecklistItemResponse(StrictResponse):
    """One quota slot of today's checklist."""

    item_id: str
    category_id: int
    index: int
    checked: bool


class ToggleItemResponse(StrictResponse):
    """The course's checked item ids after a toggle."""

    course_id: int
    checked_items: list[str] = Field(default_factory=list)


class CategoryQuota(StrictResponse):
    """
    A category's pacing for today.

    daily_quota is recomputed on every read from remaining work and the
    days left until the course deadline.
    """

    category_id: int
    name: str
    icon: str
    color: str
    total: int
    completed: int
    today_completed: int
    remaining: int
    daily_quota: int
    progress_percent: int
    items: list[ChecklistItemResponse] = Field(default_factory=list)


class CourseChecklistResponse(StrictResponse):
    """Today's checklist for a course."""

    course_id: int
    date: date
    state: ChecklistState
    deadline: Optional[date] = None
    days_left: int
    categories: list[CategoryQuota] = Field(default_factory=list)
    checked_count: int
    total_items: int
    all_complete: bool


class CompleteDayResponse(StrictResponse):
    """Result of finishing the day for a course."""

    course_id: int
    date: date
    items_folded: int  # Sum of completions moved from today into lifetime progress
    categories: list[CategoryResponse] = Field(default_factory=list)


# ===========================================
# Daily Entry Models
# ===========================================


class DailyEntryUpsertRequest(StrictRequest):
    """Create or overwrite the entry for one category on one date."""

    category_id: int
    course_id: int
    user_id: int
    date: str = Field(..., description="Calendar date, YYYY-MM-DD")
    completed: int


class DailyEntryResponse(StrictResponse):
    """A committed ledger entry."""

    id: int
    category_id: int
    course_id: int
    user_id: int
    date: date
    completed: int
    created_at: datetime
    updated_at: datetime


class SaveDayEntry(StrictRequest):
    """One category's count within a save-day batch."""

    category_id: int
    completed: int


class SaveDayRequest(StrictRequest):
    """Batch of per-category counts for one course and date."""

    user_id: int
    entries: list[SaveDayEntry]


class SaveDayResponse(StrictResponse):
    """Outcome of a save-day batch."""

    course_id: int
    date: date
    saved: int  # Entries inserted or overwritten
    skipped: int  # Zero-valued entries with no existing record


# ===========================================
# Streak & Study Log Models
# ===========================================


class StreakData(StrictResponse):
    """
    Study streak information.

    A streak counts consecutive calendar days with activity. A day that has
    not been logged yet today does not break the streak; the first fully
    skipped day does.
    """

    current_streak: int
    longest_streak: int
    total_days: int  # Distinct activity dates within the lookback window
    recent_dates: list[date] = Field(default_factory=list)  # Newest first
    last_activity: Optional[date] = None
    is_active_today: bool = False
    milestones_reached: list[int] = Field(default_factory=list)
    next_milestone: Optional[int] = None


class StudyLogRequest(StrictRequest):
    """Daily feedback for a course. Defaults to today's date."""

    course_id: int
    date: Optional[str] = Field(None, description="Calendar date, YYYY-MM-DD")
    items_completed: int = Field(0, ge=0)
    mood: int = Field(..., ge=1, le=5)
    difficulty: int = Field(..., ge=1, le=5)
    note: Optional[str] = Field(None, max_length=2000)


class StudyLogResponse(StrictResponse):
    """A stored study log."""

    id: int
    user_id: int
    course_id: int
    date: date
    items_completed: int
    mood: int
    difficulty: int
    note: Optional[str] = None
    completed_at: datetime
