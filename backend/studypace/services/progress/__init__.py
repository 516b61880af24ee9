"""
Progress Tracking Services

Services for daily-quota pacing, progress accounting and streaks.

Modules:
- calendar: Local calendar date and YYYY-MM-DD parsing
- quota: Pure daily quota arithmetic
- ledger: Category counters and category management
- daily_entries: Per-date completion ledger reconciled by delta
- checklist: Today's checklist, lazy rollover and day completion
- streak_tracking: Consecutive-day streaks and the user's cached streak
- study_logs: Per-course daily feedback
- courses: Course creation and lookup

Usage:
    from studypace.services.progress import (
        CategoryLedgerService,
        ChecklistService,
        DailyEntryService,
        StreakTrackingService,
    )
"""

from studypace.services.progress.checklist import (
    ChecklistItem,
    ChecklistService,
    checklist_state,
)
from studypace.services.progress.courses import CourseService
from studypace.services.progress.daily_entries import DailyEntryService
from studypace.services.progress.ledger import CategoryLedgerService, clamp
from studypace.services.progress.quota import (
    daily_quota,
    days_left,
    progress_percent,
    remaining_items,
)
from studypace.services.progress.streak_tracking import (
    StreakTrackingService,
    calculate_current_streak,
    calculate_longest_streak,
)
from studypace.services.progress.study_logs import StudyLogService

__all__ = [
    # Quota
    "daily_quota",
    "days_left",
    "progress_percent",
    "remaining_items",
    # Streaks
    "calculate_current_streak",
    "calculate_longest_streak",
    # Checklist
    "ChecklistItem",
    "checklist_state",
    "clamp",
    # Services
    "CategoryLedgerService",
    "ChecklistService",
    "CourseService",
    "DailyEntryService",
    "StreakTrackingService",
    "StudyLogService",
]
