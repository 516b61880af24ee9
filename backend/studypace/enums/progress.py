"""
Progress Tracking Enums

Defines enums for the daily checklist state machine and the sources of
activity that feed streak calculations.
"""

from enum import Enum


class ChecklistState(str, Enum):
    """
    Day state of a course checklist.

    State transitions:
    - ACTIVE_TODAY → STALE (calendar date moves past course.last_updated)
    - STALE → ACTIVE_TODAY (next checklist mutation starts a fresh day)

    The state is never stored; it is derived from course.last_updated each
    time it is needed.
    """

    ACTIVE_TODAY = "active_today"  # checked_items belong to today
    STALE = "stale"  # checked_items are from an earlier day and are ignored


class ActivitySource(str, Enum):
    """
    Records that count as a day of study activity for streaks.
    """

    DAILY_ENTRY = "daily_entry"  # Committed per-category completions
    STUDY_LOG = "study_log"  # Per-course daily feedback
