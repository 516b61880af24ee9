"""
Daily Quota Calculator

Pure pacing functions: how many of a category's remaining items are due
today so the category finishes by its deadline.

The quota is never stored. Days left shrink every calendar day and the
remaining count changes with every completion, so callers recompute it on
each read.

Usage:
    from studypace.services.progress.quota import daily_quota

    daily_quota(total=50, completed=10, deadline=date(2024, 1, 11), today=date(2024, 1, 1))
    # → 4
"""

import math
from datetime import date
from typing import Optional

from studypace.services.progress.calendar import DateLike, to_local_date


def remaining_items(total: int, completed: int) -> int:
    """Items still to do, never negative."""
    return max(0, total - completed)


def days_left(deadline: Optional[DateLike], today: date) -> int:
    """
    Whole calendar days from today until the deadline.

    Both ends are compared as local calendar dates. A deadline today, in the
    past, or missing gives 0.
    """
    if deadline is None:
        return 0
    return max(0, (to_local_date(deadline) - today).days)


def daily_quota(
    total: int,
    completed: int,
    deadline: Optional[DateLike],
    today: date,
) -> int:
    """
    Number of items to complete today to stay on pace.

    Args:
        total: Items in the category.
        completed: Items completed so far.
        deadline: Course deadline (date or timestamp). None means no days left.
        today: Current local calendar date.

    Returns:
        0 when nothing remains; all remaining items when the deadline is today
        or has passed; otherwise remaining items spread evenly over the days
        left, rounded up.
    """
    remaining = remaining_items(total, completed)
    if remaining == 0:
        return 0

    left = days_left(deadline, today)
    if left == 0:
        return remaining

    return math.ceil(remaining / left)


def progress_percent(completed: int, total: int) -> int:
    """Completion as a rounded percentage; 0 for an empty category."""
    if total <= 0:
        return 0
    return round(max(0, completed) / total * 100)
