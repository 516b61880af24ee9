"""
Calendar helpers for the progress engine.

Every "today", rollover and deadline decision is made on the local calendar
of settings.TIMEZONE. Timestamps are stored timezone-aware in UTC; SQLite
hands them back naive, so naive values are read as UTC.
"""

from datetime import date, datetime, timezone
from typing import Callable, Optional, Union
from zoneinfo import ZoneInfo

from studypace.config import settings
from studypace.middleware.error_handling import InvalidArgumentError

Clock = Callable[[], datetime]

DateLike = Union[date, datetime]


def local_zone() -> ZoneInfo:
    """Zone of the local calendar."""
    return ZoneInfo(settings.TIMEZONE)


def utc_now() -> datetime:
    """Current time, timezone-aware UTC. The default clock for services."""
    return datetime.now(timezone.utc)


def to_local_date(value: DateLike) -> date:
    """
    Calendar date of a timestamp in the local zone.

    Plain dates are returned unchanged; naive datetimes are treated as UTC.
    """
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(local_zone()).date()


def local_today(clock: Optional[Clock] = None) -> date:
    """Today's local calendar date according to clock (default: wall clock)."""
    return to_local_date((clock or utc_now)())


def parse_calendar_date(value: Union[str, date]) -> date:
    """
    Parse a "YYYY-MM-DD" string into a date.

    Args:
        value: ISO calendar date string, or a date (returned unchanged).

    Returns:
        The parsed date.

    Raises:
        InvalidArgumentError: If the string is not exactly YYYY-MM-DD.
    """
    if isinstance(value, datetime):
        return to_local_date(value)
    if isinstance(value, date):
        return value

    text = (value or "").strip()
    # Extended form only; basic "20240101" and week dates are rejected
    if len(text) != 10 or text[4] != "-" or text[7] != "-":
        raise InvalidArgumentError(
            f"Invalid date '{value}': expected YYYY-MM-DD",
            details={"value": value},
        )
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise InvalidArgumentError(
            f"Invalid date '{value}': expected YYYY-MM-DD",
            details={"value": value},
        )
