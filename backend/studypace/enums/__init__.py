"""
Centralized enum definitions for the application.

All enums are organized by domain:
- progress.py: Checklist day state, activity sources
- api.py: Rate limit categories

Usage:
    from studypace.enums import ChecklistState, RateLimitType

    # Or import from specific module
    from studypace.enums.progress import ChecklistState
"""

from studypace.enums.api import RateLimitType
from studypace.enums.progress import ActivitySource, ChecklistState

__all__ = [
    # Progress
    "ActivitySource",
    "ChecklistState",
    # API
    "RateLimitType",
]
