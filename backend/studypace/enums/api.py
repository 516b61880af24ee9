"""
API-related enums.

Defines enums for rate limiting and other API concerns.
"""

from enum import Enum


class RateLimitType(str, Enum):
    """
    Rate limit categories for different endpoint types.

    Each category has a corresponding rate limit configured in settings.
    Usage:
        from studypace.enums import RateLimitType
        from studypace.config import settings

        limit = settings.get_rate_limit(RateLimitType.WRITE)
    """

    # Read endpoints and anything not otherwise classified
    DEFAULT = "default"

    # Endpoints that mutate progress counters
    WRITE = "write"
