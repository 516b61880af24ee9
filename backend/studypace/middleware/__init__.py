"""
Middleware Package

Provides FastAPI middleware for:
- Rate limiting
- Error handling
"""

from studypace.middleware.error_handling import (
    ErrorHandlingMiddleware,
    InvalidArgumentError,
    InvariantViolationError,
    NotFoundError,
    ServiceError,
    setup_error_handling,
)
from studypace.middleware.rate_limit import limiter, limit_write, setup_rate_limiting

__all__ = [
    "setup_rate_limiting",
    "limiter",
    "limit_write",
    "setup_error_handling",
    "ErrorHandlingMiddleware",
    "ServiceError",
    "NotFoundError",
    "InvalidArgumentError",
    "InvariantViolationError",
]
