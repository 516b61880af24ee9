"""
Rate Limiting Middleware

Prevents abuse and ensures fair resource usage using SlowAPI.

The default limit applies to every route through SlowAPIMiddleware. Write
endpoints can opt into the stricter limit:

    from studypace.middleware.rate_limit import limit_write

    @router.post("/categories/{category_id}/progress")
    @limit_write
    async def update_progress(request: Request, ...):
        ...
"""

import logging

from fastapi import FastAPI, Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from studypace.config import settings
from studypace.enums import RateLimitType

logger = logging.getLogger(__name__)


def get_client_identifier(request: Request) -> str:
    """
    Get client identifier for rate limiting.

    Uses X-Forwarded-For header if behind a proxy,
    otherwise falls back to direct IP address.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP in the chain (original client)
        return forwarded_for.split(",")[0].strip()

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[settings.get_rate_limit(RateLimitType.DEFAULT)],
    enabled=settings.RATE_LIMIT_ENABLED,
)


def setup_rate_limiting(app: FastAPI, enabled: bool = True) -> None:
    """
    Configure rate limiting on the FastAPI app.

    Args:
        app: FastAPI application instance
        enabled: Whether to enable rate limiting
    """
    if not enabled:
        logger.info("Rate limiting disabled")
        return

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    logger.info("Rate limiting enabled")


def limit_write(func):
    """Decorator for endpoints that write to the database."""
    return limiter.limit(settings.get_rate_limit(RateLimitType.WRITE))(func)
