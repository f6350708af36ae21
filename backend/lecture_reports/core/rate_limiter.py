"""
Rate Limiting for the Lecture Reports API
=========================================
Implements rate limiting using slowapi.

Every client gets the global default (200 requests per 15 minutes unless
RATE_LIMIT_DEFAULT says otherwise). Auth endpoints carry their own limits:
- /auth/login: 5 req/min (brute force protection)
- /auth/register: 3 req/min

Storage defaults to in-process memory; point RATE_LIMIT_STORAGE_URI at
redis:// to share counters between workers.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse
from datetime import datetime

from lecture_reports.core.config import settings
from lecture_reports.core.logging_config import logger


def get_user_identifier(request: Request) -> str:
    """
    Get rate limit key for the request.

    Authenticated requests are keyed by user id (set on request.state by the
    auth dependency), anonymous ones by client IP.
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Return the standard error envelope with a Retry-After header.

    Synchronous: SlowAPIMiddleware calls it directly for the global limit.
    """
    retry_after = exc.detail.split(":")[-1].strip() if exc.detail else "60"
    if not retry_after.isdigit():
        retry_after = "60"

    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )

    message = "Too many requests from this IP, please try again later."
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": message,
            "detail": str(exc.detail),
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": message,
                "details": {"retry_after_seconds": int(retry_after)},
            },
            "timestamp": datetime.utcnow().isoformat() + "Z",
        },
        headers={"Retry-After": retry_after},
    )


def auth_rate_limit():
    """Rate limit for login (5/min)"""
    return limiter.limit("5/minute", key_func=get_user_identifier)


def strict_rate_limit():
    """Very strict rate limit for account creation (3/min)"""
    return limiter.limit("3/minute", key_func=get_user_identifier)
