"""
Rate Limiting for the IPD Portal API
====================================
Implements rate limiting using slowapi. Storage defaults to in-process
memory; point RATE_LIMIT_STORAGE_URI at redis:// to share limits
between workers.

Spreadsheet uploads get their own, stricter limit (UPLOAD_RATE_LIMIT).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging_config import logger


def get_user_identifier(request: Request) -> str:
    """
    Get rate limit key based on user authentication.

    Priority:
    1. Authenticated user ID (set by the auth dependency)
    2. IP address (for anonymous users)
    """
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.

    Returns a JSON response with a Retry-After header.
    """
    retry_after = exc.detail.split(":")[-1].strip() if exc.detail else "60"

    logger.warning(
        f"[RateLimit] Exceeded for {get_user_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": {
                "code": "RATE_LIMITED",
                "message": "Too many requests. Please slow down.",
                "details": {
                    "limit": str(exc.detail),
                    "retry_after_seconds": int(retry_after) if retry_after.isdigit() else 60,
                },
            },
        },
        headers={"Retry-After": retry_after if retry_after.isdigit() else "60"}
    )


def upload_rate_limit():
    """Rate limit for spreadsheet uploads"""
    return limiter.limit(settings.UPLOAD_RATE_LIMIT, key_func=get_user_identifier)
