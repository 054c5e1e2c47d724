"""
Rate limiting module using SlowAPI.

Keeps upload and folder ingestion from being hammered, since every
request parses whole files and archives.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from .config import settings
from .logging import get_logger

logger = get_logger(__name__)


# Create limiter instance
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
    storage_uri="memory://",
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}: {exc.detail}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "detail": str(exc.detail),
        },
        headers={"Retry-After": "60"},
    )


# Usage: @limiter.limit(RATE_LIMITS["ingest"])
RATE_LIMITS = {
    "ingest": settings.rate_limit_ingest,
    "default": settings.rate_limit_default,
}
