"""Rate limiting for API protection

Every ``/api`` route is decorated with :data:`api_rate_limit`, so all of them
draw on one per-IP window. The limit string is read from settings on each
request.
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.config import settings
from app.utils.logger import logger

RATE_LIMIT_SCOPE = "api"


def get_identifier(request: Request) -> str:
    """Rate limit per client IP"""
    return get_remote_address(request)


def current_api_limit() -> str:
    return ";".join(settings.RATE_LIMIT_DEFAULT)


limiter = Limiter(
    key_func=get_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)

api_rate_limit = limiter.shared_limit(current_api_limit, scope=RATE_LIMIT_SCOPE)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors"""
    logger.warning(
        "Rate limit exceeded",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc.detail),
        }
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "Too many requests from this IP, please try again later.",
        }
    )
