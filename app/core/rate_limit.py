"""
Per-IP rate limiting with slowapi

Every route carries the global limit, the OCR routes add their own tighter
limit on top. Health checks are exempt so monitoring is never throttled.
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.config import get_settings
from app.core.logging import get_logger
from app.models.responses import ErrorResponse

logger = get_logger(__name__)

RETRY_AFTER_SECONDS = 60

_settings = get_settings()


def create_limiter(global_limit: str, enabled: bool = True) -> Limiter:
    """Create an in-memory limiter applying global_limit to every route"""
    return Limiter(
        key_func=get_remote_address,
        default_limits=[global_limit],
        enabled=enabled,
        storage_uri="memory://",
    )


limiter = create_limiter(_settings.RATE_LIMIT_GLOBAL, _settings.RATE_LIMIT_ENABLED)

OCR_RATE_LIMIT = _settings.RATE_LIMIT_OCR


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Build a 429 response in the common error shape

    Args:
        request: Incoming request
        exc: Exception raised by slowapi

    Returns:
        JSONResponse with a Retry-After header
    """
    if request.url.path.startswith(_settings.api_prefix + "/ocr"):
        message = "Too many OCR requests. Slow down and retry later."
    else:
        message = "Too many requests. Please try again later."

    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        client_ip=get_remote_address(request),
        limit=str(exc.detail)
    )

    return JSONResponse(
        status_code=429,
        content=ErrorResponse(error=message).model_dump(),
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )
