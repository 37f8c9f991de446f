"""
Health check handlers
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.models.responses import HealthResponse
from app.services.ocr_service import OCRService
from app.api.dependencies import get_ocr_service
from app.config import get_settings
from app.core.rate_limit import limiter

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=HealthResponse)
@router.get("/", response_model=HealthResponse, include_in_schema=False)
async def health_check(
    ocr_service: OCRService = Depends(get_ocr_service)
) -> HealthResponse:
    """
    Basic health check
    Reports that the service is up and whether the provider client exists
    """
    settings = get_settings()

    return HealthResponse(
        status="ok",
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc),
        ocr_engine_available=ocr_service.is_ready()
    )


@router.get("/ready", response_model=HealthResponse)
async def readiness_check(
    ocr_service: OCRService = Depends(get_ocr_service)
) -> HealthResponse:
    """
    Readiness check for Kubernetes / Cloud Run
    Ready only once the provider client is initialized
    """
    settings = get_settings()
    is_ready = ocr_service.is_ready()

    return HealthResponse(
        status="ready" if is_ready else "not_ready",
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc),
        ocr_engine_available=is_ready
    )


# Registered by name, the routes keep the original coroutines
limiter.exempt(health_check)
limiter.exempt(readiness_check)
