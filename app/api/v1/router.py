"""
API routers
Versioned OCR routes and unversioned health checks
"""
from fastapi import APIRouter

from app.api.v1.handlers import ocr_handler, health_handler
from app.config import get_settings

# Versioned API router, /api/{API_VERSION}
api_router = APIRouter(prefix=get_settings().api_prefix)
api_router.include_router(ocr_handler.router)

# Health checks stay at the root for monitoring
health_router = health_handler.router
