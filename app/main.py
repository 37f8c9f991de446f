"""
FastAPI application - OCR API entry point
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.core.exceptions import ImageValidationError, OCRException
from app.core.logging import setup_logging, get_logger
from app.core.rate_limit import limiter, rate_limit_exceeded_handler
from app.api.dependencies import get_ocr_engine
from app.api.v1.router import api_router, health_router
from app.models.responses import ErrorResponse

# Configure logging on import
settings = get_settings()
setup_logging(
    log_level=settings.LOG_LEVEL,
    is_debug=settings.DEBUG,
    service_name=settings.APP_NAME
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifecycle events
    Runs on application startup and shutdown
    """
    # Startup
    logger.info(
        "Starting OCR API",
        app_name=settings.APP_NAME,
        version=settings.APP_VERSION,
        api_prefix=settings.api_prefix,
        debug=settings.DEBUG
    )

    yield

    # Shutdown
    if get_ocr_engine.cache_info().currsize:
        get_ocr_engine().cleanup()
    logger.info("Shutting down OCR API")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Text extraction from images using Google Cloud Vision",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ImageValidationError)
async def image_validation_exception_handler(
    request: Request,
    exc: ImageValidationError
) -> JSONResponse:
    """Rejected uploads"""
    logger.warning(
        "Image validation failed",
        path=request.url.path,
        error=exc.message,
        status_code=exc.status_code
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump()
    )


@app.exception_handler(OCRException)
async def ocr_exception_handler(request: Request, exc: OCRException) -> JSONResponse:
    """Service errors not handled by an endpoint"""
    logger.error("Unhandled OCR error", path=request.url.path, error=exc.message)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=exc.message).model_dump()
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """HTTP errors in the common error shape"""
    if exc.status_code == 404:
        message = f"Endpoint not found: {request.method} {request.url.path}."
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort handler"""
    logger.error(
        "Unexpected error",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="An internal server error occurred.").model_dump()
    )


# Routers
app.include_router(health_router)
app.include_router(api_router)


@app.get("/", include_in_schema=False)
async def root():
    """Redirect the root to the docs"""
    return RedirectResponse(url="/docs")


if __name__ == "__main__":
    import uvicorn

    logger.info(
        "Starting server",
        host=settings.HOST,
        port=settings.PORT
    )

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
