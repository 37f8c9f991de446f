"""
Launch the OCR API
"""
import sys
from pathlib import Path

# Make the project root importable when run as a script
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

if __name__ == "__main__":
    import uvicorn
    from app.config import get_settings
    from app.core.logging import setup_logging, get_logger

    settings = get_settings()

    setup_logging(
        log_level=settings.LOG_LEVEL,
        is_debug=settings.DEBUG,
        service_name=settings.APP_NAME
    )
    logger = get_logger("run")

    logger.info(
        "Starting server",
        app_name=settings.APP_NAME,
        version=settings.APP_VERSION,
        url=f"http://{settings.HOST}:{settings.PORT}",
        docs=f"http://{settings.HOST}:{settings.PORT}/docs",
        ocr_endpoint=f"http://{settings.HOST}:{settings.PORT}{settings.api_prefix}/ocr",
        debug=settings.DEBUG
    )

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
