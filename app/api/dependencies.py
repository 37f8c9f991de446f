"""
FastAPI dependencies for dependency injection
"""
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, File, UploadFile

from app.config import get_settings, Settings
from app.infrastructure.ocr_engines.base_engine import BaseOCREngine
from app.infrastructure.ocr_engines.google_vision_engine import GoogleVisionEngine
from app.models.requests import UploadedImage
from app.services.ocr_service import OCRService
from app.core.exceptions import ConfigurationError, ImageValidationError
from app.core.logging import get_logger
from app.utils.image_utils import (
    validate_file_presence,
    validate_files_presence,
    validate_image_format,
    validate_image_size,
    validate_mime_type
)

logger = get_logger(__name__)


@lru_cache()
def get_ocr_engine() -> BaseOCREngine:
    """
    Get the Google Vision engine (singleton)
    Created once and shared by every request
    """
    settings = get_settings()

    engine = GoogleVisionEngine(
        credentials_json=settings.GOOGLE_APPLICATION_CREDENTIALS_JSON,
        timeout=settings.VISION_TIMEOUT_SECONDS,
        max_workers=settings.VISION_MAX_WORKERS
    )

    # A missing client is retried on the first recognition call
    try:
        engine.initialize()
    except ConfigurationError as e:
        logger.error("Google Vision engine not ready", error=e.message)

    return engine


def get_ocr_service(
    engine: BaseOCREngine = Depends(get_ocr_engine),
    settings: Settings = Depends(get_settings)
) -> OCRService:
    """Get an OCR service bound to the shared engine"""
    return OCRService(engine=engine, max_batch_size=settings.MAX_BATCH_SIZE)


async def _read_upload(file: UploadFile, settings: Settings) -> UploadedImage:
    """Validate one upload and read it into memory"""
    content_type = validate_mime_type(file.content_type)
    content = await file.read()
    validate_image_size(content, settings.MAX_FILE_SIZE)
    image_format = validate_image_format(content, settings.allowed_image_formats_list)

    return UploadedImage(
        filename=file.filename or "image",
        content_type=content_type,
        content=content,
        image_format=image_format
    )


async def get_uploaded_image(
    image: Optional[UploadFile] = File(None, description="Image file (JPG, PNG or GIF)"),
    settings: Settings = Depends(get_settings)
) -> UploadedImage:
    """
    Validated single upload from the ``image`` field

    Raises:
        ImageValidationError: Missing, oversized or undecodable upload
    """
    file = validate_file_presence(image, field_name="image")
    return await _read_upload(file, settings)


async def get_uploaded_images(
    images: Optional[List[UploadFile]] = File(None, description="Image files (JPG, PNG or GIF)"),
    settings: Settings = Depends(get_settings)
) -> List[UploadedImage]:
    """
    Validated batch upload from the ``images`` field

    Every file is checked before any is recognized. The first invalid file
    rejects the whole request, its name prefixed to the message.

    Raises:
        ImageValidationError: Empty or oversized batch, or an invalid file
    """
    files = validate_files_presence(
        images,
        field_name="images",
        max_count=settings.MAX_BATCH_SIZE
    )

    uploads = []
    for file in files:
        try:
            uploads.append(await _read_upload(file, settings))
        except ImageValidationError as e:
            raise ImageValidationError(
                f"{file.filename}: {e.message}",
                status_code=e.status_code,
                details=e.details
            ) from e
    return uploads
