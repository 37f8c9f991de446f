"""
OCR handlers - text recognition endpoints
"""
import time
from typing import List

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.models.requests import UploadedImage
from app.models.responses import BatchOCRResponse, ErrorResponse, OCRResponse
from app.services.ocr_service import NO_TEXT_MESSAGE, OCRService
from app.api.dependencies import (
    get_ocr_service,
    get_uploaded_image,
    get_uploaded_images
)
from app.core.enums import ErrorSeverity
from app.core.exceptions import BatchError, RecognitionError
from app.core.logging import get_logger
from app.core.rate_limit import OCR_RATE_LIMIT, limiter

logger = get_logger(__name__)
router = APIRouter(prefix="/ocr", tags=["OCR"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing, empty or too many files"},
    413: {"model": ErrorResponse, "description": "File too large"},
    415: {"model": ErrorResponse, "description": "Not a JPG, PNG or GIF image"},
    422: {"model": ErrorResponse, "description": "Provider rejected the image"},
    429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    500: {"model": ErrorResponse, "description": "Provider or server failure"},
}

SEVERITY_STATUS = {
    ErrorSeverity.CLIENT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorSeverity.SERVER: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)


def _error_response(status_code: int, message: str, start_time: float) -> JSONResponse:
    body = ErrorResponse(error=message, processing_time_ms=_elapsed_ms(start_time))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post(
    "",
    response_model=OCRResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    responses=ERROR_RESPONSES
)
@limiter.limit(OCR_RATE_LIMIT, override_defaults=False)
async def process_ocr(
    request: Request,
    upload: UploadedImage = Depends(get_uploaded_image),
    ocr_service: OCRService = Depends(get_ocr_service)
):
    """
    Extract text from a single image

    Upload the image as multipart field ``image``. Returns the recognized
    text with a confidence between 0 and 1.

    Raises:
        422: The provider could not decode the image
        500: Provider authentication or other provider failure
    """
    start_time = time.time()
    logger.info(
        "Received OCR request",
        filename=upload.filename,
        size_bytes=upload.size,
        image_format=upload.image_format.value
    )

    try:
        outcome = await ocr_service.handle_single(upload.content)
    except RecognitionError as e:
        return _error_response(SEVERITY_STATUS[e.severity], e.message, start_time)

    if not outcome.result.has_text:
        return OCRResponse(
            text="",
            confidence=0.0,
            processing_time_ms=outcome.processing_time_ms,
            message=NO_TEXT_MESSAGE
        )

    return OCRResponse(
        text=outcome.result.text,
        confidence=outcome.result.confidence,
        processing_time_ms=outcome.processing_time_ms
    )


@router.post(
    "/batch",
    response_model=BatchOCRResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    responses=ERROR_RESPONSES
)
@limiter.limit(OCR_RATE_LIMIT, override_defaults=False)
async def process_batch_ocr(
    request: Request,
    uploads: List[UploadedImage] = Depends(get_uploaded_images),
    ocr_service: OCRService = Depends(get_ocr_service)
):
    """
    Extract text from several images at once

    Upload the images as repeated multipart field ``images``. Images are
    recognized concurrently; one failing image is reported in its own entry
    and does not fail the request. Results keep the upload order.
    """
    start_time = time.time()
    logger.info("Received batch OCR request", total_images=len(uploads))

    try:
        batch = await ocr_service.handle_batch([u.to_batch_item() for u in uploads])
    except BatchError as e:
        logger.warning("Batch rejected", error=e.message)
        return _error_response(status.HTTP_400_BAD_REQUEST, e.message, start_time)

    return BatchOCRResponse(
        results=batch.results,
        total_images=batch.total_images,
        processing_time_ms=batch.processing_time_ms
    )
