"""
Main OCR service - orchestrator
"""
import asyncio
import time
from dataclasses import dataclass
from typing import List, Sequence

from app.infrastructure.ocr_engines.base_engine import (
    BaseOCREngine,
    ProviderError,
    RecognitionOutcome
)
from app.models.domain import BatchItem, BatchItemResult, ProcessedResult
from app.services.confidence import aggregate, round_confidence
from app.core.enums import ErrorKind
from app.core.exceptions import BatchError, RecognitionError
from app.core.logging import get_logger

logger = get_logger(__name__)

# gRPC status codes reported by the provider
INVALID_ARGUMENT = 3
PERMISSION_DENIED = 7
UNAUTHENTICATED = 16

INVALID_IMAGE_MESSAGE = "Invalid or corrupted image file."
AUTH_FAILURE_MESSAGE = (
    "Google Cloud Vision API authentication failed. Please check your credentials."
)
GENERIC_FAILURE_MESSAGE = "An error occurred while processing the image."
NO_TEXT_MESSAGE = "No text found in the image."


def classify_provider_error(error: Exception) -> RecognitionError:
    """
    Map a provider failure onto an ErrorKind

    Args:
        error: Exception raised while calling the provider

    Returns:
        RecognitionError with a human readable message
    """
    if isinstance(error, RecognitionError):
        return error

    code = error.code if isinstance(error, ProviderError) else None
    message = error.message if isinstance(error, ProviderError) else str(error)
    message = message or ""
    details = {"provider_code": code} if code is not None else {}

    if code == INVALID_ARGUMENT or "Invalid image" in message:
        return RecognitionError(ErrorKind.INVALID_IMAGE, INVALID_IMAGE_MESSAGE, details)

    if code in (PERMISSION_DENIED, UNAUTHENTICATED) or "permission" in message:
        return RecognitionError(ErrorKind.PROVIDER_AUTH_FAILURE, AUTH_FAILURE_MESSAGE, details)

    return RecognitionError(
        ErrorKind.PROVIDER_FAILURE,
        message or GENERIC_FAILURE_MESSAGE,
        details
    )


@dataclass
class SingleResult:
    """Single image outcome with timing"""
    result: ProcessedResult
    processing_time_ms: int


@dataclass
class BatchResult:
    """Batch outcome with timing"""
    results: List[BatchItemResult]
    processing_time_ms: int

    @property
    def total_images(self) -> int:
        return len(self.results)


class OCRService:
    """
    Main text recognition service
    Runs provider calls, reduces their output and fans batches out concurrently
    """

    def __init__(self, engine: BaseOCREngine, max_batch_size: int = 10):
        """
        Initialize the OCR service

        Args:
            engine: Recognition provider
            max_batch_size: Largest batch accepted by process_batch
        """
        self.engine = engine
        self.max_batch_size = max_batch_size

        logger.info("OCR Service initialized", max_batch_size=max_batch_size)

    @staticmethod
    def process_result(outcome: RecognitionOutcome) -> ProcessedResult:
        """
        Reduce a provider outcome to text and a rounded confidence

        Empty text yields zero confidence whatever the tree holds. The mean
        is clamped to [0, 1] before rounding.
        """
        text = (outcome.full_text or "").strip()
        if not text:
            return ProcessedResult(text="", confidence=0.0, has_text=False)

        confidence = min(max(aggregate(outcome.annotation_tree), 0.0), 1.0)
        return ProcessedResult(
            text=text,
            confidence=round_confidence(confidence),
            has_text=True
        )

    async def recognize_and_process(self, image_bytes: bytes) -> ProcessedResult:
        """
        Recognize one image

        Args:
            image_bytes: Raw encoded image

        Returns:
            ProcessedResult

        Raises:
            RecognitionError: Classified provider failure, never retried
        """
        try:
            outcome = await self.engine.recognize(image_bytes)
        except Exception as e:
            raise classify_provider_error(e) from e
        return self.process_result(outcome)

    async def _process_item(self, item: BatchItem) -> BatchItemResult:
        try:
            processed = await self.recognize_and_process(item.content)
        except RecognitionError as e:
            logger.warning(
                "Batch item failed",
                filename=item.filename,
                error=e.message,
                error_kind=e.kind.value
            )
            return BatchItemResult.failed(item.filename, e.message)
        except Exception as e:
            error = classify_provider_error(e)
            logger.error(
                "Batch item processing error",
                filename=item.filename,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True
            )
            return BatchItemResult.failed(item.filename, error.message)
        return BatchItemResult.succeeded(item.filename, processed)

    async def process_batch(self, items: Sequence[BatchItem]) -> List[BatchItemResult]:
        """
        Recognize every image concurrently

        A failing item becomes a failed entry and never affects the others.
        Results come back in input order.

        Args:
            items: Images in upload order

        Returns:
            One BatchItemResult per input item, same position

        Raises:
            BatchError: The batch is empty or too large
        """
        if items is None or len(items) == 0:
            raise BatchError("No images provided for batch processing.")
        if len(items) > self.max_batch_size:
            raise BatchError(
                f"Too many files. Maximum {self.max_batch_size} files allowed, "
                f"received {len(items)}.",
                details={"max_batch_size": self.max_batch_size, "received": len(items)}
            )

        results = await asyncio.gather(*(self._process_item(item) for item in items))
        return list(results)

    async def handle_single(self, image_bytes: bytes) -> SingleResult:
        """
        Recognize one image and measure the elapsed time

        Raises:
            RecognitionError: Classified provider failure
        """
        start_time = time.time()
        logger.info("Starting single image recognition", size_bytes=len(image_bytes))

        try:
            result = await self.recognize_and_process(image_bytes)
        except RecognitionError as e:
            logger.error(
                "Single image recognition failed",
                error=e.message,
                error_kind=e.kind.value,
                processing_time_ms=int((time.time() - start_time) * 1000)
            )
            raise

        processing_time_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "Single image recognition completed",
            has_text=result.has_text,
            confidence=result.confidence,
            processing_time_ms=processing_time_ms
        )
        return SingleResult(result=result, processing_time_ms=processing_time_ms)

    async def handle_batch(self, items: Sequence[BatchItem]) -> BatchResult:
        """
        Recognize a batch and measure the elapsed time

        Raises:
            BatchError: The batch could not be started
        """
        start_time = time.time()
        logger.info("Starting batch recognition", total_images=len(items or []))

        results = await self.process_batch(items)

        processing_time_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "Batch recognition completed",
            total_images=len(results),
            failed=sum(1 for r in results if not r.success),
            processing_time_ms=processing_time_ms
        )
        return BatchResult(results=results, processing_time_ms=processing_time_ms)

    def is_ready(self) -> bool:
        """
        Check the service can take requests

        Returns:
            True if the provider is available
        """
        return self.engine.is_available()
