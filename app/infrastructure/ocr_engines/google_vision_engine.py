"""
Wrapper for Google Cloud Vision document text detection
"""
import asyncio
import json
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Dict, Optional

from google.api_core.exceptions import GoogleAPICallError
from google.auth.exceptions import GoogleAuthError
from google.cloud import vision
from google.oauth2 import service_account

from app.infrastructure.ocr_engines.base_engine import (
    BaseOCREngine,
    ProviderError,
    RecognitionOutcome
)
from app.models.domain import AnnotationNode
from app.core.exceptions import ConfigurationError
from app.core.logging import get_logger

logger = get_logger(__name__)

# gRPC status codes
UNKNOWN = 2
UNAUTHENTICATED = 16


class GoogleVisionEngine(BaseOCREngine):
    """
    Google Cloud Vision wrapper

    The Vision client is blocking, so calls run on a dedicated thread pool
    and many images can be in flight at once.
    """

    def __init__(
        self,
        credentials_json: str = "",
        timeout: Optional[float] = None,
        max_workers: int = 10
    ):
        """
        Configure the engine

        Args:
            credentials_json: Inline service account JSON, application
                default credentials are used when empty
            timeout: Per-call timeout in seconds, provider default if None
            max_workers: Size of the thread pool for provider calls
        """
        self.credentials_json = credentials_json
        self.timeout = timeout
        self.max_workers = max_workers
        self.client: Optional[vision.ImageAnnotatorClient] = None
        self._executor: Optional[ThreadPoolExecutor] = None

        logger.info(
            "Google Vision engine configured",
            inline_credentials=bool(credentials_json),
            timeout=timeout,
            max_workers=max_workers
        )

    def initialize(self) -> None:
        """Create the Vision client and the worker pool"""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="vision"
            )

        if self.client is not None:
            return

        try:
            if self.credentials_json:
                info = json.loads(self.credentials_json)
                credentials = service_account.Credentials.from_service_account_info(info)
                self.client = vision.ImageAnnotatorClient(credentials=credentials)
            else:
                self.client = vision.ImageAnnotatorClient()
        except (ValueError, GoogleAuthError) as e:
            logger.error("Failed to initialize Google Vision client", error=str(e))
            raise ConfigurationError(
                f"Failed to initialize Google Vision client: {e}",
                details={"error": str(e)}
            ) from e

        logger.info("Google Vision client initialized")

    async def recognize(self, image_bytes: bytes) -> RecognitionOutcome:
        """
        Run document text detection on one image

        Args:
            image_bytes: Raw encoded image

        Returns:
            RecognitionOutcome built from the first text annotation and the
            full text annotation tree

        Raises:
            ProviderError: Vision rejected the image or the call failed
        """
        try:
            self.initialize()
        except ConfigurationError as e:
            raise ProviderError(UNAUTHENTICATED, e.message) from e

        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(
            self._executor,
            partial(self._detect, image_bytes)
        )
        return self.to_outcome(response)

    def _detect(self, image_bytes: bytes) -> vision.AnnotateImageResponse:
        kwargs: Dict[str, Any] = {}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        try:
            response = self.client.document_text_detection(
                image=vision.Image(content=image_bytes),
                **kwargs
            )
        except GoogleAPICallError as e:
            status = getattr(e, "grpc_status_code", None)
            code = status.value[0] if status is not None else UNKNOWN
            logger.warning("Google Vision call failed", code=code, error=e.message)
            raise ProviderError(code, e.message or str(e)) from e
        except GoogleAuthError as e:
            logger.warning("Google Vision authentication failed", error=str(e))
            raise ProviderError(UNAUTHENTICATED, str(e)) from e

        if response.error.message:
            logger.warning(
                "Google Vision rejected image",
                code=response.error.code,
                error=response.error.message
            )
            raise ProviderError(response.error.code, response.error.message)

        return response

    @staticmethod
    def to_outcome(response: vision.AnnotateImageResponse) -> RecognitionOutcome:
        """
        Reduce a Vision response to text and annotation tree

        The first text annotation holds the whole detected text, the rest
        are individual words.
        """
        full_text = ""
        if response.text_annotations:
            full_text = response.text_annotations[0].description or ""

        tree = None
        if "full_text_annotation" in response:
            raw = vision.TextAnnotation.to_dict(response.full_text_annotation)
            tree = AnnotationNode.from_raw(raw)

        return RecognitionOutcome(full_text=full_text, annotation_tree=tree)

    def is_available(self) -> bool:
        return self.client is not None

    def cleanup(self) -> None:
        """Shut down the worker pool"""
        if self._executor is not None:
            logger.info("Shutting down Google Vision worker pool")
            self._executor.shutdown(wait=True)
            self._executor = None
