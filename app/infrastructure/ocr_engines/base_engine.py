"""
Abstract base class for recognition providers
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from app.models.domain import AnnotationNode


@dataclass(frozen=True)
class RecognitionOutcome:
    """Successful result of one provider call"""
    full_text: str
    annotation_tree: Optional[AnnotationNode] = None


class ProviderError(Exception):
    """Failure reported by a recognition provider"""
    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class BaseOCREngine(ABC):
    """
    Abstract base class for all recognition providers
    Defines a single interface over external OCR APIs
    """

    @abstractmethod
    def initialize(self) -> None:
        """Prepare the provider client"""
        pass

    @abstractmethod
    async def recognize(self, image_bytes: bytes) -> RecognitionOutcome:
        """
        Recognize text in an image

        Args:
            image_bytes: Raw encoded image

        Returns:
            RecognitionOutcome with the full text and annotation tree

        Raises:
            ProviderError: The provider rejected or failed the request
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check whether the provider can take requests

        Returns:
            True if the provider is ready
        """
        pass

    def cleanup(self) -> None:
        """Release resources (optional)"""
        pass
