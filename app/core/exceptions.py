"""
Custom exceptions for the OCR service
"""
from app.core.enums import ErrorKind, ErrorSeverity


class OCRException(Exception):
    """Base exception for the OCR service"""
    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ImageValidationError(OCRException):
    """Uploaded image rejected before recognition"""
    def __init__(self, message: str, status_code: int = 400, details: dict = None):
        super().__init__(message, details)
        self.status_code = status_code


class RecognitionError(OCRException):
    """Provider failure classified into an ErrorKind"""
    def __init__(self, kind: ErrorKind, message: str, details: dict = None):
        super().__init__(message, details)
        self.kind = kind

    @property
    def severity(self) -> ErrorSeverity:
        if self.kind is ErrorKind.INVALID_IMAGE:
            return ErrorSeverity.CLIENT
        return ErrorSeverity.SERVER


class BatchError(OCRException):
    """Batch could not be orchestrated at all"""
    pass


class ConfigurationError(OCRException):
    """Configuration error"""
    pass
