"""
Enums for type safety
"""
from enum import Enum


class ImageFormat(str, Enum):
    """Decodable image formats (as reported by Pillow)"""
    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"


class ErrorKind(str, Enum):
    """Classified recognition failures"""
    INVALID_IMAGE = "invalid_image"
    PROVIDER_AUTH_FAILURE = "provider_auth_failure"
    PROVIDER_FAILURE = "provider_failure"


class ErrorSeverity(str, Enum):
    """Who a failure is attributable to"""
    CLIENT = "client"  # Permanent problem with the submitted input
    SERVER = "server"  # Configuration fault or transient provider problem
