"""
Upload validation helpers
"""
import io
from typing import Iterable, List, Optional, Sequence

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from app.core.exceptions import ImageValidationError
from app.core.enums import ImageFormat

ALLOWED_MIME_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/gif")


def validate_file_presence(file: Optional[UploadFile], field_name: str = "image") -> UploadFile:
    """
    Ensure a file was uploaded under the expected field

    Raises:
        ImageValidationError: 400 if nothing was uploaded
    """
    if file is None:
        raise ImageValidationError(
            f'No file provided. Please upload a file using the "{field_name}" field.',
            status_code=400
        )
    return file


def validate_files_presence(
    files: Optional[Sequence[UploadFile]],
    field_name: str = "images",
    max_count: int = 10
) -> Sequence[UploadFile]:
    """
    Ensure a batch has between one and ``max_count`` files

    Raises:
        ImageValidationError: 400 if the batch is empty or too large
    """
    if not files:
        raise ImageValidationError(
            f'No files provided. Please upload files using the "{field_name}" field.',
            status_code=400
        )

    if len(files) > max_count:
        raise ImageValidationError(
            f"Too many files. Maximum {max_count} files allowed, received {len(files)}.",
            status_code=400,
            details={"max_count": max_count, "received": len(files)}
        )
    return files


def validate_mime_type(content_type: Optional[str]) -> str:
    """
    Check the declared MIME type

    Raises:
        ImageValidationError: 400 if missing, 415 if not an accepted image type
    """
    if not content_type:
        raise ImageValidationError("File type is required.", status_code=400)

    if content_type.lower() not in ALLOWED_MIME_TYPES:
        raise ImageValidationError(
            f"Invalid file type: {content_type}. Only JPG, JPEG, PNG, and GIF are allowed.",
            status_code=415,
            details={"content_type": content_type}
        )
    return content_type


def validate_image_size(image_bytes: bytes, max_size_bytes: int) -> None:
    """
    Check the upload is neither empty nor too large

    Raises:
        ImageValidationError: 400 if empty, 413 if above the limit
    """
    size = len(image_bytes)

    if size == 0:
        raise ImageValidationError("File is empty.", status_code=400)

    if size > max_size_bytes:
        size_mb = size / (1024 * 1024)
        max_size_mb = max_size_bytes / (1024 * 1024)
        raise ImageValidationError(
            f"File size ({size_mb:.2f}MB) exceeds maximum allowed size of {max_size_mb:.2f}MB.",
            status_code=413,
            details={"size_bytes": size, "max_size_bytes": max_size_bytes}
        )


def validate_image_format(
    image_bytes: bytes,
    allowed_formats: Optional[Iterable[str]] = None
) -> ImageFormat:
    """
    Check the bytes decode as an accepted image format

    Args:
        image_bytes: Raw upload
        allowed_formats: Format names to accept, all known formats if None

    Returns:
        Detected format

    Raises:
        ImageValidationError: 415 if the bytes are not an accepted image
    """
    allowed: List[str] = (
        [f.lower() for f in allowed_formats]
        if allowed_formats is not None
        else [f.value for f in ImageFormat]
    )

    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            format_lower = img.format.lower() if img.format else "unknown"
    except (UnidentifiedImageError, OSError, ValueError):
        raise ImageValidationError(
            "Invalid image format. File does not appear to be a valid image.",
            status_code=415
        ) from None

    known = {f.value for f in ImageFormat}
    if format_lower not in allowed or format_lower not in known:
        raise ImageValidationError(
            f"Unsupported image format: {format_lower}",
            status_code=415,
            details={"format": format_lower, "supported_formats": allowed}
        )
    return ImageFormat(format_lower)
