"""
Pydantic models for incoming uploads
"""
from pydantic import BaseModel, Field

from app.core.enums import ImageFormat
from app.models.domain import BatchItem


class UploadedImage(BaseModel):
    """An uploaded file that passed validation"""
    filename: str = Field(..., description="Original file name")
    content_type: str = Field(..., description="Declared MIME type")
    content: bytes = Field(..., description="Raw image bytes")
    image_format: ImageFormat = Field(..., description="Format detected from the bytes")

    @property
    def size(self) -> int:
        return len(self.content)

    def to_batch_item(self) -> BatchItem:
        return BatchItem(filename=self.filename, content=self.content)
