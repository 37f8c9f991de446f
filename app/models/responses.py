"""
Pydantic models for API responses
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.domain import BatchItemResult


class OCRResponse(BaseModel):
    """Single image recognition result"""
    success: bool = Field(True, description="Operation succeeded")
    text: str = Field("", description="Recognized text")
    confidence: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Overall recognition confidence"
    )
    processing_time_ms: int = Field(..., description="Processing time in milliseconds")
    message: Optional[str] = Field(None, description="Informational message")

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "text": "Hello World",
                "confidence": 0.97,
                "processing_time_ms": 812
            }
        }


class BatchOCRResponse(BaseModel):
    """Batch recognition result, one entry per uploaded image in upload order"""
    success: bool = Field(True, description="Batch was processed")
    results: List[BatchItemResult] = Field(..., description="Per-image results")
    total_images: int = Field(..., description="Number of images in the batch")
    processing_time_ms: int = Field(..., description="Processing time in milliseconds")

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "results": [
                    {
                        "filename": "receipt.png",
                        "success": True,
                        "text": "TOTAL 12.50",
                        "confidence": 0.94
                    },
                    {
                        "filename": "broken.jpg",
                        "success": False,
                        "error": "Invalid or corrupted image file."
                    }
                ],
                "total_images": 2,
                "processing_time_ms": 1530
            }
        }


class ErrorResponse(BaseModel):
    """Uniform error body"""
    success: bool = Field(False, description="Always false")
    error: str = Field(..., description="Error message")
    processing_time_ms: int = Field(0, description="Time spent before failing")


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(..., description="Time of the check")
    ocr_engine_available: bool = Field(..., description="Recognition provider availability")
