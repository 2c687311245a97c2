"""
Image processing API models.

Request bodies wrap the tool parameters; every image operation answers
with an ImageResultResponse.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from schemas.common import FileResult, Size
from schemas.params import (
    CompressParams,
    ConvertParams,
    CropParams,
    ResizeParams,
    RotateParams,
    WatermarkParams,
)


class ResizeRequest(BaseModel):
    """Request to resize the session image"""

    params: ResizeParams = Field(default_factory=ResizeParams)


class CropRequest(BaseModel):
    """Request to crop the session image"""

    params: CropParams


class RotateRequest(BaseModel):
    """Request to rotate and/or flip the session image"""

    params: RotateParams = Field(default_factory=RotateParams)


class WatermarkRequest(BaseModel):
    """
    Request to watermark the session image.

    Image watermarks use the overlay uploaded to the session.
    """

    params: WatermarkParams = Field(..., description="Text or image watermark, tagged by 'type'")


class ConvertRequest(BaseModel):
    """Request to convert the session image to another format"""

    params: ConvertParams = Field(default_factory=ConvertParams)


class CompressRequest(BaseModel):
    """Request to compress the session image"""

    params: CompressParams = Field(default_factory=CompressParams)


class ImageResultResponse(BaseModel):
    """Result of an image operation"""

    session_id: str
    operation: str = Field(..., description="Operation name, e.g. 'crop'")
    result: FileResult
    dimensions: Size = Field(..., description="Output image dimensions")
    original_size: int = Field(..., ge=0, description="Source file size in bytes")
    original_size_formatted: str
    thumbnail_base64: Optional[str] = Field(
        None, description="Preview of the result as data URI"
    )
    details: Dict[str, Any] = Field(
        default_factory=dict, description="Operation specific values (applied region, ratio...)"
    )
    processing_time_ms: int = Field(..., description="Processing time in milliseconds")
