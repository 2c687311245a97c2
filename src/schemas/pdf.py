"""
PDF tool API models.

PDF operations take their input files with each request; results are
registered on the session like image results.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from schemas.common import FileResult
from schemas.params import TextToPdfParams


class PdfResultResponse(BaseModel):
    """Result of a PDF operation producing one or more files"""

    session_id: str
    operation: str = Field(..., description="Operation name, e.g. 'split'")
    files: List[FileResult] = Field(default_factory=list)
    page_count: Optional[int] = Field(None, description="Pages in the input or output document")
    processing_time_ms: int = Field(..., description="Processing time in milliseconds")


class PdfCompressResponse(PdfResultResponse):
    """Result of a PDF compression"""

    original_size: int = Field(..., ge=0)
    original_size_formatted: str
    compressed_size: int = Field(..., ge=0)
    compressed_size_formatted: str
    compression_ratio: float = Field(..., ge=0, description="Percentage saved")


class PageCountResponse(BaseModel):
    """Page count of an uploaded PDF"""

    filename: str
    page_count: int = Field(..., ge=0)
    size: int = Field(..., ge=0)
    size_formatted: str


class TextToPdfRequest(BaseModel):
    """Request to build a PDF from plain text"""

    params: TextToPdfParams
