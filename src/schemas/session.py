"""
Session-related API models.

This module contains models for tool sessions:
- Session creation request
- Session information
- Source and overlay upload responses
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from common.base import Region
from common.enums import ToolName


class SessionCreateRequest(BaseModel):
    """Request to open a tool session"""

    tool: ToolName = Field(..., description="Tool the session belongs to")


class SessionInfo(BaseModel):
    """State of an open session"""

    session_id: str
    tool: ToolName
    created_at: float
    has_source: bool = False
    source_filename: Optional[str] = None
    source_mime: Optional[str] = None
    source_size: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    source_handle: Optional[str] = None
    has_overlay: bool = False
    overlay_handle: Optional[str] = None
    result_handles: List[str] = Field(default_factory=list)
    processing: bool = False


class UploadResponse(BaseModel):
    """
    Response for a source or overlay upload.

    The preview handle serves the uploaded bytes unchanged.
    """

    session_id: str
    handle: str = Field(..., description="Preview blob handle")
    filename: str
    mime_type: str
    size: int = Field(..., ge=0, description="Size in bytes")
    size_formatted: str
    width: int
    height: int
    thumbnail_base64: str = Field(..., description="Preview thumbnail as data URI")
    default_crop: Optional[Region] = Field(
        None, description="Initial crop box (cropper sessions only)"
    )
    processing_time_ms: int = Field(..., description="Processing time in milliseconds")
