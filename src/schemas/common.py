"""
Common models shared across the API.

This module contains the response building blocks used by every tool:
- Size for image dimensions
- FileResult for downloadable files behind blob handles
"""

from pydantic import BaseModel, Field


class Size(BaseModel):
    """Image size"""

    width: int
    height: int


class FileResult(BaseModel):
    """
    A downloadable file registered in the blob registry.

    The file itself is fetched from /api/blob/{handle}.
    """

    handle: str = Field(..., description="Blob handle, e.g. blob:3f2a...")
    filename: str = Field(..., description="Suggested download name")
    mime_type: str = Field(..., description="MIME type of the file")
    size: int = Field(..., ge=0, description="Size in bytes")
    size_formatted: str = Field(..., description="Human readable size, e.g. '1.5 KB'")
