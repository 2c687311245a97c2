"""
Base data models - fundamental types without dependencies.

This module contains basic Pydantic models used throughout the system:
- Region: rectangular pixel region used for crop boxes
- OutputFile: encoded result bytes with a file name and MIME type

IMPORTANT: This module must NOT import from schemas, core, services, or api
to avoid circular dependencies.
"""

from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, Field


class Region(BaseModel):
    """
    Rectangular region in pixel units.

    Used for crop boxes. Coordinates are the top-left corner; width and
    height are always positive.
    """

    x: int = Field(..., ge=0, description="X coordinate")
    y: int = Field(..., ge=0, description="Y coordinate")
    width: int = Field(..., gt=0, description="Width")
    height: int = Field(..., gt=0, description="Height")

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @property
    def x2(self) -> int:
        """Right edge (exclusive)."""
        return self.x + self.width

    @property
    def y2(self) -> int:
        """Bottom edge (exclusive)."""
        return self.y + self.height

    def is_within(self, image_width: int, image_height: int) -> bool:
        """Check the region lies fully inside an image of the given size."""
        return self.x2 <= image_width and self.y2 <= image_height


class OutputFile(BaseModel):
    """Encoded file produced by a tool."""

    data: bytes = Field(..., repr=False, description="File contents")
    filename: str = Field(..., description="Suggested download name")
    mime_type: str = Field(..., description="MIME type")

    @property
    def size(self) -> int:
        return len(self.data)
