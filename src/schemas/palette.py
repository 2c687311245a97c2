"""
Palette models.

Result shapes of the dominant color extractor and the palette endpoints.
"""

from typing import List

from pydantic import BaseModel, Field

from common.enums import PaletteExportFormat
from schemas.params import PaletteParams


class PaletteColor(BaseModel):
    """One dominant color bucket."""

    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)
    hex: str = Field(..., description="Color as #rrggbb")
    count: int = Field(default=0, ge=0, description="Pixels in this bucket")
    label_color: str = Field(..., description="Black or white label color for contrast")

    @property
    def rgb(self) -> str:
        return f"rgb({self.r}, {self.g}, {self.b})"


class PaletteResult(BaseModel):
    """Ordered list of dominant colors."""

    colors: List[PaletteColor] = Field(default_factory=list)
    is_fallback: bool = Field(
        default=False, description="True when no opaque pixels were found"
    )
    sampled_pixels: int = Field(default=0, ge=0, description="Opaque pixels counted")

    @property
    def hex_colors(self) -> List[str]:
        return [color.hex for color in self.colors]


class PaletteExtractRequest(BaseModel):
    """Request to extract the palette of the session image"""

    params: PaletteParams = Field(default_factory=PaletteParams)


class PaletteExportRequest(BaseModel):
    """Request to export the palette as a downloadable file"""

    format: PaletteExportFormat = Field(
        default=PaletteExportFormat.HTML, description="Export format"
    )
    params: PaletteParams = Field(default_factory=PaletteParams)


class PaletteResponse(BaseModel):
    """Extracted palette"""

    session_id: str
    palette: PaletteResult
    copy_text: str = Field(..., description="Comma separated hex values")
    processing_time_ms: int = Field(..., description="Processing time in milliseconds")
