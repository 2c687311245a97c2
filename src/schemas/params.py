"""
Tool parameters for all image and PDF operations.

Centralized location for the Pydantic parameter classes used by the core
engines, services and routers. Watermark parameters and PDF split plans
are tagged unions discriminated on a literal field.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from common.constants import ImageConstants, PaletteConstants, PdfConstants, WatermarkConstants
from common.enums import (
    CompressionLevel,
    ImageFormat,
    Orientation,
    PageLayout,
    PageSize,
    RenderQuality,
    WatermarkPosition,
)
from schemas.base import BaseToolParams


class ResizeParams(BaseToolParams):
    """Resizer parameters."""

    width: int = Field(
        default=ImageConstants.DEFAULT_TARGET_WIDTH, description="Target width in pixels"
    )
    height: int = Field(
        default=ImageConstants.DEFAULT_TARGET_HEIGHT, description="Target height in pixels"
    )
    maintain_aspect_ratio: bool = Field(
        default=True, description="Recompute the other dimension from the driving one"
    )
    driver: Literal["width", "height"] = Field(
        default="width", description="Dimension that was edited last"
    )
    quality: float = Field(
        default=ImageConstants.DEFAULT_QUALITY,
        ge=ImageConstants.MIN_QUALITY,
        le=ImageConstants.MAX_QUALITY,
        description="Encoder quality for lossy formats (0.0 - 1.0)",
    )


class CropParams(BaseToolParams):
    """Cropper parameters. Values outside the image are clamped."""

    x: float = Field(default=0, description="Left edge in pixels")
    y: float = Field(default=0, description="Top edge in pixels")
    width: float = Field(default=1, description="Crop width in pixels")
    height: float = Field(default=1, description="Crop height in pixels")
    aspect_ratio: str = Field(
        default="free", description="Aspect ratio preset, 'free' or 'w:h' (e.g. '16:9')"
    )


class RotateParams(BaseToolParams):
    """Rotator parameters."""

    angle: float = Field(default=0.0, description="Clockwise rotation in degrees")
    flip_horizontal: bool = Field(default=False, description="Mirror left-right")
    flip_vertical: bool = Field(default=False, description="Mirror top-bottom")


class TextWatermarkParams(BaseToolParams):
    """Text watermark parameters."""

    type: Literal["text"] = "text"
    text: str = Field(default=WatermarkConstants.DEFAULT_TEXT, description="Watermark text")
    font_size: int = Field(
        default=WatermarkConstants.DEFAULT_FONT_SIZE,
        ge=WatermarkConstants.MIN_FONT_SIZE,
        le=WatermarkConstants.MAX_FONT_SIZE,
        description="Font size in pixels",
    )
    color: str = Field(
        default=WatermarkConstants.DEFAULT_TEXT_COLOR,
        pattern=r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$",
        description="Text color as #rrggbb",
    )
    opacity: int = Field(
        default=WatermarkConstants.DEFAULT_OPACITY,
        ge=WatermarkConstants.MIN_OPACITY,
        le=WatermarkConstants.MAX_OPACITY,
        description="Opacity in percent",
    )
    position: WatermarkPosition = Field(
        default=WatermarkPosition.BOTTOM_RIGHT, description="Anchor position"
    )


class ImageWatermarkParams(BaseToolParams):
    """Image watermark parameters. The overlay image comes from the session."""

    type: Literal["image"] = "image"
    opacity: int = Field(
        default=WatermarkConstants.DEFAULT_OPACITY,
        ge=WatermarkConstants.MIN_OPACITY,
        le=WatermarkConstants.MAX_OPACITY,
        description="Opacity in percent",
    )
    position: WatermarkPosition = Field(
        default=WatermarkPosition.BOTTOM_RIGHT, description="Anchor position"
    )


WatermarkParams = Annotated[
    Union[TextWatermarkParams, ImageWatermarkParams], Field(discriminator="type")
]


class ConvertParams(BaseToolParams):
    """Format converter parameters."""

    format: ImageFormat = Field(default=ImageFormat.PNG, description="Target format")
    quality: float = Field(
        default=ImageConstants.DEFAULT_QUALITY,
        ge=ImageConstants.MIN_QUALITY,
        le=ImageConstants.MAX_QUALITY,
        description="Encoder quality for lossy formats (0.0 - 1.0)",
    )


class CompressParams(BaseToolParams):
    """Image compressor parameters."""

    quality: float = Field(
        default=ImageConstants.DEFAULT_COMPRESS_QUALITY,
        ge=ImageConstants.MIN_QUALITY,
        le=ImageConstants.MAX_QUALITY,
        description="Encoder quality (0.0 - 1.0)",
    )
    format: Optional[ImageFormat] = Field(
        default=None, description="Output format (defaults to the source format)"
    )


class PaletteParams(BaseToolParams):
    """Palette extraction parameters. The color count is clamped to 3..10."""

    num_colors: int = Field(
        default=PaletteConstants.DEFAULT_COLORS, description="Number of colors to extract"
    )


class ImagesToPdfParams(BaseToolParams):
    """Image to PDF page setup."""

    page_size: PageSize = Field(default=PageSize.A4, description="Page size")
    orientation: Orientation = Field(default=Orientation.PORTRAIT, description="Orientation")
    layout: PageLayout = Field(default=PageLayout.FIT, description="Image placement")
    margin: float = Field(
        default=PdfConstants.DEFAULT_IMAGE_MARGIN,
        description="Page margin in points, clamped to the page",
    )
    title: Optional[str] = Field(default=None, description="Document title metadata")


class PageSplit(BaseToolParams):
    """Split into one document per page."""

    mode: Literal["pages"] = "pages"


class RangeSplit(BaseToolParams):
    """Split into one document per page range."""

    mode: Literal["ranges"] = "ranges"
    ranges: str = Field(..., description="Page ranges, e.g. '1-3, 5, 7-10' (1-based)")


SplitPlan = Annotated[Union[PageSplit, RangeSplit], Field(discriminator="mode")]


class PdfToImagesParams(BaseToolParams):
    """PDF rasterisation parameters."""

    format: ImageFormat = Field(default=ImageFormat.PNG, description="Output image format")
    quality: RenderQuality = Field(
        default=RenderQuality.HIGH, description="Render preset (scale and encoder quality)"
    )
    pages: str = Field(default="all", description="'all' or page list such as '1-3, 5'")


class PdfCompressParams(BaseToolParams):
    """PDF compressor parameters."""

    level: CompressionLevel = Field(
        default=CompressionLevel.MEDIUM, description="Compression level"
    )


class TextToPdfParams(BaseToolParams):
    """PDF generator parameters. The font size is clamped to 10..18."""

    text: str = Field(..., description="Body text; newlines start new lines")
    title: Optional[str] = Field(default=None, description="Optional bold heading")
    font_size: int = Field(
        default=PdfConstants.DEFAULT_TEXT_FONT_SIZE, description="Body font size in points"
    )
    page_size: PageSize = Field(default=PageSize.A4, description="Page size (portrait)")


class TextAnnotation(BaseToolParams):
    """Text drawn onto an existing PDF page."""

    text: str = Field(..., min_length=1, description="Text to draw")
    x: float = Field(
        default=PdfConstants.DEFAULT_ANNOTATION_X, description="Baseline x in points from the left"
    )
    y: float = Field(
        default=PdfConstants.DEFAULT_ANNOTATION_Y, description="Baseline y in points from the top"
    )
    font_size: float = Field(
        default=PdfConstants.DEFAULT_ANNOTATION_FONT_SIZE, gt=0, description="Font size in points"
    )
    color: str = Field(
        default=PdfConstants.DEFAULT_ANNOTATION_COLOR,
        pattern=r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$",
        description="Text color as #rrggbb",
    )
    page: int = Field(
        default=1, description="1-based page number; out-of-range pages use the first page"
    )
