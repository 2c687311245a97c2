"""
Centralized enums for the File Tools service.

This module contains all enumeration types used throughout the system,
providing a single source of truth for enum definitions.
"""

from enum import Enum


class ToolName(str, Enum):
    """Tools a session can be opened for."""

    RESIZER = "image-resizer"
    CROPPER = "image-cropper"
    ROTATOR = "image-rotator"
    WATERMARKER = "image-watermarker"
    BACKGROUND_REMOVER = "background-remover"
    COLOR_PALETTE = "color-palette"
    CONVERTER = "image-converter"
    COMPRESSOR = "image-compressor"
    PDF_MERGER = "pdf-merger"
    PDF_SPLITTER = "pdf-splitter"
    PDF_COMPRESSOR = "pdf-compressor"
    IMAGE_TO_PDF = "image-to-pdf"
    PDF_TO_IMAGE = "pdf-to-image"
    PDF_GENERATOR = "pdf-generator"
    PDF_EDITOR = "pdf-editor"


class ImageFormat(str, Enum):
    """Encodable image formats."""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    BMP = "bmp"
    GIF = "gif"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return ".jpg" if self is ImageFormat.JPEG else f".{self.value}"

    @classmethod
    def from_mime(cls, mime_type: str) -> "ImageFormat":
        """Resolve a MIME type (image/jpg is accepted as jpeg)."""
        subtype = mime_type.split("/")[-1].lower()
        if subtype == "jpg":
            subtype = "jpeg"
        return cls(subtype)


class WatermarkPosition(str, Enum):
    """Named anchors for watermark placement."""

    TOP_LEFT = "top-left"
    TOP_CENTER = "top-center"
    TOP_RIGHT = "top-right"
    MIDDLE_LEFT = "middle-left"
    CENTER = "center"
    MIDDLE_RIGHT = "middle-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_CENTER = "bottom-center"
    BOTTOM_RIGHT = "bottom-right"


class PageSize(str, Enum):
    """Named PDF page sizes."""

    A4 = "a4"
    LETTER = "letter"
    LEGAL = "legal"
    A3 = "a3"


class Orientation(str, Enum):
    """Page orientation."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class PageLayout(str, Enum):
    """How an image is placed on a PDF page."""

    FIT = "fit"  # Scale to fit, keep aspect ratio, centred
    FILL = "fill"  # Stretch over the whole content box
    ORIGINAL = "original"  # Original size, centred (may be cropped)


class SplitMode(str, Enum):
    """PDF split strategies."""

    PAGES = "pages"
    RANGES = "ranges"


class PaletteExportFormat(str, Enum):
    """Palette download formats."""

    HTML = "html"
    CSS = "css"
    JSON = "json"


class RenderQuality(str, Enum):
    """PDF page rasterisation presets."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    ULTRA = "ultra"


class CompressionLevel(str, Enum):
    """PDF re-save compression levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    MAXIMUM = "maximum"
