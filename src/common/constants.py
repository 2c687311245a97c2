"""
Constants and configuration values for the File Tools service.
Centralizes all magic numbers and configuration constants.
"""


# Image Management Constants
class ImageConstants:
    """Constants related to image decoding, encoding and storage."""

    # Accepted upload types (image tools)
    SUPPORTED_INPUT_TYPES = [
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/gif",
        "image/bmp",
    ]

    # Encoder defaults
    DEFAULT_QUALITY = 0.9
    DEFAULT_COMPRESS_QUALITY = 0.8
    MIN_QUALITY = 0.0
    MAX_QUALITY = 1.0

    # Thumbnail settings
    DEFAULT_THUMBNAIL_WIDTH = 320
    MIN_THUMBNAIL_WIDTH = 50
    MAX_THUMBNAIL_WIDTH = 2000
    THUMBNAIL_JPEG_QUALITY = 70

    # Resizer defaults before an image is loaded
    DEFAULT_TARGET_WIDTH = 800
    DEFAULT_TARGET_HEIGHT = 600

    # File size units for human readable output
    FILE_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


# Crop Constants
class CropConstants:
    """Constants for the cropper tool."""

    # Initial crop box relative to image size
    DEFAULT_OFFSET_RATIO = 0.25
    DEFAULT_SIZE_RATIO = 0.5


# Rotation Constants
class RotationConstants:
    """Constants for the rotator tool."""

    # Tolerance when truncating the rotated bounding box to whole pixels
    BOUNDS_EPSILON = 1e-9


# Watermark Constants
class WatermarkConstants:
    """Constants for watermark compositing."""

    PADDING = 20
    MAX_SIZE_RATIO = 0.2  # Image watermark: 20% of smaller base dimension

    MIN_OPACITY = 10
    MAX_OPACITY = 100
    DEFAULT_OPACITY = 50

    DEFAULT_TEXT = "© Your Name"
    DEFAULT_FONT_SIZE = 24
    MIN_FONT_SIZE = 8
    MAX_FONT_SIZE = 200
    DEFAULT_TEXT_COLOR = "#ffffff"

    SHADOW_OFFSET = 1
    SHADOW_BLUR = 2


# Edge mask Constants
class MaskConstants:
    """Constants for the edge-mask background remover."""

    EDGE_THRESHOLD = 50
    BLUR_RADIUS = 2
    MASK_ON = 255
    MASK_OFF = 0

    # Transparency preview background
    CHECKER_CELL_SIZE = 10
    CHECKER_LIGHT = (0xF0, 0xF0, 0xF0)
    CHECKER_DARK = (0xE0, 0xE0, 0xE0)


# Palette Constants
class PaletteConstants:
    """Constants for dominant color extraction."""

    SAMPLE_SIZE = 100
    BUCKET_SIZE = 10
    ALPHA_CUTOFF = 128

    MIN_COLORS = 3
    MAX_COLORS = 10
    DEFAULT_COLORS = 5

    FALLBACK_PALETTE = ["#3b82f6", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6"]

    # Luminance weights (ITU-R BT.601)
    LUMA_RED = 0.299
    LUMA_GREEN = 0.587
    LUMA_BLUE = 0.114
    LUMINANCE_THRESHOLD = 0.5

    LABEL_BLACK = "#000000"
    LABEL_WHITE = "#FFFFFF"


# PDF Constants
class PdfConstants:
    """Constants for PDF page geometry and document handling."""

    MIME_TYPE = "application/pdf"

    # Page sizes in points (portrait)
    PAGE_SIZES = {
        "a4": (595, 842),
        "letter": (612, 792),
        "legal": (612, 1008),
        "a3": (842, 1191),
    }
    DEFAULT_PAGE_SIZE = "a4"

    # Images placed edge to edge unless a margin is requested
    DEFAULT_IMAGE_MARGIN = 0

    # Rasterisation presets (PDF to image): render scale, encoder quality
    RENDER_PRESETS = {
        "low": (1.0, 0.6),
        "medium": (1.5, 0.8),
        "high": (2.0, 0.9),
        "ultra": (3.0, 1.0),
    }
    DEFAULT_RENDER_PRESET = "high"

    # PyMuPDF save options per compression level
    COMPRESSION_PRESETS = {
        "low": {"garbage": 1, "deflate": False},
        "medium": {"garbage": 2, "deflate": True},
        "high": {"garbage": 3, "deflate": True, "clean": True},
        "maximum": {
            "garbage": 4,
            "deflate": True,
            "deflate_images": True,
            "deflate_fonts": True,
            "clean": True,
        },
    }

    MERGED_FILENAME = "merged-document.pdf"

    # Files accepted by one merge or image-to-PDF request
    DEFAULT_MAX_FILES = 50
    DEFAULT_DOCUMENT_TITLE = "images"

    # PDF generator layout (millimetres from the top-left of the page)
    MM_TO_POINTS = 72 / 25.4
    TEXT_MARGIN_MM = 20
    TITLE_TOP_MM = 30
    BODY_TOP_MM = 50
    BODY_TOP_NO_TITLE_MM = 30
    TITLE_FONT_SIZE = 18
    MIN_TEXT_FONT_SIZE = 10
    MAX_TEXT_FONT_SIZE = 18
    DEFAULT_TEXT_FONT_SIZE = 12
    LINE_HEIGHT_FACTOR = 1.15
    BODY_FONT = "helv"
    TITLE_FONT = "hebo"
    DEFAULT_TEXT_TITLE = "document"

    # PDF editor annotation defaults (points from the top-left)
    DEFAULT_ANNOTATION_X = 100
    DEFAULT_ANNOTATION_Y = 100
    DEFAULT_ANNOTATION_FONT_SIZE = 12
    DEFAULT_ANNOTATION_COLOR = "#000000"


# Session Constants
class SessionConstants:
    """Constants for tool sessions and blob lifecycle."""

    DEFAULT_MAX_SESSIONS = 50
    MIN_SESSIONS = 1
    MAX_SESSIONS = 1000

    BLOB_URL_PREFIX = "blob:"


# API Constants
class APIConstants:
    """Constants for API endpoints."""

    # File uploads
    MAX_UPLOAD_SIZE_MB = 50

    # API versions
    API_VERSION = "v1"


# System Constants
class SystemConstants:
    """Constants for system operations."""

    # Logging
    LOG_LEVEL_DEFAULT = "INFO"
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
