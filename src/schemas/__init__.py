"""
Schemas Package

This package contains all Pydantic schemas for data validation and serialization,
organized by domain for better maintainability.

These schemas are shared across all application layers:
- API (routers, dependencies)
- Services (business logic)
- Core (tool engines)
"""

from common.base import OutputFile, Region

# Tool parameters (centralized)
from schemas.params import (
    CompressParams,
    ConvertParams,
    CropParams,
    ImagesToPdfParams,
    ImageWatermarkParams,
    PageSplit,
    PaletteParams,
    PdfCompressParams,
    PdfToImagesParams,
    RangeSplit,
    ResizeParams,
    RotateParams,
    SplitPlan,
    TextAnnotation,
    TextToPdfParams,
    TextWatermarkParams,
    WatermarkParams,
)

# Base schemas
from .base import BaseToolParams

# Common models
from .common import FileResult, Size

# Image processing models
from .image import (
    CompressRequest,
    ConvertRequest,
    CropRequest,
    ImageResultResponse,
    ResizeRequest,
    RotateRequest,
    WatermarkRequest,
)

# Palette models
from .palette import (
    PaletteColor,
    PaletteExportRequest,
    PaletteExtractRequest,
    PaletteResponse,
    PaletteResult,
)

# PDF models
from .pdf import PageCountResponse, PdfCompressResponse, PdfResultResponse, TextToPdfRequest

# Session models
from .session import SessionCreateRequest, SessionInfo, UploadResponse

# System models
from .system import SystemStatus

# Explicitly declare public API for re-export
__all__ = [
    # Base types
    "OutputFile",
    "Region",
    "BaseToolParams",
    # Common models
    "FileResult",
    "Size",
    # Params
    "CompressParams",
    "ConvertParams",
    "CropParams",
    "ImagesToPdfParams",
    "ImageWatermarkParams",
    "PageSplit",
    "PaletteParams",
    "PdfCompressParams",
    "PdfToImagesParams",
    "RangeSplit",
    "ResizeParams",
    "RotateParams",
    "SplitPlan",
    "TextAnnotation",
    "TextToPdfParams",
    "TextWatermarkParams",
    "WatermarkParams",
    # Image models
    "CompressRequest",
    "ConvertRequest",
    "CropRequest",
    "ImageResultResponse",
    "ResizeRequest",
    "RotateRequest",
    "WatermarkRequest",
    # Palette models
    "PaletteColor",
    "PaletteExportRequest",
    "PaletteExtractRequest",
    "PaletteResponse",
    "PaletteResult",
    # PDF models
    "PageCountResponse",
    "PdfCompressResponse",
    "PdfResultResponse",
    "TextToPdfRequest",
    # Session models
    "SessionCreateRequest",
    "SessionInfo",
    "UploadResponse",
    # System models
    "SystemStatus",
]
