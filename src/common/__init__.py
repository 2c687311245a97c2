"""
Common package - fundamental types without external dependencies.

This package contains basic types that are used throughout the system:
- Enums (ImageFormat, WatermarkPosition, PageSize, etc.)
- Constants (ImageConstants, PaletteConstants, PdfConstants, etc.)
- Base models (Region, OutputFile)

IMPORTANT: This package must NOT import from any other project packages
(schemas, core, services, api) to avoid circular dependencies.
"""

# Export base models
from common.base import OutputFile, Region

# Export all constants
from common.constants import (
    APIConstants,
    CropConstants,
    ImageConstants,
    MaskConstants,
    PaletteConstants,
    PdfConstants,
    RotationConstants,
    SessionConstants,
    SystemConstants,
    WatermarkConstants,
)

# Export all enums
from common.enums import (
    CompressionLevel,
    ImageFormat,
    Orientation,
    PageLayout,
    PageSize,
    PaletteExportFormat,
    RenderQuality,
    SplitMode,
    ToolName,
    WatermarkPosition,
)

__all__ = [
    # Enums
    "CompressionLevel",
    "ImageFormat",
    "Orientation",
    "PageLayout",
    "PageSize",
    "PaletteExportFormat",
    "RenderQuality",
    "SplitMode",
    "ToolName",
    "WatermarkPosition",
    # Constants
    "APIConstants",
    "CropConstants",
    "ImageConstants",
    "MaskConstants",
    "PaletteConstants",
    "PdfConstants",
    "RotationConstants",
    "SessionConstants",
    "SystemConstants",
    "WatermarkConstants",
    # Base models
    "OutputFile",
    "Region",
]
