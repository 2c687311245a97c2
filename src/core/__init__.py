"""
Core modules for File Tools
"""

from .raster import Raster
from .session_manager import BlobRegistry, SessionManager, ToolSession

__all__ = [
    "BlobRegistry",
    "Raster",
    "SessionManager",
    "ToolSession",
]
