"""
Service Layer - Business logic layer between routers and the core engines.

Services look up sessions, guard them against concurrent operations,
translate core errors into API exceptions and register produced files.
"""

from .image_service import ImageService
from .palette_service import PaletteService
from .pdf_service import PdfService

__all__ = ["ImageService", "PaletteService", "PdfService"]
