"""
Shared FastAPI dependencies for File Tools.
Centralizes common dependencies to eliminate code duplication.
"""

import logging

from fastapi import Depends, HTTPException, Request

from config import Settings, get_settings
from core.session_manager import SessionManager
from services.image_service import ImageService
from services.palette_service import PaletteService
from services.pdf_service import PdfService

logger = logging.getLogger(__name__)


class Managers:
    """Container for all manager instances."""

    def __init__(self, session_manager: SessionManager):
        self.session_manager = session_manager


def get_managers(request: Request) -> Managers:
    """
    Get all manager instances from app state.

    Args:
        request: FastAPI request object

    Returns:
        Managers container with all manager instances

    Raises:
        HTTPException: If managers not initialized
    """
    try:
        return Managers(session_manager=request.app.state.session_manager)
    except AttributeError as e:
        logger.error(f"Managers not initialized in app state: {e}")
        raise HTTPException(
            status_code=500, detail="Internal server error: Managers not initialized"
        )


def get_session_manager(managers: Managers = Depends(get_managers)) -> SessionManager:
    """Get SessionManager instance."""
    return managers.session_manager


def get_config() -> Settings:
    """Get application settings."""
    return get_settings()


# Service layer dependencies
def get_image_service(
    session_manager: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_config),
) -> ImageService:
    """
    Get image service instance.

    Args:
        session_manager: Session manager dependency
        settings: Application settings

    Returns:
        ImageService instance
    """
    return ImageService(
        session_manager=session_manager,
        max_upload_mb=settings.api.max_upload_size_mb,
        thumbnail_width=settings.image.thumbnail_width,
    )


def get_palette_service(
    session_manager: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_config),
) -> PaletteService:
    """Get palette service instance."""
    return PaletteService(
        session_manager=session_manager,
        max_upload_mb=settings.api.max_upload_size_mb,
        sample_size=settings.palette.sample_size,
    )


def get_pdf_service(
    session_manager: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_config),
) -> PdfService:
    """Get PDF service instance."""
    return PdfService(
        session_manager=session_manager,
        max_upload_mb=settings.api.max_upload_size_mb,
        max_files=settings.pdf.max_files,
    )
