"""
Palette API Router - Dominant color extraction and export
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from api.dependencies import get_palette_service
from api.exceptions import safe_endpoint
from schemas import FileResult, PaletteExportRequest, PaletteExtractRequest, PaletteResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{session_id}/extract")
@safe_endpoint
async def extract_palette(
    session_id: str, request: PaletteExtractRequest, palette_service=Depends(get_palette_service)
) -> PaletteResponse:
    """Extract the dominant colors of the session image (3 to 10 colors)"""
    return await run_in_threadpool(palette_service.extract, session_id, request.params)


@router.post("/{session_id}/export")
@safe_endpoint
async def export_palette(
    session_id: str, request: PaletteExportRequest, palette_service=Depends(get_palette_service)
) -> FileResult:
    """Export the palette as HTML, CSS or JSON; download it via /api/blob/{handle}"""
    return await run_in_threadpool(
        palette_service.export, session_id, request.format, request.params
    )
