"""
Blob API Router - Downloads of uploaded and produced files
"""

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from api.dependencies import get_session_manager
from api.exceptions import BlobNotFoundException, safe_endpoint

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{handle}")
@safe_endpoint
async def download_blob(handle: str, session_manager=Depends(get_session_manager)) -> Response:
    """
    Download the file behind a handle.

    Handles stay valid until the owning session replaces or closes them.
    """
    entry = session_manager.blobs.get(handle)
    if entry is None:
        raise BlobNotFoundException(handle)

    return Response(
        content=entry.data,
        media_type=entry.mime_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(entry.filename)}"
        },
    )
