"""
Session API Router - Tool session lifecycle and file uploads
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from api.dependencies import get_image_service, get_session_manager
from api.exceptions import SessionNotFoundException, StorageException, safe_endpoint
from schemas import SessionCreateRequest, SessionInfo, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
@safe_endpoint
async def create_session(
    request: SessionCreateRequest, session_manager=Depends(get_session_manager)
) -> SessionInfo:
    """Open a session for a tool"""
    try:
        session = session_manager.create_session(request.tool)
    except MemoryError as e:
        raise StorageException("create_session", str(e))
    return SessionInfo(**session.to_dict())


@router.get("/{session_id}")
@safe_endpoint
async def get_session(session_id: str, session_manager=Depends(get_session_manager)) -> SessionInfo:
    """Get session state"""
    session = session_manager.get_session(session_id)
    if session is None:
        raise SessionNotFoundException(session_id)
    return SessionInfo(**session.to_dict())


@router.delete("/{session_id}")
@safe_endpoint
async def close_session(session_id: str, session_manager=Depends(get_session_manager)) -> dict:
    """Close a session and release every file it owns"""
    if not session_manager.close_session(session_id):
        raise SessionNotFoundException(session_id)
    return {"success": True, "session_id": session_id}


@router.post("/{session_id}/source")
@safe_endpoint
async def upload_source(
    session_id: str, file: UploadFile = File(...), image_service=Depends(get_image_service)
) -> UploadResponse:
    """
    Upload the image a tool works on.

    Replaces the previous source; its preview, overlay and results are
    released.
    """
    contents = await file.read()
    return await run_in_threadpool(
        image_service.load_source, session_id, contents, file.content_type, file.filename
    )


@router.post("/{session_id}/overlay")
@safe_endpoint
async def upload_overlay(
    session_id: str, file: UploadFile = File(...), image_service=Depends(get_image_service)
) -> UploadResponse:
    """Upload the watermark image"""
    contents = await file.read()
    return await run_in_threadpool(
        image_service.load_overlay, session_id, contents, file.content_type, file.filename
    )
