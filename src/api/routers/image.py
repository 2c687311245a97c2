"""
Image API Router - Image tool operations
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from api.dependencies import get_image_service
from api.exceptions import safe_endpoint
from schemas import (
    CompressRequest,
    ConvertRequest,
    CropRequest,
    ImageResultResponse,
    ResizeRequest,
    RotateRequest,
    WatermarkRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{session_id}/resize")
@safe_endpoint
async def resize_image(
    session_id: str, request: ResizeRequest, image_service=Depends(get_image_service)
) -> ImageResultResponse:
    """
    Resize the session image.

    With maintain_aspect_ratio the dimension named by driver wins and the
    other one is recomputed.
    """
    return await run_in_threadpool(image_service.resize, session_id, request.params)


@router.post("/{session_id}/crop")
@safe_endpoint
async def crop_image(
    session_id: str, request: CropRequest, image_service=Depends(get_image_service)
) -> ImageResultResponse:
    """Crop the session image (the region is clamped to the image)"""
    return await run_in_threadpool(image_service.crop, session_id, request.params)


@router.post("/{session_id}/rotate")
@safe_endpoint
async def rotate_image(
    session_id: str, request: RotateRequest, image_service=Depends(get_image_service)
) -> ImageResultResponse:
    """Rotate and/or flip the session image"""
    return await run_in_threadpool(image_service.rotate, session_id, request.params)


@router.post("/{session_id}/watermark")
@safe_endpoint
async def watermark_image(
    session_id: str, request: WatermarkRequest, image_service=Depends(get_image_service)
) -> ImageResultResponse:
    """Apply a text watermark or the session's overlay image as watermark"""
    return await run_in_threadpool(image_service.watermark, session_id, request.params)


@router.post("/{session_id}/remove-background")
@safe_endpoint
async def remove_background(
    session_id: str, image_service=Depends(get_image_service)
) -> ImageResultResponse:
    """Make the background transparent (edge-mask heuristic)"""
    return await run_in_threadpool(image_service.remove_background, session_id)


@router.post("/{session_id}/convert")
@safe_endpoint
async def convert_image(
    session_id: str, request: ConvertRequest, image_service=Depends(get_image_service)
) -> ImageResultResponse:
    """Convert the session image to another format"""
    return await run_in_threadpool(image_service.convert, session_id, request.params)


@router.post("/{session_id}/compress")
@safe_endpoint
async def compress_image(
    session_id: str, request: CompressRequest, image_service=Depends(get_image_service)
) -> ImageResultResponse:
    """Compress the session image, keeping the original if it is already smaller"""
    return await run_in_threadpool(image_service.compress, session_id, request.params)
