"""
PDF API Router - Merge, split, image to PDF, PDF to image, compression,
text to PDF and text annotation
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import TypeAdapter

from api.dependencies import get_pdf_service
from api.exceptions import safe_endpoint
from common.constants import PdfConstants
from common.enums import SplitMode
from schemas import (
    ImagesToPdfParams,
    PageCountResponse,
    PageSplit,
    PdfCompressParams,
    PdfCompressResponse,
    PdfResultResponse,
    PdfToImagesParams,
    RangeSplit,
    TextAnnotation,
    TextToPdfRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_annotations_adapter = TypeAdapter(List[TextAnnotation])


async def _read(file: UploadFile):
    return await file.read(), file.content_type, file.filename


@router.post("/page-count")
@safe_endpoint
async def page_count(
    file: UploadFile = File(...), pdf_service=Depends(get_pdf_service)
) -> PageCountResponse:
    """Count the pages of a PDF"""
    upload = await _read(file)
    return await run_in_threadpool(pdf_service.page_count, upload)


@router.post("/{session_id}/merge")
@safe_endpoint
async def merge_pdfs(
    session_id: str,
    files: List[UploadFile] = File(...),
    pdf_service=Depends(get_pdf_service),
) -> PdfResultResponse:
    """Merge PDFs in upload order"""
    uploads = [await _read(file) for file in files]
    return await run_in_threadpool(pdf_service.merge, session_id, uploads)


@router.post("/{session_id}/split")
@safe_endpoint
async def split_pdf(
    session_id: str,
    file: UploadFile = File(...),
    mode: SplitMode = Form(SplitMode.PAGES),
    ranges: Optional[str] = Form(None),
    pdf_service=Depends(get_pdf_service),
) -> PdfResultResponse:
    """
    Split a PDF.

    mode=pages gives one document per page; mode=ranges takes ranges such
    as "1-3, 5, 7-10".
    """
    plan = RangeSplit(ranges=ranges or "") if mode is SplitMode.RANGES else PageSplit()
    upload = await _read(file)
    return await run_in_threadpool(pdf_service.split, session_id, upload, plan)


@router.post("/{session_id}/images-to-pdf")
@safe_endpoint
async def images_to_pdf(
    session_id: str,
    files: List[UploadFile] = File(...),
    page_size: str = Form(PdfConstants.DEFAULT_PAGE_SIZE),
    orientation: str = Form("portrait"),
    layout: str = Form("fit"),
    margin: float = Form(PdfConstants.DEFAULT_IMAGE_MARGIN),
    title: Optional[str] = Form(None),
    pdf_service=Depends(get_pdf_service),
) -> PdfResultResponse:
    """Build a PDF with one image per page"""
    params = ImagesToPdfParams(
        page_size=page_size, orientation=orientation, layout=layout, margin=margin, title=title
    )
    uploads = [await _read(file) for file in files]
    return await run_in_threadpool(pdf_service.images_to_pdf, session_id, uploads, params)


@router.post("/{session_id}/to-images")
@safe_endpoint
async def pdf_to_images(
    session_id: str,
    file: UploadFile = File(...),
    format: str = Form("png"),
    quality: str = Form(PdfConstants.DEFAULT_RENDER_PRESET),
    pages: str = Form("all"),
    pdf_service=Depends(get_pdf_service),
) -> PdfResultResponse:
    """Render PDF pages to PNG, JPEG or WebP images"""
    params = PdfToImagesParams(format=format, quality=quality, pages=pages)
    upload = await _read(file)
    return await run_in_threadpool(pdf_service.pdf_to_images, session_id, upload, params)


@router.post("/{session_id}/compress")
@safe_endpoint
async def compress_pdf(
    session_id: str,
    file: UploadFile = File(...),
    level: str = Form("medium"),
    pdf_service=Depends(get_pdf_service),
) -> PdfCompressResponse:
    """Compress a PDF (low, medium, high or maximum)"""
    params = PdfCompressParams(level=level)
    upload = await _read(file)
    return await run_in_threadpool(pdf_service.compress, session_id, upload, params)


@router.post("/{session_id}/text-to-pdf")
@safe_endpoint
async def text_to_pdf(
    session_id: str, request: TextToPdfRequest, pdf_service=Depends(get_pdf_service)
) -> PdfResultResponse:
    """Build a PDF from plain text with an optional bold title"""
    return await run_in_threadpool(pdf_service.text_to_pdf, session_id, request.params)


@router.post("/{session_id}/annotate")
@safe_endpoint
async def annotate_pdf(
    session_id: str,
    file: UploadFile = File(...),
    annotations: str = Form("[]"),
    pdf_service=Depends(get_pdf_service),
) -> PdfResultResponse:
    """
    Draw text onto a PDF.

    annotations is a JSON list of {text, x, y, font_size, color, page}
    objects; x and y are the text baseline in points from the top-left.
    """
    parsed = _annotations_adapter.validate_json(annotations)
    upload = await _read(file)
    return await run_in_threadpool(pdf_service.annotate, session_id, upload, parsed)
