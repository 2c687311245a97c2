"""
PDF Service - Business logic for the PDF tools.

PDF operations receive their input files with each request. Produced
documents and images are registered as the session's results.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple, Union

from common.base import OutputFile
from common.constants import APIConstants, PdfConstants
from core.image import format_file_size, resolve_mime_type, validate_image_type
from core.image.codec import validate_pdf_type
from core.pdf import (
    annotate_pdf,
    compress_pdf,
    compressed_filename,
    compression_ratio,
    count_pages,
    document_filename,
    edited_filename,
    images_to_pdf,
    merge_pdfs,
    pdf_to_images,
    split_pdf,
    text_document_filename,
    text_to_pdf,
)
from core.session_manager import SessionManager
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
    TextToPdfParams,
)
from services.base import BaseService, timer

logger = logging.getLogger(__name__)

# Uploaded file: (contents, declared content type, file name)
Upload = Tuple[bytes, Optional[str], Optional[str]]


class PdfService(BaseService):
    """Service for merging, splitting, building, rendering and annotating PDFs."""

    def __init__(
        self,
        session_manager: SessionManager,
        max_upload_mb: int = APIConstants.MAX_UPLOAD_SIZE_MB,
        max_files: int = PdfConstants.DEFAULT_MAX_FILES,
    ):
        super().__init__(session_manager, max_upload_mb)
        self.max_files = max_files

    def _check_file_count(self, uploads: Sequence[Upload]) -> None:
        if not uploads:
            raise ValueError("No files provided")
        if len(uploads) > self.max_files:
            raise ValueError(f"Too many files: {len(uploads)} (limit {self.max_files})")

    def _check_pdf(self, upload: Upload, operation: str) -> bytes:
        data, content_type, filename = upload
        self.check_upload_size(data, filename)
        with self.translate_errors(operation, filename):
            validate_pdf_type(resolve_mime_type(content_type, filename))
        return data

    def _execute_pdf(
        self,
        session_id: str,
        operation: str,
        pdf_func: Callable[[], Tuple[List[OutputFile], Optional[int]]],
        filename: Optional[str] = None,
    ) -> Tuple[PdfResultResponse, List[OutputFile]]:
        """
        Run a PDF operation under the session's processing guard and
        register its outputs.

        Returns:
            Tuple of (response, outputs)
        """
        with timer() as t:
            with self.processing(session_id):
                with self.translate_errors(operation, filename):
                    outputs, page_count = pdf_func()
                files = self.register_results(session_id, outputs)

        logger.info(f"{operation}: {len(outputs)} file(s) in {t['ms']}ms")
        response = PdfResultResponse(
            session_id=session_id,
            operation=operation,
            files=files,
            page_count=page_count,
            processing_time_ms=t["ms"],
        )
        return response, outputs

    def merge(self, session_id: str, uploads: Sequence[Upload]) -> PdfResultResponse:
        """
        Merge PDFs in upload order.

        Raises:
            InvalidInputTypeException: If any upload is not a PDF
            DecodeFailureException: If any PDF cannot be read
        """
        self._check_file_count(uploads)
        documents = [self._check_pdf(upload, "merge") for upload in uploads]

        def run():
            merged = merge_pdfs(documents)
            output = OutputFile(
                data=merged,
                filename=PdfConstants.MERGED_FILENAME,
                mime_type=PdfConstants.MIME_TYPE,
            )
            return [output], count_pages(merged)

        response, _ = self._execute_pdf(session_id, "merge", run)
        return response

    def split(
        self, session_id: str, upload: Upload, plan: Union[PageSplit, RangeSplit]
    ) -> PdfResultResponse:
        """
        Split a PDF into one document per page or per page range.

        Raises:
            ValueError: If a range plan contains no valid ranges
        """
        data = self._check_pdf(upload, "split")
        filename = upload[2]

        def run():
            return split_pdf(data, plan, filename), count_pages(data)

        response, _ = self._execute_pdf(session_id, "split", run, filename)
        return response

    def images_to_pdf(
        self, session_id: str, uploads: Sequence[Upload], params: ImagesToPdfParams
    ) -> PdfResultResponse:
        """
        Build a PDF with one uploaded image per page.

        Images that cannot be decoded are skipped.
        """
        self._check_file_count(uploads)
        images = []
        for data, content_type, filename in uploads:
            self.check_upload_size(data, filename)
            with self.translate_errors("images-to-pdf", filename):
                image_format = validate_image_type(resolve_mime_type(content_type, filename))
            images.append((data, image_format.mime_type, filename or "image"))

        def run():
            document = images_to_pdf(images, params)
            output = OutputFile(
                data=document,
                filename=document_filename(params.title),
                mime_type=PdfConstants.MIME_TYPE,
            )
            return [output], count_pages(document)

        response, _ = self._execute_pdf(session_id, "images-to-pdf", run)
        return response

    def pdf_to_images(
        self, session_id: str, upload: Upload, params: PdfToImagesParams
    ) -> PdfResultResponse:
        """Render the selected pages of a PDF to images."""
        data = self._check_pdf(upload, "pdf-to-images")
        filename = upload[2]

        def run():
            return pdf_to_images(data, params, filename), count_pages(data)

        response, _ = self._execute_pdf(session_id, "pdf-to-images", run, filename)
        return response

    def compress(
        self, session_id: str, upload: Upload, params: PdfCompressParams
    ) -> PdfCompressResponse:
        """
        Re-save a PDF with the compression preset of params.level.

        Returns:
            PdfCompressResponse with sizes and the percentage saved
        """
        data = self._check_pdf(upload, "compress")
        filename = upload[2]

        def run():
            compressed = compress_pdf(data, params.level)
            output = OutputFile(
                data=compressed,
                filename=compressed_filename(filename),
                mime_type=PdfConstants.MIME_TYPE,
            )
            return [output], count_pages(compressed)

        response, outputs = self._execute_pdf(session_id, "compress", run, filename)
        compressed_size = outputs[0].size

        return PdfCompressResponse(
            **response.model_dump(),
            original_size=len(data),
            original_size_formatted=format_file_size(len(data)),
            compressed_size=compressed_size,
            compressed_size_formatted=format_file_size(compressed_size),
            compression_ratio=compression_ratio(len(data), compressed_size),
        )

    def text_to_pdf(self, session_id: str, params: TextToPdfParams) -> PdfResultResponse:
        """
        Build a PDF from plain text with an optional title.

        Raises:
            ValueError: If the text is blank
        """

        def run():
            document = text_to_pdf(params)
            output = OutputFile(
                data=document,
                filename=text_document_filename(params.title),
                mime_type=PdfConstants.MIME_TYPE,
            )
            return [output], count_pages(document)

        response, _ = self._execute_pdf(session_id, "text-to-pdf", run)
        return response

    def annotate(
        self, session_id: str, upload: Upload, annotations: Sequence[TextAnnotation]
    ) -> PdfResultResponse:
        """Draw text annotations onto an uploaded PDF."""
        data = self._check_pdf(upload, "annotate")
        filename = upload[2]

        def run():
            edited = annotate_pdf(data, annotations)
            output = OutputFile(
                data=edited, filename=edited_filename(filename), mime_type=PdfConstants.MIME_TYPE
            )
            return [output], count_pages(edited)

        response, _ = self._execute_pdf(session_id, "annotate", run, filename)
        return response

    def page_count(self, upload: Upload) -> PageCountResponse:
        """Count the pages of an uploaded PDF without touching any session."""
        data, _, filename = upload
        data = self._check_pdf(upload, "page-count")
        with self.translate_errors("page-count", filename):
            pages = count_pages(data)

        return PageCountResponse(
            filename=filename or "document.pdf",
            page_count=pages,
            size=len(data),
            size_formatted=format_file_size(len(data)),
        )
