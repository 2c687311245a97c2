"""
PDF document operations.

Page-graph operations (count, merge, split) use pypdf; rendering, image
embedding, text layout and re-saving use PyMuPDF.
"""

import io
import logging
from typing import List, Optional, Sequence, Tuple, Union

import fitz  # PyMuPDF
import numpy as np
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError

from common.base import OutputFile
from common.constants import PdfConstants
from common.enums import CompressionLevel, ImageFormat, PageLayout
from core.errors import DecodeFailureError, EncodeFailureError
from core.image.codec import decode_image, encode_image, normalize_mime_type
from core.image.palette import hex_to_rgb
from core.pdf.geometry import page_dimensions, parse_page_ranges, parse_page_selection, place_image
from core.raster import Raster
from schemas.params import (
    ImagesToPdfParams,
    PageSplit,
    PdfToImagesParams,
    RangeSplit,
    TextAnnotation,
    TextToPdfParams,
)

logger = logging.getLogger(__name__)

# (data, mime_type, filename)
ImageInput = Tuple[bytes, str, str]


def _open_reader(data: bytes) -> PdfReader:
    if not data:
        raise DecodeFailureError("Empty PDF data")
    try:
        reader = PdfReader(io.BytesIO(data))
        # Force the page tree to load so corrupt files fail here
        len(reader.pages)
        return reader
    except (PdfReadError, ValueError, KeyError, OSError) as e:
        raise DecodeFailureError(f"Failed to read PDF: {e}") from e


def _open_document(data: bytes) -> fitz.Document:
    if not data:
        raise DecodeFailureError("Empty PDF data")
    try:
        return fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise DecodeFailureError(f"Failed to open PDF: {e}") from e


def _write(writer: PdfWriter) -> bytes:
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def pdf_stem(filename: Optional[str]) -> str:
    """File name without a trailing .pdf (case-insensitive)."""
    name = filename or "document"
    return name[:-4] if name.lower().endswith(".pdf") else name


def count_pages(data: bytes) -> int:
    """Number of pages in a PDF."""
    return len(_open_reader(data).pages)


def merge_pdfs(documents: Sequence[bytes]) -> bytes:
    """
    Concatenate PDFs in order.

    Args:
        documents: PDF file contents, in merge order

    Returns:
        Merged PDF bytes

    Raises:
        ValueError: If no documents are given
        DecodeFailureError: If any document cannot be read
    """
    if not documents:
        raise ValueError("No PDF files provided")

    writer = PdfWriter()
    total = 0
    for data in documents:
        reader = _open_reader(data)
        for page in reader.pages:
            writer.add_page(page)
            total += 1

    logger.debug(f"Merged {len(documents)} documents into {total} pages")
    return _write(writer)


def split_pdf(
    data: bytes, plan: Union[PageSplit, RangeSplit], filename: Optional[str] = None
) -> List[OutputFile]:
    """
    Split a PDF into several documents.

    PageSplit produces one file per page; RangeSplit produces one file per
    valid range in the order given.

    Raises:
        ValueError: If a range plan contains no valid ranges
    """
    reader = _open_reader(data)
    total_pages = len(reader.pages)
    stem = pdf_stem(filename)

    if isinstance(plan, RangeSplit):
        ranges = parse_page_ranges(plan.ranges, total_pages)
        if not ranges:
            raise ValueError(
                f"No valid page ranges in '{plan.ranges}' (document has {total_pages} pages)"
            )
    else:
        ranges = [(i, i) for i in range(total_pages)]

    outputs = []
    for start, end in ranges:
        writer = PdfWriter()
        for index in range(start, end + 1):
            writer.add_page(reader.pages[index])

        if isinstance(plan, RangeSplit):
            name = f"{stem}_pages_{start + 1}-{end + 1}.pdf"
        else:
            name = f"{stem}_page_{start + 1}.pdf"
        outputs.append(
            OutputFile(data=_write(writer), filename=name, mime_type=PdfConstants.MIME_TYPE)
        )

    logger.debug(f"Split {total_pages} pages into {len(outputs)} documents")
    return outputs


def _page_rect(
    page_width: float, page_height: float, placement: Tuple[float, float, float, float]
) -> fitz.Rect:
    """Convert a bottom-left placement into a PyMuPDF top-left rectangle."""
    x, y, width, height = placement
    top = page_height - y - height
    return fitz.Rect(x, top, x + width, top + height)


def _visible_part(
    raster: Raster, rect: fitz.Rect, page_rect: fitz.Rect
) -> Tuple[Optional[Raster], fitz.Rect]:
    """Crop an image whose placement overflows the page to its visible part."""
    visible = fitz.Rect(rect) & page_rect
    if visible == rect:
        return None, rect

    scale_x = raster.width / rect.width
    scale_y = raster.height / rect.height
    x0 = int(round((visible.x0 - rect.x0) * scale_x))
    y0 = int(round((visible.y0 - rect.y0) * scale_y))
    x1 = max(x0 + 1, int(round((visible.x1 - rect.x0) * scale_x)))
    y1 = max(y0 + 1, int(round((visible.y1 - rect.y0) * scale_y)))
    cropped = Raster(raster.pixels[y0:y1, x0:x1].copy())
    return cropped, visible


def images_to_pdf(images: Sequence[ImageInput], params: ImagesToPdfParams) -> bytes:
    """
    Build a PDF with one image per page.

    JPEG and PNG files are embedded as-is; other formats are re-encoded
    as PNG. Images that fail to decode are skipped.

    Raises:
        ValueError: If no images are given
        DecodeFailureError: If none of the images could be decoded
    """
    if not images:
        raise ValueError("No image files provided")

    page_width, page_height = page_dimensions(params.page_size, params.orientation)
    doc = fitz.open()

    try:
        for data, mime_type, name in images:
            try:
                raster = decode_image(data, mime_type)
            except DecodeFailureError as e:
                logger.warning(f"Skipping image {name}: {e}")
                continue

            placement = place_image(
                page_width, page_height, raster.width, raster.height, params.layout, params.margin
            )
            page = doc.new_page(width=page_width, height=page_height)
            rect = _page_rect(page_width, page_height, placement)

            cropped = None
            if params.layout is PageLayout.ORIGINAL:
                cropped, rect = _visible_part(raster, rect, page.rect)

            if cropped is not None:
                stream = encode_image(cropped, ImageFormat.PNG)
            elif normalize_mime_type(mime_type) in ("image/jpeg", "image/png"):
                stream = data
            else:
                stream = encode_image(raster, ImageFormat.PNG)

            page.insert_image(rect, stream=stream, keep_proportion=False)

        if doc.page_count == 0:
            raise DecodeFailureError("None of the images could be decoded")

        doc.set_metadata(
            {
                "title": params.title or "",
                "creator": "Image to PDF Converter",
                "producer": "File Tools",
            }
        )
        output = doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()

    logger.debug(f"Created PDF with {len(images)} images, {len(output)} bytes")
    return output


def pdf_to_images(
    data: bytes, params: PdfToImagesParams, filename: Optional[str] = None
) -> List[OutputFile]:
    """
    Render PDF pages to images.

    Pages that fail to render are skipped.

    Raises:
        ValueError: If the page selection matches no pages
    """
    scale, quality = PdfConstants.RENDER_PRESETS[params.quality.value]
    stem = pdf_stem(filename)
    doc = _open_document(data)

    outputs = []
    try:
        pages = parse_page_selection(params.pages, doc.page_count)
        if not pages:
            raise ValueError(
                f"No valid pages in '{params.pages}' (document has {doc.page_count} pages)"
            )

        for page_number in pages:
            try:
                pix = doc.load_page(page_number - 1).get_pixmap(
                    matrix=fitz.Matrix(scale, scale), alpha=False
                )
            except RuntimeError as e:
                logger.warning(f"Skipping page {page_number}: {e}")
                continue

            pixels = np.frombuffer(pix.samples, dtype=np.uint8).reshape(
                pix.height, pix.stride
            )[:, : pix.width * pix.n].reshape(pix.height, pix.width, pix.n)
            encoded = encode_image(Raster.from_array(pixels[:, :, :3]), params.format, quality)
            outputs.append(
                OutputFile(
                    data=encoded,
                    filename=f"{stem}_page_{page_number}{params.format.extension}",
                    mime_type=params.format.mime_type,
                )
            )
    finally:
        doc.close()

    logger.debug(f"Rendered {len(outputs)} pages at scale {scale}")
    return outputs


def compress_pdf(data: bytes, level: CompressionLevel = CompressionLevel.MEDIUM) -> bytes:
    """
    Re-save a PDF with garbage collection and stream compression.

    Raises:
        EncodeFailureError: If the document cannot be written
    """
    options = PdfConstants.COMPRESSION_PRESETS[CompressionLevel(level).value]
    doc = _open_document(data)
    try:
        output = doc.tobytes(**options)
    except (RuntimeError, ValueError) as e:
        raise EncodeFailureError(f"Failed to write PDF: {e}") from e
    finally:
        doc.close()

    logger.debug(f"Compressed PDF {len(data)} -> {len(output)} bytes ({level})")
    return output


def compression_ratio(original_size: int, compressed_size: int) -> float:
    """Percentage saved, never negative."""
    if original_size <= 0:
        return 0.0
    return max(0.0, (original_size - compressed_size) / original_size * 100)


def compressed_filename(filename: Optional[str]) -> str:
    return f"{pdf_stem(filename)}_compressed.pdf"


def document_filename(title: Optional[str]) -> str:
    return f"{title or PdfConstants.DEFAULT_DOCUMENT_TITLE}.pdf"


def clamp_text_font_size(font_size: int) -> int:
    return max(
        PdfConstants.MIN_TEXT_FONT_SIZE, min(PdfConstants.MAX_TEXT_FONT_SIZE, int(font_size))
    )


def _fits(text: str, width: float, fontname: str, fontsize: float) -> bool:
    return fitz.get_text_length(text, fontname=fontname, fontsize=fontsize) <= width


def wrap_text(
    text: str, width: float, fontname: str = PdfConstants.BODY_FONT, fontsize: float = 12
) -> List[str]:
    """
    Word-wrap text to a line width in points.

    Newlines are kept as line breaks (blank lines included). Words wider
    than a whole line are broken between characters.
    """
    lines = []
    for paragraph in text.splitlines():
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if _fits(candidate, width, fontname, fontsize):
                current = candidate
                continue
            if current:
                lines.append(current)
            while len(word) > 1 and not _fits(word, width, fontname, fontsize):
                cut = len(word) - 1
                while cut > 1 and not _fits(word[:cut], width, fontname, fontsize):
                    cut -= 1
                lines.append(word[:cut])
                word = word[cut:]
            current = word
        lines.append(current)
    return lines


def text_to_pdf(params: TextToPdfParams) -> bytes:
    """
    Lay out plain text on portrait pages.

    The optional title is drawn in bold above the body. Body text wraps
    inside the side margins and continues on a new page when it reaches
    the bottom margin.

    Raises:
        ValueError: If the text is blank
    """
    if not params.text or not params.text.strip():
        raise ValueError("No text provided")

    mm = PdfConstants.MM_TO_POINTS
    page_width, page_height = page_dimensions(params.page_size)
    margin = PdfConstants.TEXT_MARGIN_MM * mm
    font_size = clamp_text_font_size(params.font_size)
    line_height = font_size * PdfConstants.LINE_HEIGHT_FACTOR
    lines = wrap_text(params.text, page_width - 2 * margin, PdfConstants.BODY_FONT, font_size)
    title = (params.title or "").strip()

    doc = fitz.open()
    try:
        page = doc.new_page(width=page_width, height=page_height)
        if title:
            page.insert_text(
                (margin, PdfConstants.TITLE_TOP_MM * mm),
                title,
                fontname=PdfConstants.TITLE_FONT,
                fontsize=PdfConstants.TITLE_FONT_SIZE,
            )
            y = PdfConstants.BODY_TOP_MM * mm
        else:
            y = PdfConstants.BODY_TOP_NO_TITLE_MM * mm

        for line in lines:
            if y > page_height - margin:
                page = doc.new_page(width=page_width, height=page_height)
                y = margin + font_size
            if line:
                page.insert_text(
                    (margin, y), line, fontname=PdfConstants.BODY_FONT, fontsize=font_size
                )
            y += line_height

        doc.set_metadata({"title": title, "creator": "PDF Generator", "producer": "File Tools"})
        output = doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()

    logger.debug(f"Generated PDF with {len(lines)} lines at {font_size}pt, {len(output)} bytes")
    return output


def annotate_pdf(data: bytes, annotations: Sequence[TextAnnotation]) -> bytes:
    """
    Draw text annotations onto an existing PDF.

    Annotation coordinates are the text baseline in points from the
    top-left corner of the page. Page numbers outside the document use
    the first page.

    Raises:
        DecodeFailureError: If the PDF cannot be opened or has no pages
        EncodeFailureError: If the document cannot be written
    """
    doc = _open_document(data)
    try:
        if doc.page_count == 0:
            raise DecodeFailureError("PDF has no pages")

        for annotation in annotations:
            index = annotation.page - 1
            if not 0 <= index < doc.page_count:
                index = 0
            r, g, b = hex_to_rgb(annotation.color)
            doc.load_page(index).insert_text(
                (annotation.x, annotation.y),
                annotation.text,
                fontname=PdfConstants.BODY_FONT,
                fontsize=annotation.font_size,
                color=(r / 255, g / 255, b / 255),
            )

        try:
            output = doc.tobytes(garbage=3, deflate=True)
        except (RuntimeError, ValueError) as e:
            raise EncodeFailureError(f"Failed to write PDF: {e}") from e
    finally:
        doc.close()

    logger.debug(f"Added {len(annotations)} annotations, {len(output)} bytes")
    return output


def text_document_filename(title: Optional[str]) -> str:
    return f"{(title or '').strip() or PdfConstants.DEFAULT_TEXT_TITLE}.pdf"


def edited_filename(filename: Optional[str]) -> str:
    return f"{pdf_stem(filename)}_edited.pdf"
