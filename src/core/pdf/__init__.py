"""
PDF tools.

- geometry: Page sizes, image placement and page range parsing
- documents: Merge, split, image embedding, rasterisation, compression,
  text layout and text annotation
"""

from core.pdf.documents import (
    annotate_pdf,
    clamp_text_font_size,
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
    wrap_text,
)
from core.pdf.geometry import (
    content_box,
    page_dimensions,
    parse_page_ranges,
    parse_page_selection,
    place_image,
)

__all__ = [
    # Documents
    "annotate_pdf",
    "clamp_text_font_size",
    "compress_pdf",
    "compressed_filename",
    "compression_ratio",
    "count_pages",
    "document_filename",
    "edited_filename",
    "images_to_pdf",
    "merge_pdfs",
    "pdf_to_images",
    "split_pdf",
    "text_document_filename",
    "text_to_pdf",
    "wrap_text",
    # Geometry
    "content_box",
    "page_dimensions",
    "parse_page_ranges",
    "parse_page_selection",
    "place_image",
]
