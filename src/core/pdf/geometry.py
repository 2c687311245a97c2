"""
PDF page geometry and page range parsing.

All measurements are in PDF points (1/72 inch). Placement rectangles use
PDF coordinates with the origin at the bottom-left of the page.
"""

import logging
import re
from typing import List, Optional, Tuple, Union

from common.constants import PdfConstants
from common.enums import Orientation, PageLayout, PageSize

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

Rect = Tuple[float, float, float, float]


def page_dimensions(
    page_size: Union[PageSize, str], orientation: Union[Orientation, str] = Orientation.PORTRAIT
) -> Tuple[float, float]:
    """
    Page width and height in points.

    Unknown page sizes fall back to A4. Landscape swaps the dimensions.
    """
    key = page_size.value if isinstance(page_size, PageSize) else str(page_size).lower()
    width, height = PdfConstants.PAGE_SIZES.get(
        key, PdfConstants.PAGE_SIZES[PdfConstants.DEFAULT_PAGE_SIZE]
    )
    if Orientation(orientation) is Orientation.LANDSCAPE:
        return float(height), float(width)
    return float(width), float(height)


def content_box(page_width: float, page_height: float, margin: float = 0) -> Rect:
    """
    Area inside the page margins.

    The margin is clamped so the box keeps at least one point per side.

    Returns:
        (x, y, width, height)
    """
    max_margin = max(0.0, min(page_width, page_height) / 2 - 1)
    margin = min(max(0.0, float(margin)), max_margin)
    return margin, margin, page_width - 2 * margin, page_height - 2 * margin


def place_image(
    page_width: float,
    page_height: float,
    image_width: float,
    image_height: float,
    layout: Union[PageLayout, str] = PageLayout.FIT,
    margin: float = 0,
) -> Rect:
    """
    Compute where an image is drawn on a page.

    Args:
        page_width: Page width in points
        page_height: Page height in points
        image_width: Image width (1 px = 1 pt)
        image_height: Image height
        layout: fit (scale to fit, centred), fill (stretch over the box)
            or original (unscaled, centred, may overflow the page)
        margin: Margin around the content box

    Returns:
        (x, y, width, height) with the origin at the bottom-left
    """
    box_x, box_y, box_w, box_h = content_box(page_width, page_height, margin)
    layout = PageLayout(layout)

    if layout is PageLayout.FILL:
        return box_x, box_y, box_w, box_h

    if layout is PageLayout.FIT:
        scale = min(box_w / image_width, box_h / image_height)
        draw_w, draw_h = image_width * scale, image_height * scale
    else:
        draw_w, draw_h = float(image_width), float(image_height)

    return box_x + (box_w - draw_w) / 2, box_y + (box_h - draw_h) / 2, draw_w, draw_h


def _parse_leading_int(text: str) -> Optional[int]:
    match = _LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else None


def parse_page_ranges(text: str, total_pages: int) -> List[Tuple[int, int]]:
    """
    Parse a range list such as "1-3, 5, 7-10".

    Parts are 1-based and inclusive; parts that are malformed, reversed or
    outside 1..total_pages are skipped.

    Returns:
        Zero-based inclusive (start, end) tuples in input order
    """
    ranges: List[Tuple[int, int]] = []

    for part in (p.strip() for p in text.split(",")):
        if "-" in part:
            bounds = part.split("-")
            start, end = _parse_leading_int(bounds[0]), _parse_leading_int(bounds[1])
            if start is not None and end is not None and 1 <= start <= end <= total_pages:
                ranges.append((start - 1, end - 1))
        else:
            page = _parse_leading_int(part)
            if page is not None and 1 <= page <= total_pages:
                ranges.append((page - 1, page - 1))

    if not ranges:
        logger.debug(f"No valid page ranges in '{text}' for {total_pages} pages")
    return ranges


def parse_page_selection(text: str, total_pages: int) -> List[int]:
    """
    Parse a page list for rasterisation.

    Returns:
        Sorted unique 1-based page numbers; "all" selects every page
    """
    if text.strip().lower() == "all":
        return list(range(1, total_pages + 1))

    pages = set()
    for start, end in parse_page_ranges(text, total_pages):
        pages.update(range(start + 1, end + 2))
    return sorted(pages)
