"""
Dominant color extraction.

Samples the image at a fixed size, groups similar colors into 10-step
buckets and returns the most frequent buckets. Also provides color
helpers and palette export renderers.
"""

import html
import json
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from common.constants import PaletteConstants
from core.raster import Raster
from schemas.palette import PaletteColor, PaletteResult

logger = logging.getLogger(__name__)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Format a color as lowercase #rrggbb."""
    return f"#{int(r):02x}{int(g):02x}{int(b):02x}"


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    """
    Parse "#rrggbb" or "#rgb".

    Raises:
        ValueError: If the string is not a hex color
    """
    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Invalid hex color: {value}")
    try:
        return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
    except ValueError:
        raise ValueError(f"Invalid hex color: {value}") from None


def contrast_label_color(r: int, g: int, b: int) -> str:
    """
    Pick a readable label color for a swatch.

    Luminance above 0.5 gets black text, everything else (including
    exactly 0.5) gets white.
    """
    luminance = (
        PaletteConstants.LUMA_RED * r
        + PaletteConstants.LUMA_GREEN * g
        + PaletteConstants.LUMA_BLUE * b
    ) / 255
    return (
        PaletteConstants.LABEL_BLACK
        if luminance > PaletteConstants.LUMINANCE_THRESHOLD
        else PaletteConstants.LABEL_WHITE
    )


def clamp_num_colors(num_colors: int) -> int:
    return max(PaletteConstants.MIN_COLORS, min(PaletteConstants.MAX_COLORS, int(num_colors)))


def _make_color(r: int, g: int, b: int, count: int) -> PaletteColor:
    # Bucket 260 exists for channel values >= 255; swatches are limited to 8 bits
    r, g, b = min(r, 255), min(g, 255), min(b, 255)
    return PaletteColor(
        r=r,
        g=g,
        b=b,
        hex=rgb_to_hex(r, g, b),
        count=count,
        label_color=contrast_label_color(r, g, b),
    )


def fallback_palette() -> PaletteResult:
    """Fixed palette returned when an image has no opaque pixels."""
    colors = [_make_color(*hex_to_rgb(value), 0) for value in PaletteConstants.FALLBACK_PALETTE]
    return PaletteResult(colors=colors, is_fallback=True, sampled_pixels=0)


def extract_palette(
    raster: Raster,
    num_colors: int = PaletteConstants.DEFAULT_COLORS,
    sample_size: int = PaletteConstants.SAMPLE_SIZE,
) -> PaletteResult:
    """
    Extract the dominant colors of an image.

    Args:
        raster: Source image
        num_colors: Number of colors to return, clamped to 3..10
        sample_size: Side of the square the image is resampled to

    Returns:
        PaletteResult ordered by descending frequency; ties keep the order
        in which buckets were first seen (row-major over the sample)
    """
    num_colors = clamp_num_colors(num_colors)
    size = max(1, int(sample_size))

    sample = cv2.resize(raster.pixels, (size, size), interpolation=cv2.INTER_LINEAR)
    flat = sample.reshape(-1, 4)
    opaque = flat[flat[:, 3] >= PaletteConstants.ALPHA_CUTOFF][:, :3].astype(np.int64)

    if len(opaque) == 0:
        logger.debug("No opaque pixels sampled, returning fallback palette")
        return fallback_palette()

    step = PaletteConstants.BUCKET_SIZE
    # Round half up, so 255 lands in bucket 260
    buckets = np.floor(opaque / step + 0.5).astype(np.int64) * step
    keys = buckets[:, 0] * 1_000_000 + buckets[:, 1] * 1_000 + buckets[:, 2]

    unique_keys, first_index, counts = np.unique(keys, return_index=True, return_counts=True)
    order = np.lexsort((first_index, -counts))[:num_colors]

    colors = []
    for idx in order:
        key = int(unique_keys[idx])
        r, g, b = key // 1_000_000, (key // 1_000) % 1_000, key % 1_000
        colors.append(_make_color(r, g, b, int(counts[idx])))

    logger.debug(f"Extracted {len(colors)} colors from {len(opaque)} opaque samples")
    return PaletteResult(colors=colors, is_fallback=False, sampled_pixels=int(len(opaque)))


def render_palette_html(palette: PaletteResult, source_name: Optional[str] = None) -> str:
    """Render a standalone HTML page showing the palette swatches."""
    title = html.escape(source_name or "Export")
    heading = html.escape(source_name or "Image")
    swatches = "".join(
        f'<div class="color" style="background-color: {color.rgb}"><div>{color.hex}</div></div>'
        for color in palette.colors
    )
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        f"<title>Color Palette - {title}</title>\n"
        "<style>\n"
        "body { font-family: Arial, sans-serif; max-width: 800px; margin: 0 auto; "
        "padding: 20px; }\n"
        ".palette { display: flex; flex-wrap: wrap; gap: 10px; margin: 20px 0; }\n"
        ".color { width: 100px; height: 100px; border-radius: 8px; display: flex; "
        "flex-direction: column; justify-content: flex-end; padding: 10px; color: white; "
        "text-shadow: 0 0 3px rgba(0,0,0,0.5); }\n"
        ".color-info { background: white; padding: 15px; border-radius: 8px; "
        "margin-bottom: 10px; }\n"
        "h1 { color: #333; }\n"
        "</style>\n"
        "</head>\n"
        "<body>\n"
        f"<h1>Color Palette from {heading}</h1>\n"
        '<div class="color-info">\n'
        f"<p>Extracted {len(palette.colors)} dominant colors from the image.</p>\n"
        "</div>\n"
        f'<div class="palette">{swatches}</div>\n'
        "</body>\n"
        "</html>\n"
    )


def palette_to_css(palette: PaletteResult, prefix: str = "color") -> str:
    """Render the palette as CSS custom properties."""
    lines = [f"  --{prefix}-{i + 1}: {color.hex};" for i, color in enumerate(palette.colors)]
    return ":root {\n" + "\n".join(lines) + "\n}\n"


def palette_to_json(palette: PaletteResult) -> str:
    return json.dumps(palette.hex_colors)


def copy_all_text(palette: PaletteResult) -> str:
    """Comma separated hex strings in palette order."""
    return ", ".join(palette.hex_colors)
