"""
Watermark compositing.

Handles:
- Anchor position resolution for the nine watermark positions
- Source-over alpha blending with a global opacity
- Text watermarks with a soft drop shadow
- Image watermarks scaled relative to the base image
"""

import logging
import math
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from common.constants import WatermarkConstants
from common.enums import WatermarkPosition
from core.image.palette import contrast_label_color, hex_to_rgb
from core.image.transform import resize
from core.raster import Raster
from schemas.params import ImageWatermarkParams, TextWatermarkParams

logger = logging.getLogger(__name__)

TEXT_FONT = cv2.FONT_HERSHEY_SIMPLEX


def parse_hex_color(value: str) -> Tuple[int, int, int]:
    """Parse "#rrggbb" or "#rgb" into an (r, g, b) tuple."""
    return hex_to_rgb(value)


def resolve_position(
    base_width: float,
    base_height: float,
    overlay_width: float,
    overlay_height: float,
    position: Union[WatermarkPosition, str],
    padding: float = WatermarkConstants.PADDING,
) -> Tuple[float, float]:
    """
    Compute the top-left corner of an overlay for a named anchor.

    Unknown anchors fall back to bottom-right.

    Returns:
        (x, y) as floats; callers round when rasterising
    """
    try:
        anchor = WatermarkPosition(position)
    except ValueError:
        logger.debug(f"Unknown watermark position '{position}', using bottom-right")
        anchor = WatermarkPosition.BOTTOM_RIGHT

    left = padding
    center_x = (base_width - overlay_width) / 2
    right = base_width - overlay_width - padding
    top = padding
    middle_y = (base_height - overlay_height) / 2
    bottom = base_height - overlay_height - padding

    positions = {
        WatermarkPosition.TOP_LEFT: (left, top),
        WatermarkPosition.TOP_CENTER: (center_x, top),
        WatermarkPosition.TOP_RIGHT: (right, top),
        WatermarkPosition.MIDDLE_LEFT: (left, middle_y),
        WatermarkPosition.CENTER: (center_x, middle_y),
        WatermarkPosition.MIDDLE_RIGHT: (right, middle_y),
        WatermarkPosition.BOTTOM_LEFT: (left, bottom),
        WatermarkPosition.BOTTOM_CENTER: (center_x, bottom),
        WatermarkPosition.BOTTOM_RIGHT: (right, bottom),
    }
    x, y = positions[anchor]
    return float(x), float(y)


def blend_overlay(
    base: Raster, overlay: Raster, x: float, y: float, opacity: float = 1.0
) -> Raster:
    """
    Draw an overlay onto a copy of base with source-over compositing.

    Args:
        base: Destination image
        overlay: RGBA overlay
        x: Left edge of the overlay (rounded to the nearest pixel)
        y: Top edge of the overlay (rounded to the nearest pixel)
        opacity: Global alpha multiplier (0.0 - 1.0)

    Returns:
        New raster with base dimensions. Pixels outside the overlay
        footprint are copied unchanged.
    """
    result = base.pixels.copy()
    opacity = min(max(float(opacity), 0.0), 1.0)

    ox = int(math.floor(x + 0.5))
    oy = int(math.floor(y + 0.5))

    # Clip footprint to the base
    x0, y0 = max(ox, 0), max(oy, 0)
    x1 = min(ox + overlay.width, base.width)
    y1 = min(oy + overlay.height, base.height)
    if x1 <= x0 or y1 <= y0 or opacity == 0.0:
        return Raster(result)

    src = overlay.pixels[y0 - oy : y1 - oy, x0 - ox : x1 - ox].astype(np.float32)
    dst = result[y0:y1, x0:x1].astype(np.float32)

    src_a = src[:, :, 3:4] / 255.0 * opacity
    dst_a = dst[:, :, 3:4] / 255.0
    out_a = src_a + dst_a * (1.0 - src_a)

    out_rgb = src[:, :, :3] * src_a + dst[:, :, :3] * dst_a * (1.0 - src_a)
    out_rgb = np.divide(out_rgb, out_a, out=np.zeros_like(out_rgb), where=out_a > 0)

    blended = np.concatenate([out_rgb, out_a * 255.0], axis=2)
    result[y0:y1, x0:x1] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)
    return Raster(result)


def _font_metrics(font_size: int) -> Tuple[float, int]:
    thickness = max(1, int(round(font_size / 12)))
    scale = cv2.getFontScaleFromHeight(TEXT_FONT, int(font_size), thickness)
    return scale, thickness


def measure_text(text: str, font_size: int) -> Tuple[int, int]:
    """
    Measure rendered text.

    Returns:
        (width, height) where height is the font size in pixels
    """
    if not text:
        return 0, int(font_size)
    scale, thickness = _font_metrics(font_size)
    (width, _), _ = cv2.getTextSize(text, TEXT_FONT, scale, thickness)
    return int(width), int(font_size)


def _text_mask(text: str, width: int, height: int, x: int, y: int, font_size: int) -> np.ndarray:
    """Single channel coverage mask with the text's top edge at y."""
    scale, thickness = _font_metrics(font_size)
    mask = np.zeros((height, width), dtype=np.uint8)
    cv2.putText(
        mask, text, (x, y + int(font_size)), TEXT_FONT, scale, 255, thickness, cv2.LINE_AA
    )
    return mask


def _solid_layer(mask: np.ndarray, rgb: Tuple[int, int, int]) -> Raster:
    layer = np.zeros(mask.shape + (4,), dtype=np.uint8)
    layer[:, :, :3] = rgb
    layer[:, :, 3] = mask
    return Raster(layer)


def apply_text_watermark(base: Raster, params: TextWatermarkParams) -> Raster:
    """
    Render a text watermark with a blurred drop shadow.

    The shadow uses the opposite-luminance color of the text, offset by
    one pixel. Text and shadow are blended together at params.opacity.
    """
    if not params.text:
        return base.copy()

    text_rgb = parse_hex_color(params.color)
    shadow_rgb = parse_hex_color(contrast_label_color(*text_rgb))

    text_width, text_height = measure_text(params.text, params.font_size)
    x, y = resolve_position(base.width, base.height, text_width, text_height, params.position)
    ix, iy = int(math.floor(x + 0.5)), int(math.floor(y + 0.5))

    offset = WatermarkConstants.SHADOW_OFFSET
    shadow_mask = _text_mask(
        params.text, base.width, base.height, ix + offset, iy + offset, params.font_size
    )
    # Canvas shadowBlur maps to a gaussian with sigma = blur / 2
    shadow_mask = cv2.GaussianBlur(
        shadow_mask, (0, 0), sigmaX=WatermarkConstants.SHADOW_BLUR / 2
    )
    text_mask = _text_mask(params.text, base.width, base.height, ix, iy, params.font_size)

    shadow_layer = _solid_layer(shadow_mask, shadow_rgb)
    layer = blend_overlay(shadow_layer, _solid_layer(text_mask, text_rgb), 0, 0)

    logger.debug(
        f"Text watermark '{params.text}' at ({ix}, {iy}), {text_width}x{text_height}, "
        f"opacity {params.opacity}%"
    )
    return blend_overlay(base, layer, 0, 0, params.opacity / 100)


def scale_watermark_dimensions(
    base_width: int, base_height: int, watermark_width: int, watermark_height: int
) -> Tuple[int, int]:
    """
    Scale a watermark so its longer side is 20% of the smaller base side.

    Small watermarks are enlarged to the same target.
    """
    max_size = min(base_width, base_height) * WatermarkConstants.MAX_SIZE_RATIO
    scale = min(max_size / watermark_width, max_size / watermark_height)
    return (
        max(1, int(round(watermark_width * scale))),
        max(1, int(round(watermark_height * scale))),
    )


def apply_image_watermark(base: Raster, overlay: Raster, params: ImageWatermarkParams) -> Raster:
    """Scale, position and blend an image watermark."""
    width, height = scale_watermark_dimensions(
        base.width, base.height, overlay.width, overlay.height
    )
    scaled = resize(overlay, width, height)
    x, y = resolve_position(base.width, base.height, width, height, params.position)

    logger.debug(f"Image watermark {width}x{height} at ({x:.1f}, {y:.1f})")
    return blend_overlay(base, scaled, x, y, params.opacity / 100)


def apply_watermark(
    base: Raster,
    params: Union[TextWatermarkParams, ImageWatermarkParams],
    overlay: Optional[Raster] = None,
) -> Raster:
    """
    Apply a text or image watermark.

    Raises:
        ValueError: If an image watermark is requested without an overlay
    """
    if isinstance(params, TextWatermarkParams):
        return apply_text_watermark(base, params)

    if overlay is None:
        raise ValueError("Image watermark requires a watermark image")
    return apply_image_watermark(base, overlay, params)
