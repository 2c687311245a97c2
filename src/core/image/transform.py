"""
Geometric transforms for rasters.

Handles the resizer, cropper and rotator operations:
- Resize to exact dimensions (with aspect-ratio helper)
- Crop with region clamping and aspect-ratio presets
- Rotate by arbitrary angle with horizontal/vertical flips
"""

import logging
import math
from typing import Optional, Tuple

import cv2
import numpy as np

from common.base import Region
from common.constants import CropConstants, RotationConstants
from core.raster import Raster

logger = logging.getLogger(__name__)


def resize(raster: Raster, target_width: int, target_height: int) -> Raster:
    """
    Resample a raster to exactly target_width x target_height.

    Uses area averaging when shrinking and bicubic interpolation when
    enlarging in either direction.

    Raises:
        ValueError: If a target dimension is not positive
    """
    if target_width < 1 or target_height < 1:
        raise ValueError(f"Invalid resize target {target_width}x{target_height}")

    if (target_width, target_height) == raster.size:
        return raster.copy()

    shrinking = target_width <= raster.width and target_height <= raster.height
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_CUBIC

    resized = cv2.resize(
        raster.pixels, (int(target_width), int(target_height)), interpolation=interpolation
    )
    logger.debug(
        f"Resized {raster.width}x{raster.height} -> {target_width}x{target_height} "
        f"({'area' if shrinking else 'cubic'})"
    )
    return Raster(resized)


def resolve_resize_dimensions(
    original_width: int,
    original_height: int,
    width: int,
    height: int,
    maintain_aspect_ratio: bool = True,
    driver: str = "width",
) -> Tuple[int, int]:
    """
    Resolve the final resize target.

    With the aspect lock on, the dimension that was not edited is recomputed
    from the one that was, overriding whatever value was supplied for it.

    Args:
        original_width: Source width
        original_height: Source height
        width: Requested width
        height: Requested height
        maintain_aspect_ratio: Keep the source aspect ratio
        driver: Which dimension was edited, "width" or "height"

    Returns:
        (width, height), each at least 1
    """
    width = max(1, int(width))
    height = max(1, int(height))

    if maintain_aspect_ratio and original_width > 0 and original_height > 0:
        if driver == "height":
            width = max(1, int(math.floor(height * original_width / original_height + 0.5)))
        else:
            height = max(1, int(math.floor(width * original_height / original_width + 0.5)))

    return width, height


def parse_aspect_ratio(value: Optional[str]) -> Optional[float]:
    """
    Parse an aspect ratio preset such as "16:9".

    Returns:
        width / height, or None for "free"

    Raises:
        ValueError: If the value is not "free" or "w:h" with positive numbers
    """
    if value is None or value.strip().lower() in ("", "free"):
        return None

    parts = value.split(":")
    if len(parts) != 2:
        raise ValueError(f"Invalid aspect ratio: {value}")

    ratio_w, ratio_h = float(parts[0]), float(parts[1])
    if ratio_w <= 0 or ratio_h <= 0:
        raise ValueError(f"Invalid aspect ratio: {value}")
    return ratio_w / ratio_h


def default_crop_region(image_width: int, image_height: int) -> Region:
    """Initial crop box: offset 25%, size 50% of the image."""
    return Region(
        x=int(image_width * CropConstants.DEFAULT_OFFSET_RATIO),
        y=int(image_height * CropConstants.DEFAULT_OFFSET_RATIO),
        width=max(1, int(image_width * CropConstants.DEFAULT_SIZE_RATIO)),
        height=max(1, int(image_height * CropConstants.DEFAULT_SIZE_RATIO)),
    )


def clamp_crop_region(
    x: float, y: float, width: float, height: float, image_width: int, image_height: int
) -> Region:
    """
    Clamp a requested crop box to the image.

    Negative offsets become 0 and the size is kept within [1, image size].
    A box that overhangs the right or bottom edge is slid back inside
    while keeping its size.
    """
    width = min(max(1, int(round(width))), image_width)
    height = min(max(1, int(round(height))), image_height)
    x = max(0, int(round(x)))
    y = max(0, int(round(y)))

    if x + width > image_width:
        x = image_width - width
    if y + height > image_height:
        y = image_height - height

    return Region(x=x, y=y, width=width, height=height)


def apply_aspect_ratio(region: Region, ratio: Optional[float], image_height: int) -> Region:
    """
    Derive the crop height from its width and an aspect ratio.

    The height is limited by the space left below region.y.
    """
    if not ratio:
        return region

    height = min(region.width / ratio, image_height - region.y)
    return Region(x=region.x, y=region.y, width=region.width, height=max(1, int(round(height))))


def crop(raster: Raster, region: Region) -> Raster:
    """
    Copy a rectangle out of the raster, losslessly.

    The region is clamped first, so the output always has the clamped
    region's size.
    """
    clamped = clamp_crop_region(
        region.x, region.y, region.width, region.height, raster.width, raster.height
    )
    if clamped != region:
        logger.debug(f"Crop region clamped from {region.to_dict()} to {clamped.to_dict()}")
    return raster.copy_region(clamped)


def normalize_angle(angle: float) -> float:
    """Normalize degrees into [0, 360)."""
    angle = math.fmod(angle, 360.0)
    if angle < 0:
        angle += 360.0
    return angle


def _cos_sin(angle: float) -> Tuple[float, float]:
    radians = math.radians(angle)
    # Snap values like 6e-17 at quarter turns to exact zeros
    return round(math.cos(radians), 12), round(math.sin(radians), 12)


def rotated_bounds(width: int, height: int, angle: float) -> Tuple[int, int]:
    """
    Bounding box of a width x height image rotated by angle degrees.

    Returns:
        (new_width, new_height), truncated to integers, each at least 1
    """
    cos_a, sin_a = _cos_sin(angle)
    eps = RotationConstants.BOUNDS_EPSILON

    new_width = abs(width * cos_a) + abs(height * sin_a)
    new_height = abs(width * sin_a) + abs(height * cos_a)

    return max(1, int(math.floor(new_width + eps))), max(1, int(math.floor(new_height + eps)))


def build_rotate_flip_matrix(
    width: int,
    height: int,
    angle: float,
    flip_horizontal: bool = False,
    flip_vertical: bool = False,
) -> np.ndarray:
    """
    Build the 3x3 affine matrix mapping source pixel indices to output indices.

    The composition is translate(new_w/2, new_h/2) * rotate(angle) *
    scale(sx, sy) * translate(-w/2, -h/2), in y-down coordinates where a
    positive angle turns clockwise. It is wrapped in a half-pixel shift so
    it applies to pixel indices rather than pixel-edge coordinates.
    """
    new_width, new_height = rotated_bounds(width, height, angle)
    cos_a, sin_a = _cos_sin(angle)
    sx = -1.0 if flip_horizontal else 1.0
    sy = -1.0 if flip_vertical else 1.0

    def translate(tx: float, ty: float) -> np.ndarray:
        return np.array([[1.0, 0.0, tx], [0.0, 1.0, ty], [0.0, 0.0, 1.0]])

    rotation = np.array([[cos_a, -sin_a, 0.0], [sin_a, cos_a, 0.0], [0.0, 0.0, 1.0]])
    scale = np.diag([sx, sy, 1.0])

    canvas = (
        translate(new_width / 2, new_height / 2)
        @ rotation
        @ scale
        @ translate(-width / 2, -height / 2)
    )
    return translate(-0.5, -0.5) @ canvas @ translate(0.5, 0.5)


def rotate_flip(
    raster: Raster, angle: float, flip_horizontal: bool = False, flip_vertical: bool = False
) -> Raster:
    """
    Rotate a raster clockwise by angle degrees, optionally mirrored.

    The output covers the rotated bounding box; areas outside the source
    footprint are transparent. Quarter turns are exact permutations.

    Flips are applied to the pixels before rotating, which gives the same
    result as build_rotate_flip_matrix with the flips folded in.
    """
    angle = normalize_angle(angle)

    pixels = raster.pixels
    if flip_horizontal:
        pixels = pixels[:, ::-1]
    if flip_vertical:
        pixels = pixels[::-1, :]

    if angle % 90 == 0:
        quarter_turns = int(angle // 90)
        pixels = np.rot90(pixels, k=-quarter_turns)
        return Raster(np.ascontiguousarray(pixels).copy())

    new_width, new_height = rotated_bounds(raster.width, raster.height, angle)
    matrix = build_rotate_flip_matrix(raster.width, raster.height, angle)

    rotated = cv2.warpAffine(
        np.ascontiguousarray(pixels),
        matrix[:2],
        (new_width, new_height),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0, 0),
    )
    logger.debug(
        f"Rotated {raster.width}x{raster.height} by {angle:.1f} deg -> {new_width}x{new_height}"
    )
    return Raster(rotated)
