"""
Edge-mask background remover.

A lightweight heuristic rather than real segmentation: pixels on strong
red-channel edges stay opaque, flat areas become transparent, and the
mask is softened with a box blur.
"""

import logging

import cv2
import numpy as np

from common.constants import MaskConstants
from core.image.compositing import blend_overlay
from core.raster import Raster

logger = logging.getLogger(__name__)


def compute_edge_mask(
    raster: Raster, threshold: int = MaskConstants.EDGE_THRESHOLD
) -> np.ndarray:
    """
    Binary edge mask from the red channel.

    For each interior pixel, sums the absolute differences to its four
    neighbours; sums above threshold become 255. Border pixels are 0.

    Returns:
        (H, W) uint8 mask of 0/255
    """
    mask = np.zeros((raster.height, raster.width), dtype=np.uint8)
    if raster.width < 3 or raster.height < 3:
        return mask

    red = raster.pixels[:, :, 0].astype(np.int32)
    center = red[1:-1, 1:-1]
    diff = (
        np.abs(center - red[1:-1, :-2])
        + np.abs(center - red[1:-1, 2:])
        + np.abs(center - red[:-2, 1:-1])
        + np.abs(center - red[2:, 1:-1])
    )
    mask[1:-1, 1:-1] = np.where(diff > threshold, MaskConstants.MASK_ON, MaskConstants.MASK_OFF)
    return mask


def box_blur_mask(mask: np.ndarray, radius: int = MaskConstants.BLUR_RADIUS) -> np.ndarray:
    """
    Average each pixel over a (2r+1)^2 window.

    Only samples inside the image count toward the average, so edges are
    not darkened. Results are rounded half to even, like an 8-bit clamped
    array assignment.
    """
    if radius <= 0:
        return mask.copy()

    ksize = (2 * radius + 1, 2 * radius + 1)
    sums = cv2.boxFilter(
        mask.astype(np.float64), -1, ksize, normalize=False, borderType=cv2.BORDER_CONSTANT
    )
    counts = cv2.boxFilter(
        np.ones(mask.shape, dtype=np.float64),
        -1,
        ksize,
        normalize=False,
        borderType=cv2.BORDER_CONSTANT,
    )
    return np.clip(np.rint(sums / counts), 0, 255).astype(np.uint8)


def remove_background(raster: Raster) -> Raster:
    """
    Replace the alpha channel with the blurred edge mask.

    RGB values are left untouched.
    """
    mask = box_blur_mask(compute_edge_mask(raster))
    pixels = raster.pixels.copy()
    pixels[:, :, 3] = mask

    logger.debug(
        f"Background mask for {raster.width}x{raster.height}: "
        f"{int(np.count_nonzero(mask))} non-transparent pixels"
    )
    return Raster(pixels)


def checkerboard(width: int, height: int, cell: int = MaskConstants.CHECKER_CELL_SIZE) -> Raster:
    """Opaque light/dark checkerboard used behind transparent previews."""
    ys, xs = np.indices((height, width))
    light = ((xs // cell) + (ys // cell)) % 2 == 0

    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[light, :3] = MaskConstants.CHECKER_LIGHT
    pixels[~light, :3] = MaskConstants.CHECKER_DARK
    pixels[:, :, 3] = 255
    return Raster(pixels)


def render_checkerboard_preview(
    raster: Raster, cell: int = MaskConstants.CHECKER_CELL_SIZE
) -> Raster:
    """Composite a raster over a checkerboard so transparency is visible."""
    return blend_overlay(checkerboard(raster.width, raster.height, cell), raster, 0, 0)
