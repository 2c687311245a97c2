"""
Unit tests for the edge-mask background remover
"""

import numpy as np

from core.image.mask import (
    box_blur_mask,
    checkerboard,
    compute_edge_mask,
    remove_background,
    render_checkerboard_preview,
)
from core.raster import Raster


def _split_raster(width: int = 20, height: int = 10) -> Raster:
    """Left half black, right half bright red"""
    raster = Raster.blank(width, height, fill=(0, 0, 0, 255))
    pixels = raster.pixels.copy()
    pixels[:, width // 2 :, 0] = 255
    return Raster(pixels)


class TestEdgeMask:
    """Tests for compute_edge_mask"""

    def test_flat_image_has_no_edges(self):
        """Test that a uniform image produces an empty mask"""
        mask = compute_edge_mask(Raster.blank(10, 10, fill=(90, 90, 90, 255)))

        assert mask.shape == (10, 10)
        assert not mask.any()

    def test_edge_detected_at_boundary(self):
        """Test that a strong red step is marked on both sides"""
        mask = compute_edge_mask(_split_raster())

        assert mask[5, 9] == 255
        assert mask[5, 10] == 255
        assert mask[5, 3] == 0
        assert mask[5, 16] == 0

    def test_border_is_always_zero(self):
        """Test that border pixels are never marked"""
        noisy = np.random.default_rng(0).integers(0, 256, (30, 40, 4), dtype=np.uint8)
        mask = compute_edge_mask(Raster(noisy))

        assert not mask[0, :].any()
        assert not mask[-1, :].any()
        assert not mask[:, 0].any()
        assert not mask[:, -1].any()

    def test_only_red_channel_counts(self):
        """Test that green and blue steps are ignored"""
        raster = Raster.blank(20, 10, fill=(0, 0, 0, 255))
        pixels = raster.pixels.copy()
        pixels[:, 10:, 1:3] = 255

        assert not compute_edge_mask(Raster(pixels)).any()

    def test_threshold_is_strict(self):
        """Test that a difference equal to the threshold is not an edge"""
        pixels = np.zeros((3, 3, 4), dtype=np.uint8)
        pixels[:, :, 3] = 255
        # Only the right neighbour differs from the center
        pixels[1, 2, 0] = 50

        assert compute_edge_mask(Raster(pixels), threshold=50)[1, 1] == 0

        pixels[1, 2, 0] = 51
        assert compute_edge_mask(Raster(pixels), threshold=50)[1, 1] == 255

    def test_tiny_image(self):
        """Test images without interior pixels"""
        assert not compute_edge_mask(Raster.blank(2, 2)).any()


class TestBoxBlur:
    """Tests for box_blur_mask"""

    def test_full_mask_stays_full(self):
        """Test that edges are not darkened by out-of-bounds samples"""
        mask = np.full((6, 6), 255, dtype=np.uint8)

        assert np.all(box_blur_mask(mask) == 255)

    def test_single_pixel_spreads(self):
        """Test blur of a single pixel in a 5x5 neighbourhood"""
        mask = np.zeros((9, 9), dtype=np.uint8)
        mask[4, 4] = 255

        blurred = box_blur_mask(mask, radius=2)

        # 255 / 25 = 10.2
        assert blurred[4, 4] == 10
        assert blurred[2, 2] == 10
        assert blurred[1, 1] == 0

    def test_zero_radius_is_copy(self):
        """Test that radius zero returns the mask unchanged"""
        mask = np.arange(16, dtype=np.uint8).reshape(4, 4)

        assert np.array_equal(box_blur_mask(mask, radius=0), mask)


class TestRemoveBackground:
    """Tests for remove_background"""

    def test_rgb_preserved(self, gradient_raster):
        """Test that only the alpha channel changes"""
        result = remove_background(gradient_raster)

        assert result.size == gradient_raster.size
        assert np.array_equal(result.pixels[:, :, :3], gradient_raster.pixels[:, :, :3])

    def test_flat_image_becomes_transparent(self):
        """Test that a uniform image is fully transparent"""
        result = remove_background(Raster.blank(20, 20, fill=(10, 200, 30, 255)))

        assert not result.pixels[:, :, 3].any()

    def test_edges_stay_visible(self):
        """Test that pixels on edges keep some opacity"""
        result = remove_background(_split_raster())

        assert result.get_pixel(10, 5)[3] > 0
        assert result.get_pixel(0, 5)[3] == 0


class TestCheckerboard:
    """Tests for the transparency preview"""

    def test_checkerboard_cells(self):
        """Test light and dark cells alternate every ten pixels"""
        board = checkerboard(40, 20)

        assert board.get_pixel(0, 0) == (240, 240, 240, 255)
        assert board.get_pixel(10, 0) == (224, 224, 224, 255)
        assert board.get_pixel(10, 10) == (240, 240, 240, 255)

    def test_transparent_preview_shows_board(self):
        """Test that a transparent raster previews as the bare checkerboard"""
        preview = render_checkerboard_preview(Raster.blank(30, 30))

        assert preview == checkerboard(30, 30)

    def test_opaque_preview_unchanged(self, gradient_raster):
        """Test that opaque pixels hide the checkerboard"""
        assert render_checkerboard_preview(gradient_raster) == gradient_raster
