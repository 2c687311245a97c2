"""
Unit tests for resize, crop and rotate transforms
"""

import cv2
import numpy as np
import pytest

from common.base import Region
from core.image.transform import (
    apply_aspect_ratio,
    build_rotate_flip_matrix,
    clamp_crop_region,
    crop,
    default_crop_region,
    normalize_angle,
    parse_aspect_ratio,
    resize,
    resolve_resize_dimensions,
    rotate_flip,
    rotated_bounds,
)
from core.raster import Raster


class TestResize:
    """Tests for resize and target resolution"""

    @pytest.mark.parametrize("size", [(800, 600), (100, 75), (1, 1), (400, 10)])
    def test_resize_exact_dimensions(self, gradient_raster, size):
        """Test that the output always has the requested size"""
        result = resize(gradient_raster, *size)

        assert result.size == size

    def test_resize_same_size_is_copy(self, gradient_raster):
        """Test resizing to the current size returns equal pixels"""
        result = resize(gradient_raster, 400, 300)

        assert result == gradient_raster
        assert result.pixels is not gradient_raster.pixels

    def test_resize_does_not_mutate_input(self, gradient_raster):
        """Test that the input raster is untouched"""
        before = gradient_raster.copy()

        resize(gradient_raster, 123, 45)

        assert gradient_raster == before

    def test_resize_solid_color_stays_solid(self):
        """Test that resampling a flat image keeps its color"""
        raster = Raster.blank(50, 40, fill=(200, 100, 50, 255))

        result = resize(raster, 120, 90)

        assert np.all(result.pixels == (200, 100, 50, 255))

    def test_resize_invalid_target(self, gradient_raster):
        """Test that non-positive targets are rejected"""
        with pytest.raises(ValueError):
            resize(gradient_raster, 0, 10)

    def test_resolve_with_aspect_lock_width_driver(self):
        """Test height is recomputed from the width"""
        assert resolve_resize_dimensions(400, 300, 800, 999, True, "width") == (800, 600)

    def test_resolve_with_aspect_lock_height_driver(self):
        """Test width is recomputed from the height"""
        assert resolve_resize_dimensions(400, 300, 1, 150, True, "height") == (200, 150)

    def test_resolve_without_aspect_lock(self):
        """Test free dimensions are used as given"""
        assert resolve_resize_dimensions(400, 300, 800, 600, False) == (800, 600)

    def test_resolve_rounds_half_up(self):
        """Test recomputed dimension rounding"""
        # 3 * 3 / 2 = 4.5
        assert resolve_resize_dimensions(2, 3, 3, 1, True, "width") == (3, 5)

    def test_resolve_minimum_is_one(self):
        """Test that dimensions never drop below one pixel"""
        assert resolve_resize_dimensions(1000, 1, 1, 0, True, "width") == (1, 1)


class TestCrop:
    """Tests for crop region handling"""

    def test_parse_aspect_ratio(self):
        """Test aspect ratio presets"""
        assert parse_aspect_ratio("16:9") == pytest.approx(16 / 9)
        assert parse_aspect_ratio("1:1") == 1.0
        assert parse_aspect_ratio("free") is None
        assert parse_aspect_ratio(None) is None

    @pytest.mark.parametrize("value", ["abc", "16/9", "0:1", "4:-3"])
    def test_parse_invalid_aspect_ratio(self, value):
        """Test that malformed ratios raise ValueError"""
        with pytest.raises(ValueError):
            parse_aspect_ratio(value)

    def test_default_crop_region(self):
        """Test initial crop box is centred at half size"""
        assert default_crop_region(300, 200) == Region(x=75, y=50, width=150, height=100)

    def test_clamp_negative_offsets(self):
        """Test negative offsets become zero"""
        region = clamp_crop_region(-10, -5, 100, 50, 300, 200)

        assert region == Region(x=0, y=0, width=100, height=50)

    def test_clamp_oversized_box(self):
        """Test that the size is limited to the image"""
        region = clamp_crop_region(0, 0, 1000, 50, 300, 200)

        assert region == Region(x=0, y=0, width=300, height=50)

    def test_clamp_slides_overhanging_box_inside(self):
        """Test a box overhanging the right and bottom edges keeps its size"""
        region = clamp_crop_region(250, 180, 100, 50, 300, 200)

        assert region == Region(x=200, y=150, width=100, height=50)

    def test_clamp_minimum_size(self):
        """Test that zero-sized boxes become one pixel"""
        region = clamp_crop_region(10, 10, 0, -4, 300, 200)

        assert (region.width, region.height) == (1, 1)

    def test_apply_aspect_ratio(self):
        """Test height derived from width"""
        region = apply_aspect_ratio(Region(x=0, y=0, width=160, height=100), 16 / 9, 200)

        assert region.height == 90
        assert region.width == 160

    def test_apply_aspect_ratio_limited_by_image(self):
        """Test the derived height is limited to the space below the box"""
        region = apply_aspect_ratio(Region(x=0, y=150, width=160, height=10), 1.0, 200)

        assert region.height == 50

    def test_apply_free_aspect_ratio(self):
        """Test that a free ratio leaves the region unchanged"""
        region = Region(x=1, y=2, width=3, height=4)

        assert apply_aspect_ratio(region, None, 200) == region

    def test_crop_size_and_pixels(self, gradient_raster):
        """Test crop output size and that pixels are copied unchanged"""
        result = crop(gradient_raster, Region(x=50, y=25, width=100, height=80))

        assert result.size == (100, 80)
        assert result.get_pixel(0, 0) == gradient_raster.get_pixel(50, 25)
        assert result.get_pixel(99, 79) == gradient_raster.get_pixel(149, 104)

    def test_crop_clamps_region(self, gradient_raster):
        """Test that an overhanging region is slid inside"""
        result = crop(gradient_raster, Region(x=350, y=250, width=100, height=100))

        assert result.size == (100, 100)
        assert result.get_pixel(0, 0) == gradient_raster.get_pixel(300, 200)

    def test_crop_whole_image_is_identity(self, gradient_raster):
        """Test cropping the full frame returns the same pixels"""
        result = crop(gradient_raster, Region(x=0, y=0, width=400, height=300))

        assert result == gradient_raster


class TestRotate:
    """Tests for rotation and flips"""

    def test_normalize_angle(self):
        """Test angles are normalized into [0, 360)"""
        assert normalize_angle(-90) == 270
        assert normalize_angle(450) == 90
        assert normalize_angle(360) == 0

    @pytest.mark.parametrize(
        "angle,expected",
        [(0, (400, 300)), (90, (300, 400)), (180, (400, 300)), (270, (300, 400)), (45, (494, 494))],
    )
    def test_rotated_bounds(self, angle, expected):
        """Test bounding box of rotated image"""
        assert rotated_bounds(400, 300, angle) == expected

    @pytest.mark.parametrize("angle", [0, 360, -360])
    def test_identity_rotation(self, gradient_raster, angle):
        """Test that full turns without flips return the input"""
        assert rotate_flip(gradient_raster, angle) == gradient_raster

    def test_rotate_90_clockwise(self, gradient_raster):
        """Test quarter turn is an exact clockwise permutation"""
        result = rotate_flip(gradient_raster, 90)

        assert result.size == (300, 400)
        # Source (x, y) lands at (H - 1 - y, x)
        assert result.get_pixel(299 - 20, 10) == gradient_raster.get_pixel(10, 20)
        assert result.get_pixel(299, 0) == gradient_raster.get_pixel(0, 0)

    def test_rotate_180_twice_is_identity(self, gradient_raster):
        """Test that two half turns restore the image"""
        once = rotate_flip(gradient_raster, 180)

        assert once.get_pixel(0, 0) == gradient_raster.get_pixel(399, 299)
        assert rotate_flip(once, 180) == gradient_raster

    def test_flip_horizontal(self, gradient_raster):
        """Test horizontal mirror"""
        result = rotate_flip(gradient_raster, 0, flip_horizontal=True)

        assert result.get_pixel(399 - 15, 7) == gradient_raster.get_pixel(15, 7)

    def test_flip_vertical(self, gradient_raster):
        """Test vertical mirror"""
        result = rotate_flip(gradient_raster, 0, flip_vertical=True)

        assert result.get_pixel(15, 299 - 7) == gradient_raster.get_pixel(15, 7)

    def test_rotate_45_transparent_corners(self, gradient_raster):
        """Test arbitrary angles expand the canvas with transparent corners"""
        result = rotate_flip(gradient_raster, 45)

        assert result.size == (494, 494)
        assert result.get_pixel(0, 0)[3] == 0
        assert result.get_pixel(247, 247)[3] == 255

    def test_rotate_does_not_mutate_input(self, gradient_raster):
        """Test that the input raster is untouched"""
        before = gradient_raster.copy()

        rotate_flip(gradient_raster, 30, flip_horizontal=True)

        assert gradient_raster == before

    @pytest.mark.parametrize("angle", [90, 180, 270])
    @pytest.mark.parametrize(
        "flip_horizontal,flip_vertical", [(False, False), (True, False), (False, True), (True, True)]
    )
    def test_matrix_matches_quarter_turns(
        self, gradient_raster, angle, flip_horizontal, flip_vertical
    ):
        """Test the affine matrix reproduces the exact quarter-turn permutation"""
        expected = rotate_flip(gradient_raster, angle, flip_horizontal, flip_vertical)
        matrix = build_rotate_flip_matrix(
            gradient_raster.width, gradient_raster.height, angle, flip_horizontal, flip_vertical
        )

        warped = cv2.warpAffine(
            gradient_raster.pixels.copy(), matrix[:2], expected.size, flags=cv2.INTER_NEAREST
        )

        assert np.array_equal(warped, expected.pixels)

    def test_flip_applies_before_rotation(self, gradient_raster):
        """Test a flipped 45 degree turn equals turning the mirrored image"""
        mirrored = Raster(gradient_raster.pixels[:, ::-1].copy())

        result = rotate_flip(gradient_raster, 45, flip_horizontal=True)

        assert result == rotate_flip(mirrored, 45)
        assert result != rotate_flip(gradient_raster, 45)
