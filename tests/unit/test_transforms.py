"""Tests for pixmill.transforms module."""

import pytest
from PIL import Image

from pixmill.constants import ResizeMode, Rotation
from pixmill.exceptions import CompositeError, InvalidDimensionsError, TransformError
from pixmill.operations import RgbaColor
from pixmill.transforms import (
    crop_image,
    ensure_rgba,
    flip_image,
    overlap_box,
    overlay_image,
    pad_image,
    parse_color,
    parse_rotation,
    rotate_image,
    scale_image,
    swap_red_blue,
)


class TestParseColor:
    """Test colour specification parsing."""

    def test_passthrough(self):
        color = RgbaColor(1, 2, 3, 4)
        assert parse_color(color) is color

    def test_named(self):
        assert parse_color("white") == RgbaColor(255, 255, 255, 255)

    def test_hex_with_alpha(self):
        assert parse_color("#ff000080") == RgbaColor(255, 0, 0, 128)

    def test_rgb_sequence_defaults_alpha(self):
        assert parse_color([10, 20, 30]) == RgbaColor(10, 20, 30, 255)

    def test_rgba_sequence(self):
        assert parse_color((10, 20, 30, 40)) == RgbaColor(10, 20, 30, 40)

    def test_mapping(self):
        assert parse_color({"green": 7}) == RgbaColor(0, 7, 0, 255)

    def test_unknown_name_raises(self):
        with pytest.raises(TransformError, match="Unknown color"):
            parse_color("not-a-colour")

    @pytest.mark.parametrize("value", [(1, 2), (1, 2, 3, 4, 5), (256, 0, 0), (1.0, 2, 3), 42])
    def test_invalid_forms_raise(self, value):
        with pytest.raises(TransformError):
            parse_color(value)

    def test_to_hex(self):
        assert RgbaColor(255, 0, 16).to_hex() == "#ff0010ff"


class TestParseRotation:
    """Test rotation parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [(90, Rotation.CW90), ("180", Rotation.CW180), ("CW270", Rotation.CW270), (Rotation.CW90, Rotation.CW90)],
    )
    def test_valid(self, value, expected):
        assert parse_rotation(value) is expected

    @pytest.mark.parametrize("value", [0, 45, 360, "ninety", "cw"])
    def test_invalid(self, value):
        with pytest.raises(TransformError):
            parse_rotation(value)


class TestScaleImage:
    """Test pixel-level scaling."""

    def test_same_size_returns_input(self):
        image = Image.new("RGBA", (4, 4))
        assert scale_image(image, 4, 4, ResizeMode.FILL) is image

    def test_exact(self):
        assert scale_image(Image.new("RGB", (10, 10)), 3, 7).size == (3, 7)

    def test_fit(self):
        assert scale_image(Image.new("RGB", (100, 50)), 20, 20, ResizeMode.FIT).size == (20, 10)

    def test_fill(self):
        assert scale_image(Image.new("RGB", (100, 50)), 20, 20, ResizeMode.FILL).size == (20, 20)

    def test_fill_keeps_centre(self):
        image = Image.new("RGB", (30, 10), (255, 0, 0))
        image.paste((0, 0, 255), (10, 0, 20, 10))
        result = scale_image(image, 10, 10, ResizeMode.FILL)
        assert result.getpixel((5, 5)) == (0, 0, 255)

    def test_unknown_mode_raises(self):
        with pytest.raises(TransformError):
            scale_image(Image.new("RGB", (2, 2)), 1, 1, "stretch")


class TestCropImage:
    """Test pixel-level cropping."""

    def test_full_size_returns_input(self):
        image = Image.new("RGB", (4, 4))
        assert crop_image(image, 4, 4) is image

    def test_offset(self):
        image = Image.new("RGB", (4, 4))
        image.putpixel((3, 2), (1, 2, 3))
        assert crop_image(image, 1, 1, (3, 2)).getpixel((0, 0)) == (1, 2, 3)

    def test_out_of_bounds_raises(self):
        with pytest.raises(InvalidDimensionsError, match="exceed"):
            crop_image(Image.new("RGB", (4, 4)), 2, 2, (3, 3))


class TestPadImage:
    """Test pixel-level padding."""

    def test_zero_margins_return_input(self):
        image = Image.new("RGB", (2, 2))
        assert pad_image(image, 0, 0, 0, 0, RgbaColor(0, 0, 0)) is image

    def test_rgb_input_becomes_rgba(self):
        result = pad_image(Image.new("RGB", (2, 2), (9, 9, 9)), 1, 0, 0, 0, RgbaColor(1, 2, 3, 4))
        assert result.mode == "RGBA"
        assert result.getpixel((0, 0)) == (1, 2, 3, 4)
        assert result.getpixel((1, 0)) == (9, 9, 9, 255)


class TestFlipAndRotate:
    """Test lossless transposes."""

    def test_flip(self):
        image = Image.new("L", (2, 1))
        image.putpixel((0, 0), 200)
        assert flip_image(image, horizontal=True).getpixel((1, 0)) == 200
        assert flip_image(image, horizontal=False).getpixel((0, 0)) == 200

    def test_rotate_clockwise(self):
        image = Image.new("L", (3, 2))
        image.putpixel((0, 0), 200)
        rotated = rotate_image(image, Rotation.CW90)
        assert rotated.size == (2, 3)
        assert rotated.getpixel((1, 0)) == 200

    def test_rotate_invalid(self):
        with pytest.raises(TransformError):
            rotate_image(Image.new("L", (1, 1)), 45)


class TestOverlay:
    """Test compositing helpers."""

    def test_overlap_box_inside(self):
        assert overlap_box((10, 10), (3, 3), 2, 2) == (2, 2, 5, 5)

    def test_overlap_box_clipped(self):
        assert overlap_box((10, 10), (5, 5), 8, 9) == (8, 9, 10, 10)

    def test_overlap_box_disjoint(self):
        assert overlap_box((10, 10), (5, 5), 10, 0) is None

    def test_overlay_does_not_mutate_base(self):
        base = Image.new("RGBA", (2, 2), (255, 0, 0, 255))
        top = Image.new("RGBA", (1, 1), (0, 0, 255, 255))
        result = overlay_image(base, top, 0, 0)
        assert result.getpixel((0, 0)) == (0, 0, 255, 255)
        assert base.getpixel((0, 0)) == (255, 0, 0, 255)

    def test_half_transparent_blends(self):
        base = Image.new("RGBA", (1, 1), (0, 0, 0, 255))
        top = Image.new("RGBA", (1, 1), (255, 255, 255, 128))
        r, g, b, a = overlay_image(base, top, 0, 0).getpixel((0, 0))
        assert 120 <= r <= 135 and a == 255

    def test_rgb_base_is_promoted(self):
        result = overlay_image(Image.new("RGB", (2, 2)), Image.new("RGBA", (1, 1)), 1, 1)
        assert result.mode == "RGBA"

    def test_composite_failure_is_wrapped(self, monkeypatch):
        def broken(self, *args, **kwargs):
            raise ValueError("boom")

        monkeypatch.setattr(Image.Image, "alpha_composite", broken)
        with pytest.raises(CompositeError, match="boom"):
            overlay_image(Image.new("RGBA", (2, 2)), Image.new("RGBA", (1, 1)), 0, 0)


class TestChannelHelpers:
    """Test channel utilities."""

    def test_swap_red_blue_rgba(self):
        image = Image.new("RGBA", (1, 1), (1, 2, 3, 4))
        assert swap_red_blue(image).getpixel((0, 0)) == (3, 2, 1, 4)

    def test_swap_red_blue_rgb(self):
        image = Image.new("RGB", (1, 1), (1, 2, 3))
        assert swap_red_blue(image).getpixel((0, 0)) == (3, 2, 1)

    def test_ensure_rgba(self):
        image = Image.new("RGBA", (1, 1))
        assert ensure_rgba(image) is image
        assert ensure_rgba(Image.new("RGB", (1, 1))).mode == "RGBA"
