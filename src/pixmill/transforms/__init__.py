"""Pixel-level transform functions for pixmill.

Each function takes a Pillow image and returns a new one (or the input
unchanged for documented no-ops); none of them mutate their input.

Usage:
    from pixmill.transforms import scale_image, rotate_image

    image = scale_image(image, 200, 100, ResizeMode.FILL)
    image = rotate_image(image, Rotation.CW90)
"""

from pixmill.transforms._utils import ensure_rgba, parse_color, swap_red_blue
from pixmill.transforms.crop import crop_image
from pixmill.transforms.flip import flip_image
from pixmill.transforms.overlay import overlap_box, overlay_image
from pixmill.transforms.pad import pad_image
from pixmill.transforms.rotate import parse_rotation, rotate_image
from pixmill.transforms.scale import scale_image

__all__ = [
    # Transform functions
    "scale_image",
    "crop_image",
    "pad_image",
    "flip_image",
    "rotate_image",
    "overlay_image",
    # Utilities
    "overlap_box",
    "parse_color",
    "parse_rotation",
    "ensure_rgba",
    "swap_red_blue",
]
