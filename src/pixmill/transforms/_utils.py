"""Shared utilities for pixel transforms."""

from collections.abc import Mapping, Sequence
from typing import Any, Union

from PIL import Image, ImageColor

from pixmill.exceptions import TransformError
from pixmill.operations import RgbaColor

ColorSpec = Union[RgbaColor, str, Sequence[int], Mapping[str, int]]


def _channel(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 255:
        raise TransformError(f"Color channel '{name}' must be an integer in 0-255, got {value!r}")
    return value


def parse_color(color: ColorSpec) -> RgbaColor:
    """
    Normalize a colour specification to an RgbaColor.

    Supports:
      - RgbaColor instances
      - (r, g, b) or (r, g, b, a) sequences
      - mappings with red/green/blue[/alpha] keys
      - strings understood by PIL.ImageColor ("#ff000080", "red", "rgb(0,0,0)")

    Args:
        color: Colour in any supported form

    Returns:
        RgbaColor (alpha defaults to 255 when not given)

    Raises:
        TransformError: If the colour cannot be interpreted
    """
    if isinstance(color, RgbaColor):
        return color

    if isinstance(color, str):
        try:
            return RgbaColor(*ImageColor.getcolor(color, "RGBA"))
        except ValueError as e:
            raise TransformError(
                f"Unknown color: {color}. Use a color name (e.g., 'black') or hex code (e.g., '#FF000080')"
            ) from e

    if isinstance(color, Mapping):
        return RgbaColor(
            _channel(color.get("red", 0), "red"),
            _channel(color.get("green", 0), "green"),
            _channel(color.get("blue", 0), "blue"),
            _channel(color.get("alpha", 255), "alpha"),
        )

    if isinstance(color, Sequence) and len(color) in (3, 4):
        names = ("red", "green", "blue", "alpha")
        return RgbaColor(*(_channel(v, n) for v, n in zip(color, names)))

    raise TransformError(f"Unsupported color specification: {color!r}")


def ensure_rgba(image: Image.Image) -> Image.Image:
    """Return `image` in RGBA mode, converting (and copying) only when needed."""
    if image.mode == "RGBA":
        return image
    return image.convert("RGBA")


def swap_red_blue(image: Image.Image) -> Image.Image:
    """Exchange the red and blue channels (RGB <-> BGR, RGBA <-> BGRA)."""
    bands = image.split()
    if image.mode == "RGBA":
        r, g, b, a = bands
        return Image.merge("RGBA", (b, g, r, a))
    r, g, b = bands
    return Image.merge("RGB", (b, g, r))
