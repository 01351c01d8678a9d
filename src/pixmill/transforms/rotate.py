"""Rotate transform for pixmill."""

from PIL import Image

from pixmill.constants import Rotation
from pixmill.exceptions import InvalidDimensionsError

# Pillow's transpose constants rotate counter-clockwise
_TRANSPOSE_FOR_ROTATION = {
    Rotation.CW90: Image.Transpose.ROTATE_270,
    Rotation.CW180: Image.Transpose.ROTATE_180,
    Rotation.CW270: Image.Transpose.ROTATE_90,
}


def parse_rotation(value: Rotation | int | str) -> Rotation:
    """Accept 90/180/270 as ints, digit strings, or "CW90"-style names."""
    if isinstance(value, str):
        text = value.strip().upper()
        if text.startswith("CW"):
            text = text[2:]
        value = int(text) if text.isdigit() else -1
    try:
        return Rotation(value)
    except ValueError:
        raise InvalidDimensionsError(f"Rotation angle must be 90, 180, or 270, got {value}")


def rotate_image(image: Image.Image, rotation: Rotation | int) -> Image.Image:
    """
    Rotate an image clockwise by a multiple of 90 degrees.

    This is a lossless pixel transpose, so rotating by 90 then 270 returns
    the original pixels.

    Args:
        image: The image to rotate
        rotation: Rotation enum value, 90, 180, 270 or "CW90"-style name

    Returns:
        The rotated image (90/270 swap width and height)

    Raises:
        InvalidDimensionsError: If rotation is not 90, 180, or 270
    """
    return image.transpose(_TRANSPOSE_FOR_ROTATION[parse_rotation(rotation)])
