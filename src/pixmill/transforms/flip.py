"""Flip transforms for pixmill."""

from PIL import Image


def flip_image(image: Image.Image, horizontal: bool) -> Image.Image:
    """Mirror an image left-right (`horizontal`) or top-bottom."""
    if horizontal:
        return image.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    return image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
