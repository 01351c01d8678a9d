"""Pad transform for pixmill."""

from PIL import Image

from pixmill.exceptions import CompositeError
from pixmill.operations import RgbaColor
from pixmill.transforms._utils import ensure_rgba


def pad_image(
    image: Image.Image,
    left: int,
    right: int,
    top: int,
    bottom: int,
    color: RgbaColor,
) -> Image.Image:
    """
    Surround an image with a solid border.

    The padded canvas is always RGBA so a translucent fill colour keeps its
    alpha until the final output conversion.

    Args:
        image: The image to pad
        left: Columns added on the left
        right: Columns added on the right
        top: Rows added on top
        bottom: Rows added at the bottom
        color: Fill colour for the new area

    Returns:
        A new RGBA image, or `image` itself when every margin is zero

    Raises:
        CompositeError: If the source pixels cannot be copied onto the canvas
    """
    if left == right == top == bottom == 0:
        return image

    width = image.width + left + right
    height = image.height + top + bottom

    padded = Image.new("RGBA", (width, height), tuple(color))
    try:
        padded.paste(ensure_rgba(image), (left, top))
    except (ValueError, OSError) as e:
        raise CompositeError("Failed to perform pixel copy") from e
    return padded
