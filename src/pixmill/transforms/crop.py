"""Crop transforms for pixmill."""

from PIL import Image

from pixmill.dimensions import center_offset
from pixmill.exceptions import InvalidDimensionsError


def crop_image(
    image: Image.Image,
    width: int,
    height: int,
    offset: tuple[int, int] | None = None,
) -> Image.Image:
    """
    Crop a region out of an image.

    Args:
        image: The image to crop
        width: Width of the region
        height: Height of the region
        offset: (x, y) of the region's top-left corner; None centres the
            region, flooring odd remainders

    Returns:
        A new image, or `image` itself when the region covers it entirely

    Raises:
        InvalidDimensionsError: If the region extends past the image
    """
    if image.size == (width, height):
        return image

    x, y = offset if offset is not None else center_offset(image.size, width, height)

    if x < 0 or y < 0 or x + width > image.width or y + height > image.height:
        raise InvalidDimensionsError(
            "Crop dimensions exceed image size",
            context={"image": f"{image.width}x{image.height}", "region": f"{width}x{height}+{x}+{y}"},
        )

    return image.crop((x, y, x + width, y + height))
