"""Scale transform for pixmill."""

from PIL import Image

from pixmill.constants import RESAMPLING_FILTER, ResizeMode
from pixmill.dimensions import center_offset, resize_dimensions
from pixmill.exceptions import TransformError


def scale_image(
    image: Image.Image,
    width: int,
    height: int,
    mode: ResizeMode = ResizeMode.EXACT,
) -> Image.Image:
    """
    Resize an image to the target dimensions.

    Args:
        image: The image to resize
        width: Target width in pixels
        height: Target height in pixels
        mode: ResizeMode enum value:
            - EXACT: Stretch non-uniformly to exactly match target
            - FILL: Scale uniformly to cover target, then crop the centre
            - FIT: Scale uniformly to fit within target (result may be smaller)

    Returns:
        A new image, or `image` itself when it already has the target size
    """
    if image.size == (width, height):
        return image

    if mode == ResizeMode.EXACT:
        return image.resize((width, height), RESAMPLING_FILTER)

    if mode == ResizeMode.FIT:
        size = resize_dimensions(image.width, image.height, width, height, fill=False)
        if size == image.size:
            return image
        return image.resize(size, RESAMPLING_FILTER)

    if mode == ResizeMode.FILL:
        cover = resize_dimensions(image.width, image.height, width, height, fill=True)
        scaled = image if cover == image.size else image.resize(cover, RESAMPLING_FILTER)
        # Rounding can leave the cover a pixel short on the fixed axis
        crop_width = min(width, scaled.width)
        crop_height = min(height, scaled.height)
        left, top = center_offset(scaled.size, crop_width, crop_height)
        cropped = scaled.crop((left, top, left + crop_width, top + crop_height))
        if cropped.size != (width, height):
            cropped = cropped.resize((width, height), RESAMPLING_FILTER)
        return cropped

    valid = ", ".join(m.value for m in ResizeMode)
    raise TransformError(f"Unknown resize mode: {mode}. Valid options: {valid}")
