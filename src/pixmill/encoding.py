"""Encoder / format adapter: rendered images to raw pixels or containers."""

import base64
import io
import math
from dataclasses import dataclass
from typing import Union

from PIL import Image

from pixmill.constants import (
    DEFAULT_JPEG_QUALITY,
    MAX_QUALITY,
    MIN_QUALITY,
    ImageFormat,
    PixelFormat,
)
from pixmill.exceptions import EncodeError
from pixmill.transforms import swap_red_blue

OutputTarget = Union[PixelFormat, ImageFormat]


@dataclass(frozen=True)
class EncodingOptions:
    """Options for container encoders.

    Attributes:
        quality: 0.0-1.0; only meaningful for lossy containers. None selects
            the default quality.
    """

    quality: float | None = None


def parse_target(target: OutputTarget | str) -> OutputTarget:
    """Resolve a target given as an enum or its string value ("png", "rgba", ...)."""
    if isinstance(target, (PixelFormat, ImageFormat)):
        return target
    value = str(target).lower()
    if value == "jpg":
        value = "jpeg"
    for enum_class in (PixelFormat, ImageFormat):
        try:
            return enum_class(value)
        except ValueError:
            continue
    valid = ", ".join([f.value for f in PixelFormat] + [f.value for f in ImageFormat])
    raise EncodeError(f"Unknown output format: {target}. Valid options: {valid}")


def jpeg_quality(quality: float | None) -> int:
    """Map a 0.0-1.0 quality to the codec's 0-100 scale (clamped)."""
    if quality is None:
        return DEFAULT_JPEG_QUALITY
    if isinstance(quality, bool) or not isinstance(quality, (int, float)) or math.isnan(quality):
        raise EncodeError(f"Quality must be a number between 0.0 and 1.0, got {quality!r}")
    scaled = int(math.floor(quality * 100 + 0.5))
    return max(MIN_QUALITY, min(MAX_QUALITY, scaled))


def encode_pixels(image: Image.Image, format: PixelFormat) -> bytes:
    """
    Pack an image into a raw pixel layout.

    RGB/BGR drop alpha; RGBA/BGRA add opaque alpha when the image has none.

    Args:
        image: Rendered image
        format: Target pixel layout

    Returns:
        Packed bytes, width * height * bytes_per_pixel long
    """
    converted = image if image.mode == format.mode else image.convert(format.mode)
    if format.is_bgr:
        converted = swap_red_blue(converted)
    return converted.tobytes()


def encode_image(
    image: Image.Image,
    format: ImageFormat,
    options: EncodingOptions | None = None,
) -> bytes:
    """
    Serialize an image into a container format.

    JPEG has no alpha channel, so the image is flattened to RGB first. PNG
    and WebP (written lossless) keep the alpha channel.

    Args:
        image: Rendered image
        format: Target container
        options: Encoding options (quality)

    Returns:
        Encoded bytes

    Raises:
        EncodeError: If the codec fails
    """
    options = options or EncodingOptions()
    buffer = io.BytesIO()

    try:
        if format == ImageFormat.JPEG:
            rgb = image if image.mode == "RGB" else image.convert("RGB")
            rgb.save(buffer, format="JPEG", quality=jpeg_quality(options.quality))
        elif format == ImageFormat.PNG:
            image.save(buffer, format="PNG")
        elif format == ImageFormat.WEBP:
            # In lossless mode quality controls compression effort
            image.save(buffer, format="WEBP", lossless=True, quality=jpeg_quality(options.quality))
        else:
            valid = ", ".join(f.value for f in ImageFormat)
            raise EncodeError(f"Unknown image format: {format}. Valid options: {valid}")
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"Failed to encode {format.value}: {e}") from e

    return buffer.getvalue()


def encode(
    image: Image.Image,
    target: OutputTarget,
    options: EncodingOptions | None = None,
) -> bytes:
    """Encode to either a raw pixel layout or a container, depending on `target`."""
    if isinstance(target, PixelFormat):
        return encode_pixels(image, target)
    return encode_image(image, target, options)


def to_data_url(data: bytes, format: ImageFormat) -> str:
    """Wrap encoded image bytes in a base64 data URL."""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{format.mime_type};base64,{payload}"
