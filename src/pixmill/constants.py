"""Centralized constants and enumerations for pixmill."""

from enum import Enum, IntEnum

from PIL import Image


class PixelFormat(str, Enum):
    """Raw pixel layouts accepted as sources and produced as outputs."""

    RGB = "rgb"
    RGBA = "rgba"
    BGR = "bgr"
    BGRA = "bgra"

    @property
    def bytes_per_pixel(self) -> int:
        return 4 if self.has_alpha else 3

    @property
    def has_alpha(self) -> bool:
        return self in (PixelFormat.RGBA, PixelFormat.BGRA)

    @property
    def is_bgr(self) -> bool:
        return self in (PixelFormat.BGR, PixelFormat.BGRA)

    @property
    def mode(self) -> str:
        """Pillow image mode holding this layout once channels are in RGB order."""
        return "RGBA" if self.has_alpha else "RGB"


class ImageFormat(str, Enum):
    """Encoded container formats."""

    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def pillow_format(self) -> str:
        return self.value.upper()

    @property
    def extension(self) -> str:
        return ".jpg" if self is ImageFormat.JPEG else f".{self.value}"


class ResizeMode(str, Enum):
    """Scale policies."""

    EXACT = "exact"  # Ignore aspect ratio, hit the target exactly
    FILL = "fill"  # Cover the target box, centre-crop the excess
    FIT = "fit"  # Fit inside the target box


class Rotation(IntEnum):
    """Clockwise rotation in degrees."""

    CW90 = 90
    CW180 = 180
    CW270 = 270


# Transform types accepted in pipeline configuration files
TRANSFORM_TYPES = ("scale", "crop", "crop_center", "pad", "flip", "rotate", "overlay")

# Encoding
DEFAULT_JPEG_QUALITY = 75
MIN_QUALITY = 0
MAX_QUALITY = 100

# Single resampling kernel used by every scale operation
RESAMPLING_FILTER = Image.Resampling.LANCZOS

# Overlay specs may nest; rendering refuses anything deeper than this
MAX_OVERLAY_DEPTH = 16

# Environment variable consulted by the output isolation probe
COPY_OUTPUT_ENV = "PIXMILL_COPY_OUTPUT"

# Suffixes picked up when scanning an input directory
IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif", ".tif", ".tiff")

# Suffixes for raw pixel dumps written by the processor
RAW_EXTENSIONS = {
    PixelFormat.RGB: ".rgb",
    PixelFormat.RGBA: ".rgba",
    PixelFormat.BGR: ".bgr",
    PixelFormat.BGRA: ".bgra",
}
