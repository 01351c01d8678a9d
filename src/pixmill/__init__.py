"""pixmill - Deferred image transform pipeline."""

import logging

__version__ = "0.1.0"

# Prevent "No handler found" warnings when used as a library
logging.getLogger("pixmill").addHandler(logging.NullHandler())

from pixmill.constants import ImageFormat, PixelFormat, ResizeMode, Rotation  # noqa: E402
from pixmill.encoding import EncodingOptions  # noqa: E402
from pixmill.executor import ComputedImage, render, render_async  # noqa: E402
from pixmill.operations import RgbaColor  # noqa: E402
from pixmill.spec import TransformSpec  # noqa: E402
from pixmill.transformer import ImageInfo, ImageTransformer  # noqa: E402

__all__ = [
    "__version__",
    "ComputedImage",
    "EncodingOptions",
    "ImageFormat",
    "ImageInfo",
    "ImageTransformer",
    "PixelFormat",
    "ResizeMode",
    "RgbaColor",
    "Rotation",
    "TransformSpec",
    "render",
    "render_async",
]
