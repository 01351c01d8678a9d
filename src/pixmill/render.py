"""Render engine: materializes a transform spec into a Pillow image."""

import io

from PIL import Image

from pixmill.constants import MAX_OVERLAY_DEPTH
from pixmill.exceptions import CompositeError, DecodeError
from pixmill.logging_config import get_logger
from pixmill.operations import (
    Crop,
    CropCenter,
    FlipHorizontal,
    FlipVertical,
    Operation,
    Overlay,
    Pad,
    Rotate,
    Scale,
)
from pixmill.source import EncodedSource, RawSource, Source
from pixmill.spec import TransformSpec
from pixmill.transforms import (
    crop_image,
    flip_image,
    overlay_image,
    pad_image,
    rotate_image,
    scale_image,
    swap_red_blue,
)

logger = get_logger(__name__)


def _normalize_mode(image: Image.Image) -> Image.Image:
    """Bring a decoded image into RGB or RGBA."""
    if image.mode in ("RGB", "RGBA"):
        return image
    has_alpha = "A" in image.getbands() or "transparency" in image.info
    return image.convert("RGBA" if has_alpha else "RGB")


def load_source(source: Source) -> Image.Image:
    """
    Materialize a source descriptor into an RGB or RGBA image.

    Args:
        source: Raw pixel buffer or encoded container bytes

    Returns:
        A freshly allocated Pillow image

    Raises:
        InvalidPixelBufferError: If a raw buffer's length does not match its geometry
        DecodeError: If encoded bytes cannot be decoded
    """
    if isinstance(source, RawSource):
        source.validate()
        image = Image.frombytes(source.format.mode, source.size, source.buffer)
        if source.format.is_bgr:
            image = swap_red_blue(image)
        return image

    if isinstance(source, EncodedSource):
        try:
            with Image.open(io.BytesIO(source.data)) as decoded:
                decoded.load()
                image = _normalize_mode(decoded)
                if image is decoded:
                    image = decoded.copy()
        except Image.DecompressionBombError as e:
            raise DecodeError(f"Image too large to decode: {e}") from e
        except (OSError, ValueError, SyntaxError) as e:
            raise DecodeError(f"Failed to decode {source.container} image: {e}") from e

        if image.size != source.size:
            raise DecodeError(
                "Decoded image size does not match its header",
                context={"header": source.size, "decoded": image.size},
            )
        return image

    raise TypeError(f"Unknown source type: {type(source).__name__}")


def apply_operation(image: Image.Image, op: Operation, depth: int = 0) -> Image.Image:
    """
    Apply one operation to a rendered image.

    Args:
        image: The current image
        op: Operation to apply
        depth: Overlay nesting level of the spec being rendered

    Returns:
        The resulting image
    """
    if isinstance(op, Scale):
        return scale_image(image, op.width, op.height, op.mode)
    if isinstance(op, Crop):
        return crop_image(image, op.width, op.height, (op.x, op.y))
    if isinstance(op, CropCenter):
        return crop_image(image, op.width, op.height)
    if isinstance(op, Pad):
        return pad_image(image, op.left, op.right, op.top, op.bottom, op.color)
    if isinstance(op, FlipHorizontal):
        return flip_image(image, horizontal=True)
    if isinstance(op, FlipVertical):
        return flip_image(image, horizontal=False)
    if isinstance(op, Rotate):
        return rotate_image(image, op.rotation)
    if isinstance(op, Overlay):
        top = render_image(op.spec, depth=depth + 1)
        return overlay_image(image, top, op.x, op.y)
    raise TypeError(f"Unknown operation: {op!r}")


def render_image(spec: TransformSpec, depth: int = 0) -> Image.Image:
    """
    Render a transform spec into a fully materialized image.

    Operations run in append order; each produces a new image that
    replaces the previous one. Overlay specs are rendered independently
    and recursively.

    Args:
        spec: The spec to render
        depth: Current overlay nesting level (0 for the outermost spec)

    Returns:
        The final RGB or RGBA image

    Raises:
        CompositeError: If overlays nest deeper than MAX_OVERLAY_DEPTH
    """
    if depth > MAX_OVERLAY_DEPTH:
        raise CompositeError(
            "Overlay nesting exceeds maximum depth",
            context={"max_depth": MAX_OVERLAY_DEPTH},
        )

    image = load_source(spec.source)
    logger.debug("Loaded source %dx%d (%s)", image.width, image.height, image.mode)

    for step, op in enumerate(spec.operations, start=1):
        image = apply_operation(image, op, depth)
        logger.debug("  step %d %s -> %dx%d", step, op.describe(), image.width, image.height)

    return image
