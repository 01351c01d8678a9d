"""Fluent builder over a TransformSpec.

Usage:
    from pixmill import ImageTransformer, ResizeMode, Rotation

    result = (
        ImageTransformer.from_encoded_image(png_bytes)
        .scale(200, 200, ResizeMode.FILL)
        .rotate(Rotation.CW90)
        .to_encoded_image_sync("jpeg", EncodingOptions(quality=0.8))
    )

Every mutator validates against the currently tracked size and raises
without touching the operation list when validation fails.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future
from typing import NamedTuple

from pixmill.constants import ImageFormat, PixelFormat, ResizeMode, Rotation
from pixmill.encoding import EncodingOptions, OutputTarget, parse_target, to_data_url
from pixmill.exceptions import EncodeError, InvalidDimensionsError, OutOfBoundsError, TransformError
from pixmill.executor import ComputedImage, render, render_async
from pixmill.operations import (
    Crop,
    CropCenter,
    FlipHorizontal,
    FlipVertical,
    Overlay,
    Pad,
    Rotate,
    Scale,
)
from pixmill.source import BytesLike, EncodedSource, RawSource, parse_data_url
from pixmill.spec import TransformSpec
from pixmill.transforms import parse_color, parse_rotation
from pixmill.transforms._utils import ColorSpec


class ImageInfo(NamedTuple):
    width: int
    height: int


def _require_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidDimensionsError(f"'{name}' must be an integer, got {value!r}")
    return value


def _require_positive(**values: object) -> None:
    for name, value in values.items():
        if _require_int(name, value) <= 0:
            raise InvalidDimensionsError("Invalid dimensions", context=dict(values))


def _require_non_negative(**values: object) -> None:
    for name, value in values.items():
        if _require_int(name, value) < 0:
            raise InvalidDimensionsError("Invalid dimensions", context=dict(values))


def _pixel_format(format: PixelFormat | str) -> PixelFormat:
    target = parse_target(format)
    if not isinstance(target, PixelFormat):
        raise EncodeError(f"Expected a raw pixel layout, got image format '{target.value}'")
    return target


def _resize_mode(mode: ResizeMode | str | None) -> ResizeMode:
    if mode is None:
        return ResizeMode.EXACT
    if isinstance(mode, ResizeMode):
        return mode
    try:
        return ResizeMode(str(mode).lower())
    except ValueError:
        valid = ", ".join(m.value for m in ResizeMode)
        raise TransformError(f"Unknown resize mode: {mode}. Valid options: {valid}")


def _image_format(format: ImageFormat | str) -> ImageFormat:
    target = parse_target(format)
    if not isinstance(target, ImageFormat):
        raise EncodeError(f"Expected an image container format, got raw layout '{target.value}'")
    return target


class ImageTransformer:
    """Accumulates operations against a source image and renders them on demand."""

    def __init__(self, spec: TransformSpec):
        self.spec = spec

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_buffer(
        cls,
        buffer: BytesLike,
        width: int,
        height: int,
        format: PixelFormat | str,
    ) -> ImageTransformer:
        """Create a transformer from a raw pixel buffer.

        The buffer length is validated when the image is rendered.
        """
        return cls(TransformSpec(RawSource.create(buffer, width, height, format)))

    @classmethod
    def from_encoded_image(cls, data: BytesLike) -> ImageTransformer:
        """Create a transformer from PNG/JPEG/WebP/... bytes.

        Raises:
            DecodeError: If the container or its dimensions cannot be read
        """
        return cls(TransformSpec(EncodedSource.from_bytes(data)))

    @classmethod
    def from_image_data_url(cls, data_url: str) -> ImageTransformer:
        """Create a transformer from a "data:image/...;base64,..." URL."""
        return cls.from_encoded_image(parse_data_url(data_url))

    def clone(self) -> ImageTransformer:
        """Independent copy sharing the source bytes."""
        return ImageTransformer(self.spec.clone())

    # ------------------------------------------------------------------
    # Builder steps
    # ------------------------------------------------------------------

    def scale(
        self,
        width: int,
        height: int,
        mode: ResizeMode | str | None = None,
    ) -> ImageTransformer:
        """Add a scale step.

        Args:
            width: Target width
            height: Target height
            mode: How to handle differing aspect ratios (default EXACT)
        """
        _require_positive(width=width, height=height)
        mode = _resize_mode(mode)
        self.spec.append(Scale(width, height, mode))
        return self

    def crop(self, x: int, y: int, width: int, height: int) -> ImageTransformer:
        """Add a crop step with an explicit top-left offset."""
        _require_non_negative(x=x, y=y)
        _require_positive(width=width, height=height)
        current_width, current_height = self.spec.current_size()
        if x + width > current_width or y + height > current_height:
            raise InvalidDimensionsError(
                "Invalid dimensions",
                context={
                    "current": f"{current_width}x{current_height}",
                    "crop": f"{width}x{height}+{x}+{y}",
                },
            )
        self.spec.append(Crop(x, y, width, height))
        return self

    def crop_center(self, width: int, height: int) -> ImageTransformer:
        """Add a centred crop step."""
        _require_positive(width=width, height=height)
        current_width, current_height = self.spec.current_size()
        if width > current_width or height > current_height:
            raise InvalidDimensionsError(
                "Invalid dimensions",
                context={"current": f"{current_width}x{current_height}", "crop": f"{width}x{height}"},
            )
        self.spec.append(CropCenter(width, height))
        return self

    def pad(
        self,
        left: int,
        right: int,
        top: int,
        bottom: int,
        color: ColorSpec = (0, 0, 0, 0),
    ) -> ImageTransformer:
        """Pad the image by the given margins with a fill colour."""
        _require_non_negative(left=left, right=right, top=top, bottom=bottom)
        self.spec.append(Pad(left, right, top, bottom, parse_color(color)))
        return self

    def flip_horizontal(self) -> ImageTransformer:
        self.spec.append(FlipHorizontal())
        return self

    def flip_vertical(self) -> ImageTransformer:
        self.spec.append(FlipVertical())
        return self

    def rotate(self, rotation: Rotation | int | str) -> ImageTransformer:
        """Add a clockwise rotation step (90, 180 or 270 degrees)."""
        self.spec.append(Rotate(parse_rotation(rotation)))
        return self

    def overlay(self, other: ImageTransformer | TransformSpec, x: int, y: int) -> ImageTransformer:
        """Composite another image on top of the current one.

        Only the anchor has to land on the canvas; the overlay may extend
        past the right or bottom edge and is clipped when rendered.

        Raises:
            OutOfBoundsError: If (x, y) lies outside the current canvas
        """
        x = _require_int("x", x)
        y = _require_int("y", y)
        current_width, current_height = self.spec.current_size()
        if x < 0 or y < 0 or x >= current_width or y >= current_height:
            raise OutOfBoundsError(
                "Overlay position is outside the image bounds",
                context={"current": f"{current_width}x{current_height}", "x": x, "y": y},
            )
        other_spec = other.spec if isinstance(other, ImageTransformer) else other
        self.spec.append(Overlay(other_spec.clone(), x, y))
        return self

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_current_dimensions(self) -> ImageInfo:
        """Size the image will have once rendered; no pixels are touched."""
        return ImageInfo(*self.spec.current_size())

    current_dimensions = get_current_dimensions

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_buffer_sync(self, format: PixelFormat | str = PixelFormat.RGBA) -> ComputedImage:
        """Render to a raw pixel buffer on the calling thread.

        This blocks the caller for the whole render; prefer `to_buffer`
        when running inside a service loop.
        """
        return render(self.spec, _pixel_format(format))

    def to_buffer(self, format: PixelFormat | str = PixelFormat.RGBA) -> Future[ComputedImage]:
        """Render to a raw pixel buffer on the worker pool."""
        return render_async(self.spec, _pixel_format(format))

    def to_encoded_image_sync(
        self,
        format: ImageFormat | str,
        options: EncodingOptions | None = None,
    ) -> ComputedImage:
        """Render and encode to PNG/JPEG/WebP on the calling thread."""
        return render(self.spec, _image_format(format), options)

    def to_encoded_image(
        self,
        format: ImageFormat | str,
        options: EncodingOptions | None = None,
        executor: Executor | None = None,
    ) -> Future[ComputedImage]:
        """Render and encode to PNG/JPEG/WebP on the worker pool."""
        return render_async(self.spec, _image_format(format), options, executor)

    def to_data_url_sync(
        self,
        format: ImageFormat | str,
        options: EncodingOptions | None = None,
    ) -> str:
        target = _image_format(format)
        result = render(self.spec, target, options)
        return to_data_url(result.buffer, target)

    def to_data_url(
        self,
        format: ImageFormat | str,
        options: EncodingOptions | None = None,
        executor: Executor | None = None,
    ) -> Future[str]:
        target = _image_format(format)
        encoded = render_async(self.spec, target, options, executor)
        url: Future[str] = Future()

        def _finish(done: Future[ComputedImage]) -> None:
            if done.cancelled():
                url.cancel()
                return
            error = done.exception()
            if error is not None:
                url.set_exception(error)
            else:
                url.set_result(to_data_url(done.result().buffer, target))

        encoded.add_done_callback(_finish)
        return url

    def render(
        self,
        target: OutputTarget | str = PixelFormat.RGBA,
        options: EncodingOptions | None = None,
    ) -> ComputedImage:
        """Blocking render to any target."""
        return render(self.spec, target, options)

    def render_async(
        self,
        target: OutputTarget | str = PixelFormat.RGBA,
        options: EncodingOptions | None = None,
        executor: Executor | None = None,
    ) -> Future[ComputedImage]:
        """Non-blocking render to any target."""
        return render_async(self.spec, target, options, executor)

    def __repr__(self) -> str:
        width, height = self.spec.current_size()
        return f"ImageTransformer({width}x{height}, ops={self.spec.describe()})"
