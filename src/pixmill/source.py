"""Source descriptors: raw pixel buffers and encoded image containers."""

from __future__ import annotations

import base64
import binascii
import io
import re
from dataclasses import dataclass
from typing import Union
from urllib.parse import unquote_to_bytes

from PIL import Image, UnidentifiedImageError

from pixmill.constants import PixelFormat
from pixmill.exceptions import DecodeError, InvalidDimensionsError, InvalidPixelBufferError
from pixmill.logging_config import get_logger

logger = get_logger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]

_DATA_URL_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(?:;[\w.+-]+=[\w.+-]+)*)"
    r"(?P<base64>;base64)?,(?P<payload>.*)$",
    re.DOTALL,
)


def _as_bytes(buffer: BytesLike) -> bytes:
    if isinstance(buffer, bytes):
        return buffer
    if isinstance(buffer, (bytearray, memoryview)):
        return bytes(buffer)
    raise TypeError(f"Expected a bytes-like buffer, got {type(buffer).__name__}")


def _check_size(width: int, height: int) -> None:
    if not isinstance(width, int) or not isinstance(height, int) or width <= 0 or height <= 0:
        raise InvalidDimensionsError(
            "Source dimensions must be positive integers",
            context={"width": width, "height": height},
        )


@dataclass(frozen=True, eq=False)
class RawSource:
    """An uncompressed pixel buffer with caller-supplied geometry.

    The buffer length is only checked when the source is rendered.
    """

    buffer: bytes
    width: int
    height: int
    format: PixelFormat

    @classmethod
    def create(
        cls,
        buffer: BytesLike,
        width: int,
        height: int,
        format: PixelFormat | str,
    ) -> RawSource:
        _check_size(width, height)
        return cls(_as_bytes(buffer), width, height, PixelFormat(format))

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def expected_length(self) -> int:
        return self.width * self.height * self.format.bytes_per_pixel

    def validate(self) -> None:
        """Raise InvalidPixelBufferError if the buffer does not match the geometry."""
        if len(self.buffer) != self.expected_length:
            raise InvalidPixelBufferError(
                "Invalid pixel buffer",
                context={
                    "expected": self.expected_length,
                    "actual": len(self.buffer),
                    "format": self.format.value,
                },
            )


@dataclass(frozen=True, eq=False)
class EncodedSource:
    """Container-encoded image bytes (PNG, JPEG, WebP, ...).

    Construct via `from_bytes`, which reads the header to learn the
    container and dimensions without decoding pixels.
    """

    data: bytes
    width: int
    height: int
    container: str

    @classmethod
    def from_bytes(cls, data: BytesLike) -> EncodedSource:
        data = _as_bytes(data)
        if not data:
            raise DecodeError("Empty image data")
        try:
            with Image.open(io.BytesIO(data)) as probe:
                width, height = probe.size
                container = probe.format or "unknown"
        except UnidentifiedImageError as e:
            raise DecodeError("Unrecognized image format", context={"length": len(data)}) from e
        except Image.DecompressionBombError as e:
            raise DecodeError(f"Image too large to decode: {e}") from e
        except (OSError, ValueError, SyntaxError) as e:
            raise DecodeError(f"Failed to read image header: {e}") from e

        logger.debug("Detected %s image %dx%d", container, width, height)
        return cls(data, width, height, container)

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


Source = Union[RawSource, EncodedSource]


def parse_data_url(url: str) -> bytes:
    """
    Extract the payload of a data URL.

    Supports both base64 and percent-encoded payloads, e.g.
    "data:image/png;base64,iVBORw0...".

    Args:
        url: The data URL

    Returns:
        Decoded payload bytes

    Raises:
        DecodeError: If the URL is malformed or the payload cannot be decoded
    """
    if not isinstance(url, str):
        raise DecodeError("Data URL must be a string")

    match = _DATA_URL_RE.match(url.strip())
    if not match:
        raise DecodeError("Invalid data URL: expected 'data:[<mime>][;base64],<payload>'")

    mime = match.group("mime")
    if mime and not mime.lower().startswith("image/"):
        raise DecodeError(f"Data URL does not contain an image: {mime}")

    payload = match.group("payload")
    if match.group("base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"Invalid base64 payload in data URL: {e}") from e

    return unquote_to_bytes(payload)
