"""Operation catalog for transform specs.

The set of operations is closed: every consumer (dimension model, render
engine, builder validation) handles each of the classes below explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple, Union

from pixmill.constants import ResizeMode, Rotation

if TYPE_CHECKING:
    from pixmill.spec import TransformSpec


class RgbaColor(NamedTuple):
    """An 8-bit RGBA colour."""

    red: int
    green: int
    blue: int
    alpha: int = 255

    def to_hex(self) -> str:
        return "#{:02x}{:02x}{:02x}{:02x}".format(*self)


TRANSPARENT = RgbaColor(0, 0, 0, 0)


@dataclass(frozen=True)
class Scale:
    width: int
    height: int
    mode: ResizeMode = ResizeMode.EXACT

    def describe(self) -> str:
        return f"scale_{self.width}x{self.height}_{self.mode.value}"


@dataclass(frozen=True)
class Crop:
    x: int
    y: int
    width: int
    height: int

    def describe(self) -> str:
        return f"crop_{self.x}_{self.y}_{self.width}x{self.height}"


@dataclass(frozen=True)
class CropCenter:
    width: int
    height: int

    def describe(self) -> str:
        return f"cropcenter_{self.width}x{self.height}"


@dataclass(frozen=True)
class Pad:
    left: int
    right: int
    top: int
    bottom: int
    color: RgbaColor = TRANSPARENT

    def describe(self) -> str:
        return f"pad_{self.left}_{self.right}_{self.top}_{self.bottom}"


@dataclass(frozen=True)
class FlipHorizontal:
    def describe(self) -> str:
        return "fliph"


@dataclass(frozen=True)
class FlipVertical:
    def describe(self) -> str:
        return "flipv"


@dataclass(frozen=True)
class Rotate:
    rotation: Rotation

    def describe(self) -> str:
        return f"rotate{int(self.rotation)}"


@dataclass(frozen=True, eq=False)
class Overlay:
    """Composite another spec onto the current canvas.

    The nested spec is owned by this operation; builders store a clone so
    the overlay is unaffected by later changes to the spec it came from.
    """

    spec: TransformSpec
    x: int
    y: int

    def describe(self) -> str:
        return f"overlay_{self.x}_{self.y}"


Operation = Union[
    Scale,
    Crop,
    CropCenter,
    Pad,
    FlipHorizontal,
    FlipVertical,
    Rotate,
    Overlay,
]
