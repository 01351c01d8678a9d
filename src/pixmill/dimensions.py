"""Symbolic size tracking for transform specs.

Everything here works on (width, height) tuples only; no pixel data is
touched. The render engine produces images whose sizes match these
predictions for every operation.
"""

import math
from collections.abc import Iterable

from pixmill.constants import ResizeMode, Rotation
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

Size = tuple[int, int]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def resize_dimensions(
    width: int,
    height: int,
    target_width: int,
    target_height: int,
    fill: bool,
) -> Size:
    """
    Compute an aspect-preserving size for a target box.

    Args:
        width: Current width
        height: Current height
        target_width: Target box width
        target_height: Target box height
        fill: True to cover the box (larger ratio), False to fit inside it

    Returns:
        (width, height), each side rounded to nearest and at least 1
    """
    width_ratio = target_width / width
    height_ratio = target_height / height
    ratio = max(width_ratio, height_ratio) if fill else min(width_ratio, height_ratio)

    new_width = max(_round_half_up(width * ratio), 1)
    new_height = max(_round_half_up(height * ratio), 1)
    return new_width, new_height


def next_size(size: Size, op: Operation) -> Size:
    """Return the size after applying a single operation to `size`."""
    width, height = size

    if isinstance(op, Scale):
        if op.mode == ResizeMode.FIT:
            return resize_dimensions(width, height, op.width, op.height, fill=False)
        # Exact and Fill both land on the target box
        return op.width, op.height
    if isinstance(op, (Crop, CropCenter)):
        return op.width, op.height
    if isinstance(op, Pad):
        return width + op.left + op.right, height + op.top + op.bottom
    if isinstance(op, (FlipHorizontal, FlipVertical)):
        return size
    if isinstance(op, Rotate):
        if op.rotation == Rotation.CW180:
            return size
        return height, width
    if isinstance(op, Overlay):
        return size
    raise TypeError(f"Unknown operation: {op!r}")


def current_size(width: int, height: int, operations: Iterable[Operation]) -> Size:
    """Fold `next_size` over an operation sequence."""
    size = (width, height)
    for op in operations:
        size = next_size(size, op)
    return size


def center_offset(size: Size, width: int, height: int) -> tuple[int, int]:
    """Top-left offset of a centred `width` x `height` box inside `size` (floored)."""
    return (size[0] - width) // 2, (size[1] - height) // 2
