"""Overlay transform for pixmill."""

from PIL import Image

from pixmill.exceptions import CompositeError
from pixmill.transforms._utils import ensure_rgba


def overlap_box(
    base_size: tuple[int, int],
    overlay_size: tuple[int, int],
    x: int,
    y: int,
) -> tuple[int, int, int, int] | None:
    """
    Intersect an overlay placed at (x, y) with the base canvas.

    Returns:
        (left, top, right, bottom) in base coordinates, or None when the two
        rectangles do not overlap
    """
    left = max(x, 0)
    top = max(y, 0)
    right = min(x + overlay_size[0], base_size[0])
    bottom = min(y + overlay_size[1], base_size[1])
    if right <= left or bottom <= top:
        return None
    return left, top, right, bottom


def overlay_image(
    base: Image.Image,
    overlay: Image.Image,
    x: int,
    y: int,
) -> Image.Image:
    """
    Alpha-composite `overlay` onto `base` with its top-left corner at (x, y).

    Only the region where both rectangles overlap is touched; overlay
    pixels that fall outside the base are dropped.

    Args:
        base: The canvas
        overlay: The image drawn on top
        x: Anchor column on the base (may place the overlay partly off-canvas)
        y: Anchor row on the base

    Returns:
        A new RGBA image the size of `base`

    Raises:
        CompositeError: If Pillow fails to composite the two buffers
    """
    canvas = ensure_rgba(base)
    if canvas is base:
        canvas = base.copy()

    box = overlap_box(canvas.size, overlay.size, x, y)
    if box is None:
        return canvas

    left, top, right, bottom = box
    try:
        piece = ensure_rgba(overlay).crop((left - x, top - y, right - x, bottom - y))
        canvas.alpha_composite(piece, dest=(left, top))
    except (ValueError, OSError) as e:
        raise CompositeError(f"Failed to composite overlay: {e}", context={"x": x, "y": y}) from e
    return canvas
