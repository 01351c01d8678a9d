"""Transform spec: a source plus an ordered list of operations."""

from __future__ import annotations

from dataclasses import dataclass, field

from pixmill.dimensions import Size, current_size
from pixmill.operations import Operation, Overlay
from pixmill.source import Source


@dataclass(eq=False)
class TransformSpec:
    """The accumulated, not-yet-rendered description of an image.

    Operations are only ever appended. Clones share the source object, so
    the same image can be reused as a base and as several overlays without
    copying its bytes.
    """

    source: Source
    operations: list[Operation] = field(default_factory=list)

    @property
    def source_size(self) -> Size:
        return self.source.width, self.source.height

    def current_size(self, upto: int | None = None) -> Size:
        """Tracked size after the first `upto` operations (all if None)."""
        ops = self.operations if upto is None else self.operations[:upto]
        return current_size(self.source.width, self.source.height, ops)

    def append(self, op: Operation) -> None:
        self.operations.append(op)

    def clone(self) -> TransformSpec:
        return TransformSpec(source=self.source, operations=list(self.operations))

    def overlay_depth(self) -> int:
        """Deepest chain of nested overlay specs (0 when there are none)."""
        depth = 0
        for op in self.operations:
            if isinstance(op, Overlay):
                depth = max(depth, 1 + op.spec.overlay_depth())
        return depth

    def describe(self) -> list[str]:
        return [op.describe() for op in self.operations]

    def __len__(self) -> int:
        return len(self.operations)
