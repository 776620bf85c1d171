from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Protocol


Image2D = list[list[float]]


@dataclass(frozen=True, slots=True)
class Point:
    """Integer pixel location in image space."""

    x: int
    y: int

    def distance(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def distance_sq(self, other: "Point") -> int:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def translated(self, dx: int, dy: int) -> "Point":
        return Point(self.x + dx, self.y + dy)


def as_point(value: Any) -> Point:
    """Copy `value` into a fresh immutable Point.

    Accepts Point instances, `(x, y)` pairs and objects exposing `x`/`y`
    attributes (e.g. mouse-event positions), so stored points never alias
    caller-owned mutable coordinates.
    """

    if value is None:
        raise ValueError("Point is required")
    if isinstance(value, Point):
        return value
    if hasattr(value, "x") and hasattr(value, "y"):
        x, y = value.x, value.y
    else:
        try:
            x, y = value
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Cannot interpret {value!r} as a point") from exc
    return Point(int(round(x)), int(round(y)))


class ImageSource(Protocol):
    """Read-only raster capability consumed by the selection core."""

    @property
    def width(self) -> int:
        """Image width in pixels."""

    @property
    def height(self) -> int:
        """Image height in pixels."""

    def sample(self, x: int, y: int) -> Any:
        """Return the pixel value at column `x`, row `y`."""
