from __future__ import annotations

import math

import numpy as np

from .interfaces import Point
from .model import SelectionModel, SelectionStateError
from .polyline import PolyLine
from .state import SelectionState

# Number of angular samples around the circle, shared by the committed
# boundary and the live preview so both render identically.
CIRCLE_SAMPLES = 1000


def circle_boundary(center: Point, rim: Point, samples: int = CIRCLE_SAMPLES) -> list[Point]:
    """Sample a closed circle around `center` passing through `rim`.

    Returns ``samples + 1`` points starting and ending at the sample nearest
    `rim`, at uniform angular steps.
    """

    if samples < 2:
        raise ValueError("samples must be >= 2")
    radius = center.distance(rim)
    if radius <= 0:
        raise ValueError("Circle radius must be positive")

    phase = math.atan2(rim.y - center.y, rim.x - center.x)
    angles = phase + np.arange(samples + 1) * (2.0 * math.pi / samples)
    xs = np.rint(center.x + radius * np.cos(angles)).astype(int)
    ys = np.rint(center.y + radius * np.sin(angles)).astype(int)
    points = [Point(int(x), int(y)) for x, y in zip(xs, ys)]
    points[-1] = points[0]
    return points


class CircleSelectionModel(SelectionModel):
    """Selection tool drawing a circle from a center and a radius-defining point.

    Control point 0 is the center and control point 1 lies on the rim. The
    closed boundary is stored as two arcs, each running half way around the
    circle, so the first arc starts and the second ends at the rim point.
    """

    kind = "circle"

    def _live_wire(self, p: Point) -> PolyLine | None:
        center = self._control_points[0]
        if p == center:
            return None
        return PolyLine(circle_boundary(center, p))

    def _append_to_selection(self, p: Point) -> None:
        if len(self._control_points) >= 2:
            raise SelectionStateError("Only two control points are allowed")
        arcs = self._arcs(self._control_points[0], p)
        self._control_points.append(p)
        self._segments[:] = arcs
        self._state = SelectionState.SELECTED

    def _finish_selection(self) -> None:
        # A circle closes itself when its rim point is placed.
        pass

    def _undo_point(self) -> None:
        if not self._segments:
            self._clear()
            return
        self._segments.clear()
        del self._control_points[1:]
        self._state = SelectionState.SELECTING

    def _move_control_point(self, index: int, p: Point) -> None:
        center, rim = self._control_points
        if index == 0:
            rim = rim.translated(p.x - center.x, p.y - center.y)
            center = p
        else:
            rim = p
        arcs = self._arcs(center, rim)
        self._control_points[:] = [center, rim]
        self._segments[:] = arcs

    def _accepts_selection(self, source_kind, control_points, segments, finished) -> bool:
        if finished:
            return source_kind == self.kind and len(control_points) == 2
        return len(control_points) == 1

    @staticmethod
    def _arcs(center: Point, rim: Point) -> list[PolyLine]:
        points = circle_boundary(center, rim)
        half = len(points) // 2
        return [PolyLine(points[: half + 1]), PolyLine(points[half:])]
