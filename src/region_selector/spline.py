from __future__ import annotations

from typing import Iterable

import numpy as np

from .interfaces import Point
from .model import SelectionModel
from .polyline import PolyLine
from .state import SelectionState

SPLINE_SAMPLES = 16


def catmull_rom(p0: Point, p1: Point, p2: Point, p3: Point, samples: int = SPLINE_SAMPLES) -> list[Point]:
    """Sample the uniform Catmull-Rom curve running from `p1` to `p2`.

    `p0` and `p3` are the neighbouring control points that set the end
    tangents. Consecutive duplicate pixels are dropped; the curve always
    starts exactly at `p1` and ends exactly at `p2`.
    """

    if samples < 1:
        raise ValueError("samples must be >= 1")
    t = np.linspace(0.0, 1.0, samples + 1)[:, None]
    c = np.array([[p.x, p.y] for p in (p0, p1, p2, p3)], dtype=float)
    curve = 0.5 * (
        2.0 * c[1]
        + (c[2] - c[0]) * t
        + (2.0 * c[0] - 5.0 * c[1] + 4.0 * c[2] - c[3]) * t**2
        + (-c[0] + 3.0 * c[1] - 3.0 * c[2] + c[3]) * t**3
    )
    pixels = np.rint(curve).astype(int)

    points = [p1]
    for x, y in pixels[1:-1]:
        q = Point(int(x), int(y))
        if q != points[-1]:
            points.append(q)
    if p2 != points[-1] or len(points) == 1:
        points.append(p2)
    return points


class SplineSelectionModel(SelectionModel):
    """Selection tool interpolating a smooth Catmull-Rom curve through its points.

    Each segment runs between two consecutive control points but its shape
    also depends on the points on either side, so edits re-route every
    segment within two points of the change. Open ends use the end point
    itself as the missing neighbour; closed selections wrap around.
    """

    kind = "spline"

    def _live_wire(self, p: Point) -> PolyLine:
        last = self._control_points[-1]
        before = self._control_points[-2] if len(self._control_points) > 1 else last
        return PolyLine(catmull_rom(before, last, p, p))

    def _append_to_selection(self, p: Point) -> None:
        self._control_points.append(p)
        last = len(self._control_points) - 2
        self._segments.append(self._segment(last, closed=False))
        self._rebuild([last - 1], closed=False)

    def _finish_selection(self) -> None:
        n = len(self._control_points)
        self._segments.append(self._segment(n - 1, closed=True))
        self._rebuild([0, n - 2], closed=True)

    def _undo_point(self) -> None:
        if not self._segments:
            self._clear()
            return
        self._segments.pop()
        if self._state.is_finished():
            self._state = SelectionState.SELECTING
            self._rebuild([0, len(self._segments) - 1], closed=False)
        else:
            self._control_points.pop()
            self._rebuild([len(self._segments) - 1], closed=False)

    def _move_control_point(self, index: int, p: Point) -> None:
        self._control_points[index] = p
        n = len(self._control_points)
        self._rebuild([(index + k) % n for k in (-2, -1, 0, 1)], closed=True)

    def _segment(self, i: int, *, closed: bool) -> PolyLine:
        cps = self._control_points
        n = len(cps)
        if closed:
            p0, p1, p2, p3 = cps[(i - 1) % n], cps[i], cps[(i + 1) % n], cps[(i + 2) % n]
        else:
            p1, p2 = cps[i], cps[i + 1]
            p0 = cps[i - 1] if i > 0 else p1
            p3 = cps[i + 2] if i + 2 < n else p2
        return PolyLine(catmull_rom(p0, p1, p2, p3))

    def _rebuild(self, indices: Iterable[int], *, closed: bool) -> None:
        for i in sorted(set(indices)):
            if 0 <= i < len(self._segments):
                self._segments[i] = self._segment(i, closed=closed)
