from __future__ import annotations

from .interfaces import Point
from .model import SelectionModel
from .polyline import PolyLine
from .state import SelectionState


class PointToPointSelectionModel(SelectionModel):
    """Selection tool that connects each added point with a straight line."""

    kind = "point-to-point"

    def _live_wire(self, p: Point) -> PolyLine:
        return PolyLine.line(self._control_points[-1], p)

    def _append_to_selection(self, p: Point) -> None:
        self._segments.append(PolyLine.line(self._control_points[-1], p))
        self._control_points.append(p)

    def _finish_selection(self) -> None:
        self._segments.append(PolyLine.line(self._control_points[-1], self._control_points[0]))

    def _undo_point(self) -> None:
        if not self._segments:
            self._clear()
            return
        self._segments.pop()
        if self._state.is_finished():
            # Only the closing segment goes; its start point remains an anchor.
            self._state = SelectionState.SELECTING
        else:
            self._control_points.pop()

    def _move_control_point(self, index: int, p: Point) -> None:
        n = len(self._control_points)
        prev_index = (index - 1) % n
        next_index = (index + 1) % n
        self._control_points[index] = p
        self._segments[prev_index] = PolyLine.line(self._control_points[prev_index], p)
        self._segments[index] = PolyLine.line(p, self._control_points[next_index])
