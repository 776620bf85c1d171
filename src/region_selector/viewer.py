from __future__ import annotations

import numpy as np

from .circle import circle_boundary
from .events import PropertyChange
from .interfaces import Point
from .model import SelectionModel, SelectionStateError
from .polyline import PolyLine
from .search import FRONTIER, SETTLED

LEFT_BUTTON = 1
MIDDLE_BUTTON = 2
RIGHT_BUTTON = 3

# Distance in pixels within which a press grabs a control point.
GRAB_TOLERANCE = 10

SETTLED_RGBA = (192, 192, 96, 128)
FRONTIER_RGBA = (96, 96, 192, 128)


class SelectionController:
    """Mouse interaction state for a selection model.

    This class is UI-toolkit agnostic. A GUI forwards its mouse events to
    `click`, `moved`, `pressed`, `dragged` and `released` (pixel coordinates,
    buttons numbered 1=left, 2=middle, 3=right) and redraws from `live_wire`,
    `move_guides` and `progress_overlay`.
    """

    def __init__(self, model: SelectionModel) -> None:
        self._model: SelectionModel | None = None
        self._mouse = Point(0, 0)
        self._selected_index: int | None = None
        self.set_model(model)

    @property
    def model(self) -> SelectionModel:
        assert self._model is not None
        return self._model

    @property
    def mouse_location(self) -> Point:
        return self._mouse

    @property
    def selected_index(self) -> int | None:
        return self._selected_index

    def set_model(self, model: SelectionModel) -> None:
        if self._model is not None:
            self._model.remove_listener(self._on_change)
        self._model = model
        model.add_listener(self._on_change)
        self._selected_index = None

    def close(self) -> None:
        if self._model is not None:
            self._model.remove_listener(self._on_change)

    def is_interacting(self) -> bool:
        return self.model.state.can_edit() and self._selected_index is not None

    def update_mouse_location(self, x: float, y: float) -> Point:
        """Track the cursor, clamped to the image bounds."""

        image = self.model.image
        px, py = int(round(x)), int(round(y))
        if image is not None:
            px = min(max(px, 0), image.width - 1)
            py = min(max(py, 0), image.height - 1)
        self._mouse = Point(px, py)
        return self._mouse

    # -- mouse events ----------------------------------------------------

    def click(self, x: float, y: float, button: int) -> None:
        self.update_mouse_location(x, y)
        state = self.model.state
        if button == LEFT_BUTTON:
            if state.can_add_point():
                self.model.add_point(self._mouse)
        elif button == MIDDLE_BUTTON:
            if state.can_finish():
                self.model.finish_selection()
        elif button == RIGHT_BUTTON:
            if state.can_undo():
                self.model.undo()

    def moved(self, x: float, y: float) -> None:
        if self.model.state.can_add_point():
            self.update_mouse_location(x, y)

    def dragged(self, x: float, y: float) -> None:
        if self.model.state.can_add_point() or self.is_interacting():
            self.update_mouse_location(x, y)

    def pressed(self, x: float, y: float, button: int = LEFT_BUTTON) -> None:
        if button == LEFT_BUTTON and self.model.state.is_finished():
            self._selected_index = self.model.closest_point((x, y), GRAB_TOLERANCE)

    def released(self, x: float, y: float, button: int = LEFT_BUTTON) -> None:
        if button != LEFT_BUTTON or not self.is_interacting():
            return
        index = self._selected_index
        self.update_mouse_location(x, y)
        self._selected_index = None
        self.model.move_point(index, self._mouse)

    # -- drawing helpers -------------------------------------------------

    def live_wire(self) -> PolyLine | None:
        state = self.model.state
        if state.is_empty() or not state.can_add_point():
            return None
        return self.model.live_wire(self._mouse)

    def move_guides(self) -> list[PolyLine]:
        """Preview of the boundary around the control point being dragged."""

        if not self.is_interacting():
            return []
        points = self.model.control_points()
        index = self._selected_index
        assert index is not None
        mouse = self._mouse
        if self.model.kind == "circle":
            center, rim = points
            if index == 1:
                if mouse == center:
                    return []
                return [PolyLine(circle_boundary(center, mouse))]
            moved_rim = mouse.translated(rim.x - center.x, rim.y - center.y)
            return [PolyLine.line(center, mouse), PolyLine(circle_boundary(mouse, moved_rim))]
        prev_point = points[(index - 1) % len(points)]
        next_point = points[(index + 1) % len(points)]
        return [PolyLine.line(prev_point, mouse), PolyLine.line(mouse, next_point)]

    def progress_overlay(self) -> np.ndarray | None:
        """RGBA image tinting settled and frontier pixels of a running search."""

        model = self.model
        if not model.state.is_processing():
            return None
        snapshot_fn = getattr(model, "search_snapshot", None)
        if snapshot_fn is None:
            return None
        try:
            status = snapshot_fn().as_array()
        except SelectionStateError:
            # search finished after the state check
            return None
        overlay = np.zeros(status.shape + (4,), dtype=np.uint8)
        overlay[status == FRONTIER] = FRONTIER_RGBA
        overlay[status == SETTLED] = SETTLED_RGBA
        return overlay

    def _on_change(self, event: PropertyChange) -> None:
        if event.name == "selection":
            self._selected_index = None
