from __future__ import annotations

import logging
import operator
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, ClassVar, Iterator

from .events import ChangeNotifier, Dispatcher, Listener
from .image import RasterImage, as_raster_image, extract_region
from .interfaces import Point, as_point
from .polyline import PolyLine
from .state import SelectionState

logger = logging.getLogger(__name__)


class SelectionStateError(RuntimeError):
    """Operation is not permitted in the model's current selection state."""


class PointIndexError(IndexError):
    """Control point index outside the model's control point list."""


class SelectionNotReadyError(RuntimeError):
    """Region extraction requested before a closed, non-empty selection exists."""


class SelectionModel(ABC):
    """Shared lifecycle of a tracing session over one image.

    Owns the ordered control points, the boundary segments, the selection
    state and the image. Concrete strategies provide the geometry hooks; this
    class validates every request against the state's capabilities and raises
    property-change notifications ("state", "selection", "image") once a
    mutation is complete.

    Open selections keep ``len(segments) == len(control_points) - 1``; closed
    selections keep ``len(segments) == len(control_points)``, with the start
    point never repeated in the control point list.
    """

    kind: ClassVar[str] = ""

    def __init__(self, image: Any = None, *, dispatcher: Dispatcher | None = None) -> None:
        self._lock = threading.RLock()
        self._notifier = ChangeNotifier(self, dispatcher=dispatcher)
        self._image: RasterImage | None = None if image is None else as_raster_image(image)
        self._control_points: list[Point] = []
        self._segments: list[PolyLine] = []
        self._state = SelectionState.NO_SELECTION

    @classmethod
    def from_model(cls, other: "SelectionModel", **kwargs: Any) -> "SelectionModel":
        """Create a model sharing `other`'s image and dispatcher.

        `other`'s selection is kept only if it can be represented without
        violating this model's invariants; otherwise the new model is empty.
        Background work still running in `other` is stopped; its selection
        stays as it was.
        """

        model = cls(other.image, dispatcher=other.dispatcher, **kwargs)
        model._adopt(other)
        other._release()
        return model

    # -- accessors -------------------------------------------------------

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def image(self) -> RasterImage | None:
        return self._image

    @property
    def dispatcher(self) -> Dispatcher | None:
        return self._notifier.dispatcher

    def control_points(self) -> tuple[Point, ...]:
        with self._lock:
            return tuple(self._control_points)

    def selection(self) -> tuple[PolyLine, ...]:
        with self._lock:
            return tuple(self._segments)

    def add_listener(self, listener: Listener, name: str | None = None) -> None:
        self._notifier.subscribe(listener, name)

    def remove_listener(self, listener: Listener, name: str | None = None) -> None:
        self._notifier.unsubscribe(listener, name)

    # -- lifecycle -------------------------------------------------------

    def set_image(self, image: Any) -> None:
        """Replace the image being traced; any current selection is discarded."""

        new_image = None if image is None else as_raster_image(image)
        with self._lock:
            old_image = self._image
            with self._mutation():
                self._clear()
                self._image = new_image
            self._notifier.fire("image", old_image, new_image)

    def add_point(self, p: Any) -> None:
        """Add `p` as the next control point, starting a selection if none exists."""

        point = as_point(p)
        with self._mutation():
            if self._state.is_empty():
                self._start_selection(point)
            elif self._state.can_add_point():
                self._append_to_selection(point)
            else:
                raise SelectionStateError(f"Cannot add point in state {self._state}")

    def undo(self) -> None:
        with self._mutation():
            if not self._state.can_undo():
                raise SelectionStateError(f"Cannot undo in state {self._state}")
            self._undo_point()

    def finish_selection(self) -> None:
        with self._mutation():
            if not self._state.can_finish():
                raise SelectionStateError(f"Cannot finish selection in state {self._state}")
            if not self._segments:
                self._clear()
            else:
                self._finish_selection()
                self._state = SelectionState.SELECTED

    def move_point(self, index: int, new_pos: Any) -> None:
        point = as_point(new_pos)
        index = operator.index(index)
        with self._mutation():
            if not self._state.can_edit():
                raise SelectionStateError(f"May not move point in state {self._state}")
            if index < 0 or index >= len(self._control_points):
                raise PointIndexError(f"Invalid point index {index}")
            self._move_control_point(index, point)

    def reset(self) -> None:
        with self._mutation():
            self._clear()

    def live_wire(self, p: Any) -> PolyLine | None:
        """Preview the segment(s) that adding `p` next would create."""

        point = as_point(p)
        with self._lock:
            if not self._control_points:
                raise SelectionStateError("Live wire requires a starting point")
            return self._live_wire(point)

    def closest_point(self, p: Any, tolerance: float) -> int | None:
        """Index of the control point nearest `p` within `tolerance`, or None."""

        if tolerance < 0:
            raise ValueError("tolerance must be >= 0")
        point = as_point(p)
        best_index: int | None = None
        best_d2 = float(tolerance) * float(tolerance)
        with self._lock:
            for index, cp in enumerate(self._control_points):
                d2 = cp.distance_sq(point)
                if d2 < best_d2 or (best_index is None and d2 == best_d2):
                    best_index, best_d2 = index, d2
        return best_index

    def save_selection(self, sink: str | Path | IO[bytes], format: str = "PNG") -> None:
        """Write the pixels enclosed by the finished selection to `sink`.

        Pixels outside the boundary are transparent; the output is cropped
        to the boundary's bounding box.
        """

        with self._lock:
            if not self._state.is_finished() or not self._segments:
                raise SelectionNotReadyError("Selection is not finished")
            if self._image is None:
                raise SelectionNotReadyError("No image to extract a selection from")
            region = extract_region(self._image, self._segments)
        region.save(sink, format=format)
        logger.info("Saved %dx%d selection", region.width, region.height)

    # -- strategy hooks --------------------------------------------------

    def _start_selection(self, start: Point) -> None:
        if not self._state.is_empty():
            raise SelectionStateError("Selection already started")
        self._control_points.append(start)
        self._state = SelectionState.SELECTING

    @abstractmethod
    def _append_to_selection(self, p: Point) -> None:
        """Extend the open selection with control point `p`."""

    @abstractmethod
    def _live_wire(self, p: Point) -> PolyLine | None:
        ...

    @abstractmethod
    def _move_control_point(self, index: int, p: Point) -> None:
        """Move control point `index` and re-route the segments that depend on it."""

    @abstractmethod
    def _finish_selection(self) -> None:
        """Close the boundary; the base class then marks the selection SELECTED."""

    @abstractmethod
    def _undo_point(self) -> None:
        ...

    def _accepts_selection(
        self,
        source_kind: str,
        control_points: list[Point],
        segments: list[PolyLine],
        finished: bool,
    ) -> bool:
        return True

    def _after_adopt(self) -> None:
        pass

    def _on_clear(self) -> None:
        pass

    def _release(self) -> None:
        """Stop background work once another model has taken over this selection."""

    # -- internals -------------------------------------------------------

    def _clear(self) -> None:
        self._control_points.clear()
        self._segments.clear()
        self._on_clear()
        self._state = SelectionState.NO_SELECTION

    def _adopt(self, other: "SelectionModel") -> None:
        with other._lock:
            control_points = list(other._control_points)
            segments = list(other._segments)
            state = other._state
        if state.is_empty():
            return

        finished = state.is_finished()
        if finished:
            consistent = len(control_points) == len(segments)
        else:
            consistent = len(control_points) == len(segments) + 1
        if not consistent or not self._accepts_selection(other.kind, control_points, segments, finished):
            logger.debug("Discarding %s selection incompatible with %s", other.kind, self.kind)
            return

        with self._lock:
            self._control_points = control_points
            self._segments = segments
            self._state = SelectionState.SELECTED if finished else SelectionState.SELECTING
            self._after_adopt()

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        """Apply a change atomically, then notify "selection" and "state" listeners."""

        with self._lock:
            old_points = tuple(self._control_points)
            old_segments = tuple(self._segments)
            old_state = self._state
            yield
            new_segments = tuple(self._segments)
            if old_points != tuple(self._control_points) or old_segments != new_segments:
                self._notifier.fire("selection", old_segments, new_segments)
            if old_state is not self._state:
                logger.debug("%s selection: %s -> %s", self.kind, old_state, self._state)
                self._notifier.fire("state", old_state, self._state)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(state={self._state}, "
            f"control_points={len(self._control_points)}, segments={len(self._segments)})"
        )
