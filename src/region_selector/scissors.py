from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .cost import WEIGHT_FUNCTIONS, CostField
from .events import Dispatcher
from .interfaces import Point
from .model import SelectionModel, SelectionStateError
from .polyline import PolyLine
from .search import PathSearch, SearchResult, SearchSnapshot, SearchWorker, ShortestPathTree, shortest_path
from .state import SelectionState

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScissorsConfig:
    # Name of the link-cost function in `cost.WEIGHT_FUNCTIONS`.
    weights: str = "CrossGradMono"
    # Settled nodes between published search snapshots.
    snapshot_interval: int = 4096


class ScissorsSelectionModel(SelectionModel):
    """Selection tool whose segments follow minimum-cost paths along image edges.

    Placing an anchor starts a background search from it (state PROCESSING).
    Once the search completes, the live wire follows the shortest path from
    the anchor to the cursor and the next anchor commits that path as a
    segment. Progress is reported through "progress" notifications.
    """

    kind = "scissors"

    def __init__(
        self,
        image: Any = None,
        *,
        dispatcher: Dispatcher | None = None,
        config: ScissorsConfig | None = None,
    ) -> None:
        super().__init__(image, dispatcher=dispatcher)
        self._config = config or ScissorsConfig()
        self._validate_config()
        self._cost_field: CostField | None = None
        self._cost_source: Any = None
        self._tree: ShortestPathTree | None = None
        self._worker: SearchWorker | None = None
        self._progress = 0

    @property
    def config(self) -> ScissorsConfig:
        return self._config

    def _validate_config(self) -> None:
        if self._config.weights not in WEIGHT_FUNCTIONS:
            raise ValueError(
                f"Unknown weights {self._config.weights!r}; expected one of {sorted(WEIGHT_FUNCTIONS)}"
            )
        if self._config.snapshot_interval <= 0:
            raise ValueError("snapshot_interval must be > 0")

    # -- processing queries ----------------------------------------------

    def processing_progress(self) -> int:
        with self._lock:
            if not self._state.is_processing():
                raise SelectionStateError(f"No search in progress in state {self._state}")
            return self._progress

    def search_snapshot(self) -> SearchSnapshot:
        with self._lock:
            if not self._state.is_processing() or self._worker is None:
                raise SelectionStateError(f"No search in progress in state {self._state}")
            return self._worker.search.snapshot

    def cancel_processing(self) -> None:
        """Abandon the running search, returning to SELECTING with the selection untouched."""

        with self._mutation():
            if not self._state.is_processing():
                raise SelectionStateError(f"No search in progress in state {self._state}")
            self._stop_search()
            self._state = SelectionState.SELECTING

    def wait_for_processing(self, timeout: float | None = None) -> bool:
        """Block until the running search finishes; False if `timeout` expired first.

        Must not be called from a listener, which runs with the model locked.
        """

        with self._lock:
            worker = self._worker
        if worker is None:
            return True
        return worker.join(timeout)

    def cost_field(self) -> CostField:
        with self._lock:
            if self._image is None:
                raise SelectionStateError("Intelligent scissors requires an image")
            if self._cost_field is None or self._cost_source is not self._image:
                self._cost_field = CostField.from_image(self._image, self._config.weights)
                self._cost_source = self._image
            return self._cost_field

    # -- strategy hooks --------------------------------------------------

    def _start_selection(self, start: Point) -> None:
        self._require_in_image(start)
        super()._start_selection(start)
        self._begin_search(start)

    def _append_to_selection(self, p: Point) -> None:
        self._require_in_image(p)
        path = self._path_from_last(p)
        self._segments.append(path)
        self._control_points.append(p)
        self._begin_search(p)

    def _live_wire(self, p: Point) -> PolyLine | None:
        if self._tree is None or self._tree.start != self._control_points[-1]:
            return None
        return self._tree.path_to(p)

    def _finish_selection(self) -> None:
        self._segments.append(self._path_from_last(self._control_points[0]))
        self._tree = None

    def _undo_point(self) -> None:
        self._stop_search()
        if not self._segments:
            self._clear()
            return
        self._segments.pop()
        if self._state.is_finished():
            self._state = SelectionState.SELECTING
        else:
            self._control_points.pop()
        self._begin_search(self._control_points[-1])

    def _move_control_point(self, index: int, p: Point) -> None:
        self._require_in_image(p)
        n = len(self._control_points)
        prev_index = (index - 1) % n
        next_index = (index + 1) % n
        incoming = self._path_between(self._control_points[prev_index], p)
        outgoing = self._path_between(p, self._control_points[next_index])
        self._control_points[index] = p
        self._segments[prev_index] = incoming
        self._segments[index] = outgoing

    def _accepts_selection(self, source_kind, control_points, segments, finished) -> bool:
        if self._image is None:
            return False
        return all(self._image.contains(p.x, p.y) for p in control_points)

    def _after_adopt(self) -> None:
        if self._state is SelectionState.SELECTING:
            self._begin_search(self._control_points[-1])

    def _on_clear(self) -> None:
        self._stop_search()
        self._tree = None

    def _release(self) -> None:
        with self._mutation():
            if self._state.is_processing():
                self._stop_search()
                self._state = SelectionState.SELECTING

    # -- search management -----------------------------------------------

    def _require_in_image(self, p: Point) -> None:
        if self._image is None:
            raise SelectionStateError("Intelligent scissors requires an image")
        if not self._image.contains(p.x, p.y):
            raise ValueError(f"Point ({p.x}, {p.y}) is outside the {self._image.width}x{self._image.height} image")

    def _path_from_last(self, p: Point) -> PolyLine:
        last = self._control_points[-1]
        if self._tree is not None and self._tree.start == last:
            path = self._tree.path_to(p)
            if path is not None:
                return path
        return self._path_between(last, p)

    def _path_between(self, a: Point, b: Point) -> PolyLine:
        path = shortest_path(self.cost_field(), a, b)
        if path is None:
            raise ValueError(f"No path found from ({a.x}, {a.y}) to ({b.x}, {b.y})")
        return path

    def _begin_search(self, anchor: Point) -> None:
        self._stop_search()
        self._tree = None
        search = PathSearch(self.cost_field(), snapshot_interval=self._config.snapshot_interval)
        worker = SearchWorker(
            search,
            anchor,
            on_progress=self._on_search_progress,
            on_done=self._on_search_done,
        )
        self._worker = worker
        self._progress = 0
        self._state = SelectionState.PROCESSING
        worker.start()

    def _stop_search(self) -> None:
        worker = self._worker
        self._worker = None
        self._progress = 0
        if worker is not None:
            worker.cancel()

    def _on_search_progress(self, worker: SearchWorker, percent: int) -> None:
        with self._lock:
            if worker is not self._worker:
                return
            old = self._progress
            self._progress = percent
            if old != percent:
                self._notifier.fire("progress", old, percent)

    def _on_search_done(self, worker: SearchWorker, result: SearchResult | None) -> None:
        with self._mutation():
            if worker is not self._worker:
                return
            self._worker = None
            if result is not None and result.completed:
                self._tree = result.tree
            else:
                logger.warning("Search from %s ended without a path tree", worker.start_point)
            self._state = SelectionState.SELECTING
