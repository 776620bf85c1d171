from __future__ import annotations

import heapq
import logging
import math
import threading
from dataclasses import dataclass
from typing import Callable

import numpy as np

from .cost import NEIGHBORS, CostField
from .interfaces import Point
from .polyline import PolyLine

logger = logging.getLogger(__name__)

UNDISCOVERED = 0
FRONTIER = 1
SETTLED = 2

COMPLETE = "complete"
CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class SearchSnapshot:
    """Immutable view of search progress: which pixels are settled or on the frontier."""

    width: int
    height: int
    status: bytes
    settled_count: int = 0

    @classmethod
    def empty(cls, width: int, height: int) -> "SearchSnapshot":
        return cls(width=width, height=height, status=bytes(width * height))

    def _status_at(self, p: Point) -> int:
        if not (0 <= p.x < self.width and 0 <= p.y < self.height):
            return UNDISCOVERED
        return self.status[p.y * self.width + p.x]

    def settled(self, p: Point) -> bool:
        return self._status_at(p) == SETTLED

    def frontier(self, p: Point) -> bool:
        return self._status_at(p) == FRONTIER

    def discovered(self, p: Point) -> bool:
        """True for pixels reached by the search, whether or not they are settled."""
        return self._status_at(p) != UNDISCOVERED

    def as_array(self) -> np.ndarray:
        return np.frombuffer(self.status, dtype=np.uint8).reshape(self.height, self.width)


class ShortestPathTree:
    """Predecessor links of a finished search, rooted at `start`."""

    def __init__(self, field: CostField, start: Point, parents: list[int], costs: list[float], status: bytes) -> None:
        self._field = field
        self._start = start
        self._parents = parents
        self._costs = costs
        self._status = status

    @property
    def start(self) -> Point:
        return self._start

    def reachable(self, p: Point) -> bool:
        return self._field.contains(p) and self._status[self._field.node(p)] == SETTLED

    def cost_to(self, p: Point) -> float | None:
        if not self.reachable(p):
            return None
        return self._costs[self._field.node(p)]

    def path_to(self, p: Point) -> PolyLine | None:
        """Minimum-cost path from the root to `p`, or None when `p` was not reached."""

        if not self.reachable(p):
            return None
        node = self._field.node(p)
        nodes = [node]
        while self._parents[node] != -1:
            node = self._parents[node]
            nodes.append(node)
        nodes.reverse()
        return PolyLine(self._field.point(n) for n in nodes)


@dataclass(frozen=True, slots=True)
class SearchResult:
    status: str
    tree: ShortestPathTree | None
    settled_count: int

    @property
    def completed(self) -> bool:
        return self.status == COMPLETE


class PathSearch:
    """Dijkstra expansion over a `CostField`.

    Nodes are settled in order of tentative cost with ties broken by
    insertion order, so repeated runs give identical paths. The cost field is
    shared, so a new search from another anchor does not rebuild it.
    """

    def __init__(self, field: CostField, snapshot_interval: int = 4096) -> None:
        if snapshot_interval <= 0:
            raise ValueError("snapshot_interval must be > 0")
        self._field = field
        self._snapshot_interval = snapshot_interval
        self._snapshot = SearchSnapshot.empty(field.width, field.height)
        self._progress = 0

    @property
    def field(self) -> CostField:
        return self._field

    @property
    def snapshot(self) -> SearchSnapshot:
        return self._snapshot

    @property
    def progress(self) -> int:
        return self._progress

    def run(
        self,
        start: Point,
        target: Point | None = None,
        *,
        cancel_event: threading.Event | None = None,
        on_progress: Callable[[int], None] | None = None,
    ) -> SearchResult:
        """Expand from `start` until every reachable node (or `target`) is settled.

        `cancel_event` is polled before every settled node. `on_progress`
        receives each new integer percentage of settled nodes, ending with 100
        on completion.
        """

        field = self._field
        n = field.node_count
        start_node = field.node(start)
        target_node = None if target is None else field.node(target)
        costs = field.costs
        width = field.width
        n_links = len(NEIGHBORS)
        offsets = [dy * width + dx for dx, dy in NEIGHBORS]
        inf = math.inf

        dist = [inf] * n
        parents = [-1] * n
        status = bytearray(n)
        dist[start_node] = 0.0
        status[start_node] = FRONTIER
        heap: list[tuple[float, int, int]] = [(0.0, 0, start_node)]
        seq = 0
        settled = 0
        last_percent = 0
        self._progress = 0
        logger.info("Path search from (%d, %d) over %d nodes", start.x, start.y, n)

        while heap:
            if cancel_event is not None and cancel_event.is_set():
                self._publish(status, settled)
                logger.info("Path search from (%d, %d) cancelled after %d nodes", start.x, start.y, settled)
                return SearchResult(status=CANCELLED, tree=None, settled_count=settled)

            d, _, node = heapq.heappop(heap)
            if status[node] == SETTLED:
                continue
            status[node] = SETTLED
            settled += 1
            if node == target_node:
                break

            base = node * n_links
            for k in range(n_links):
                w = costs[base + k]
                if w == inf:
                    continue
                nb = node + offsets[k]
                if status[nb] == SETTLED:
                    continue
                nd = d + w
                if nd < dist[nb]:
                    dist[nb] = nd
                    parents[nb] = node
                    status[nb] = FRONTIER
                    seq += 1
                    heapq.heappush(heap, (nd, seq, nb))

            if settled % self._snapshot_interval == 0:
                self._publish(status, settled)
            percent = settled * 100 // n
            if percent > last_percent:
                last_percent = percent
                self._progress = percent
                if on_progress is not None:
                    on_progress(percent)

        self._publish(status, settled)
        if last_percent < 100:
            self._progress = 100
            if on_progress is not None:
                on_progress(100)
        logger.info("Path search from (%d, %d) settled %d nodes", start.x, start.y, settled)
        tree = ShortestPathTree(field, start, parents, dist, bytes(status))
        return SearchResult(status=COMPLETE, tree=tree, settled_count=settled)

    def _publish(self, status: bytearray, settled: int) -> None:
        self._snapshot = SearchSnapshot(
            width=self._field.width,
            height=self._field.height,
            status=bytes(status),
            settled_count=settled,
        )


def shortest_path(field: CostField, start: Point, target: Point) -> PolyLine | None:
    """Minimum-cost path between two points, stopping as soon as `target` is settled."""

    result = PathSearch(field).run(start, target)
    assert result.tree is not None
    return result.tree.path_to(target)


class SearchWorker:
    """Background thread running one path search."""

    def __init__(
        self,
        search: PathSearch,
        start: Point,
        target: Point | None = None,
        *,
        on_progress: Callable[["SearchWorker", int], None] | None = None,
        on_done: Callable[["SearchWorker", SearchResult | None], None] | None = None,
    ) -> None:
        self._search = search
        self._start = start
        self._target = target
        self._on_progress = on_progress
        self._on_done = on_done
        self._cancel_evt = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._result: SearchResult | None = None
        self._last_error: Exception | None = None

    @property
    def search(self) -> PathSearch:
        return self._search

    @property
    def start_point(self) -> Point:
        return self._start

    @property
    def result(self) -> SearchResult | None:
        return self._result

    @property
    def last_error(self) -> Exception | None:
        return self._last_error

    @property
    def cancelled(self) -> bool:
        return self._cancel_evt.is_set()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(target=self._run, name="path-search", daemon=True)
            self._thread.start()

    def cancel(self, *, wait: bool = False, timeout: float | None = 2.0) -> None:
        self._cancel_evt.set()
        if wait:
            self.join(timeout)

    def join(self, timeout: float | None = None) -> bool:
        with self._lock:
            thread = self._thread
        if thread is not None:
            thread.join(timeout=timeout)
        return not self.is_alive()

    def is_alive(self) -> bool:
        with self._lock:
            thread = self._thread
        return thread is not None and thread.is_alive()

    def _run(self) -> None:
        def progress(percent: int) -> None:
            if self._on_progress is not None:
                self._on_progress(self, percent)

        result: SearchResult | None = None
        try:
            result = self._search.run(
                self._start,
                self._target,
                cancel_event=self._cancel_evt,
                on_progress=progress,
            )
        except Exception as exc:
            self._last_error = exc
            logger.exception("Path search from %s failed", self._start)
        self._result = result
        if self._on_done is not None:
            self._on_done(self, result)
