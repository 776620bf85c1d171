from __future__ import annotations

from typing import Iterable, Iterator

from .interfaces import Point, as_point


class PolyLine:
    """Immutable, non-empty ordered sequence of points forming one boundary segment."""

    __slots__ = ("_points",)

    def __init__(self, points: Iterable[Point]) -> None:
        pts = tuple(as_point(p) for p in points)
        if not pts:
            raise ValueError("PolyLine requires at least one point")
        self._points = pts

    @classmethod
    def line(cls, start: Point, end: Point) -> "PolyLine":
        return cls((start, end))

    @classmethod
    def from_coordinates(cls, xs: Iterable[int], ys: Iterable[int]) -> "PolyLine":
        xs = list(xs)
        ys = list(ys)
        if len(xs) != len(ys):
            raise ValueError("xs and ys must have equal length")
        return cls(Point(int(x), int(y)) for x, y in zip(xs, ys))

    @property
    def points(self) -> tuple[Point, ...]:
        return self._points

    @property
    def start(self) -> Point:
        return self._points[0]

    @property
    def end(self) -> Point:
        return self._points[-1]

    def size(self) -> int:
        return len(self._points)

    def xs(self) -> list[int]:
        return [p.x for p in self._points]

    def ys(self) -> list[int]:
        return [p.y for p in self._points]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __getitem__(self, index: int) -> Point:
        return self._points[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PolyLine):
            return NotImplemented
        return self._points == other._points

    def __hash__(self) -> int:
        return hash(self._points)

    def __repr__(self) -> str:
        return f"PolyLine({self.start} -> {self.end}, size={len(self._points)})"
