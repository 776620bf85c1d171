import types

import pytest

from region_selector.interfaces import Point, as_point
from region_selector.polyline import PolyLine


def test_as_point_copies_tuples_and_attribute_objects() -> None:
    mutable = types.SimpleNamespace(x=3, y=4)

    p = as_point(mutable)
    mutable.x = 99

    assert p == Point(3, 4)
    assert as_point((1.6, 2.2)) == Point(2, 2)


def test_as_point_rejects_missing_or_malformed_values() -> None:
    with pytest.raises(ValueError, match="Point is required"):
        as_point(None)
    with pytest.raises(ValueError, match="Cannot interpret"):
        as_point((1, 2, 3))


def test_point_distance_helpers() -> None:
    a = Point(0, 0)
    b = Point(3, 4)

    assert a.distance(b) == 5.0
    assert a.distance_sq(b) == 25
    assert b.translated(-3, 1) == Point(0, 5)


def test_polyline_requires_points() -> None:
    with pytest.raises(ValueError, match="at least one point"):
        PolyLine([])


def test_polyline_accessors() -> None:
    line = PolyLine.from_coordinates([0, 1, 2], [5, 6, 7])

    assert line.start == Point(0, 5)
    assert line.end == Point(2, 7)
    assert line.size() == 3
    assert line.xs() == [0, 1, 2]
    assert line.ys() == [5, 6, 7]
    assert list(line)[1] == Point(1, 6)
    assert line == PolyLine([(0, 5), (1, 6), (2, 7)])
    assert PolyLine.line(Point(0, 0), Point(1, 1)).points == (Point(0, 0), Point(1, 1))


def test_polyline_from_coordinates_checks_lengths() -> None:
    with pytest.raises(ValueError, match="equal length"):
        PolyLine.from_coordinates([0, 1], [0])
