import numpy as np
import pytest

from region_selector.circle import CIRCLE_SAMPLES, CircleSelectionModel, circle_boundary
from region_selector.interfaces import Point
from region_selector.model import SelectionStateError
from region_selector.state import SelectionState


def _model() -> CircleSelectionModel:
    return CircleSelectionModel(np.zeros((40, 40), dtype=np.uint8))


def test_circle_boundary_starts_and_ends_at_rim() -> None:
    points = circle_boundary(Point(10, 10), Point(13, 10))

    assert len(points) == CIRCLE_SAMPLES + 1
    assert points[0] == Point(13, 10)
    assert points[-1] == Point(13, 10)
    for p in points:
        assert abs(p.distance(Point(10, 10)) - 3.0) <= 1.0


def test_circle_boundary_rejects_zero_radius() -> None:
    with pytest.raises(ValueError, match="radius must be positive"):
        circle_boundary(Point(5, 5), Point(5, 5))


def test_second_point_completes_circle() -> None:
    model = _model()
    model.add_point((10, 10))
    model.add_point((13, 10))

    arcs = model.selection()
    assert model.state is SelectionState.SELECTED
    assert model.control_points() == (Point(10, 10), Point(13, 10))
    assert len(arcs) == 2
    assert arcs[0].start == Point(13, 10)
    assert arcs[1].end == Point(13, 10)
    assert arcs[0].end == arcs[1].start == Point(7, 10)


def test_zero_radius_is_rejected_without_changes() -> None:
    model = _model()
    model.add_point((10, 10))

    with pytest.raises(ValueError):
        model.add_point((10, 10))

    assert model.state is SelectionState.SELECTING
    assert model.control_points() == (Point(10, 10),)


def test_live_wire_previews_full_circle() -> None:
    model = _model()
    model.add_point((10, 10))

    wire = model.live_wire((10, 15))

    assert wire.size() == CIRCLE_SAMPLES + 1
    assert wire.start == wire.end == Point(10, 15)
    assert model.live_wire((10, 10)) is None


def test_third_point_is_rejected() -> None:
    model = _model()
    model.add_point((10, 10))
    model.add_point((13, 10))

    with pytest.raises(SelectionStateError):
        model.add_point((20, 20))


def test_moving_center_translates_circle() -> None:
    model = _model()
    model.add_point((10, 10))
    model.add_point((13, 10))

    model.move_point(0, (20, 20))

    assert model.control_points() == (Point(20, 20), Point(23, 20))
    assert model.selection()[0].start == Point(23, 20)


def test_moving_rim_changes_radius() -> None:
    model = _model()
    model.add_point((10, 10))
    model.add_point((13, 10))

    model.move_point(1, (10, 15))

    assert model.control_points() == (Point(10, 10), Point(10, 15))
    assert model.selection()[1].end == Point(10, 15)
    assert model.selection()[0].end == Point(10, 5)


def test_undo_keeps_only_center() -> None:
    model = _model()
    model.add_point((10, 10))
    model.add_point((13, 10))

    model.undo()

    assert model.state is SelectionState.SELECTING
    assert model.control_points() == (Point(10, 10),)
    assert model.selection() == ()

    model.undo()
    assert model.state is SelectionState.NO_SELECTION
