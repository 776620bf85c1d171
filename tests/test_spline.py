import numpy as np

from region_selector.interfaces import Point
from region_selector.spline import SplineSelectionModel, catmull_rom
from region_selector.state import SelectionState

_POINTS = [(10, 10), (30, 8), (35, 30), (12, 28)]


def _model(points=_POINTS) -> SplineSelectionModel:
    model = SplineSelectionModel(np.zeros((50, 50), dtype=np.uint8))
    for p in points:
        model.add_point(p)
    return model


def _assert_connected(model) -> None:
    points = model.control_points()
    for i, segment in enumerate(model.selection()):
        assert segment.start == points[i]
        assert segment.end == points[(i + 1) % len(points)]


def test_catmull_rom_interpolates_end_points() -> None:
    curve = catmull_rom(Point(0, 0), Point(0, 0), Point(10, 0), Point(10, 0))

    assert curve[0] == Point(0, 0)
    assert curve[-1] == Point(10, 0)
    assert all(p.y == 0 for p in curve)
    assert all(a != b for a, b in zip(curve, curve[1:]))


def test_catmull_rom_degenerate_segment_keeps_both_ends() -> None:
    curve = catmull_rom(Point(3, 3), Point(3, 3), Point(3, 3), Point(3, 3))

    assert curve == [Point(3, 3), Point(3, 3)]


def test_open_spline_segments_connect_control_points() -> None:
    model = _model()

    assert model.state is SelectionState.SELECTING
    assert len(model.selection()) == 3
    _assert_connected(model)


def test_finish_closes_spline() -> None:
    model = _model()

    model.finish_selection()

    assert model.state is SelectionState.SELECTED
    assert len(model.selection()) == 4
    _assert_connected(model)


def test_spline_is_deterministic() -> None:
    a = _model()
    b = _model()
    a.finish_selection()
    b.finish_selection()

    assert a.selection() == b.selection()


def test_closing_reshapes_first_segment() -> None:
    model = _model()
    open_first = model.selection()[0]

    model.finish_selection()

    assert model.selection()[0].start == open_first.start
    assert model.selection()[0].end == open_first.end
    assert model.selection()[0] != open_first


def test_undo_after_finish_restores_open_shape() -> None:
    model = _model()
    open_segments = model.selection()
    model.finish_selection()

    model.undo()

    assert model.state is SelectionState.SELECTING
    assert model.selection() == open_segments


def test_undo_while_selecting_restores_previous_shape() -> None:
    three = _model(_POINTS[:3])
    four = _model()

    four.undo()

    assert four.selection() == three.selection()


def test_move_point_matches_fresh_spline() -> None:
    moved = _model()
    moved.finish_selection()
    moved.move_point(2, (40, 40))

    fresh = _model([(10, 10), (30, 8), (40, 40), (12, 28)])
    fresh.finish_selection()

    assert moved.selection() == fresh.selection()
    _assert_connected(moved)


def test_live_wire_runs_from_last_point() -> None:
    model = _model()

    wire = model.live_wire((45, 45))

    assert wire.start == Point(12, 28)
    assert wire.end == Point(45, 45)
