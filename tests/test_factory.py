import numpy as np
import pytest

from region_selector.circle import CircleSelectionModel
from region_selector.factory import MODEL_KINDS, create_selection_model
from region_selector.interfaces import Point
from region_selector.point_to_point import PointToPointSelectionModel
from region_selector.scissors import ScissorsConfig, ScissorsSelectionModel
from region_selector.spline import SplineSelectionModel
from region_selector.state import SelectionState


def _image() -> np.ndarray:
    return np.zeros((30, 30), dtype=np.uint8)


def _closed_triangle() -> PointToPointSelectionModel:
    model = PointToPointSelectionModel(_image())
    for p in [(2, 2), (20, 2), (2, 20)]:
        model.add_point(p)
    model.finish_selection()
    return model


def test_registry_lists_every_mode() -> None:
    assert sorted(MODEL_KINDS) == ["circle", "point-to-point", "scissors", "spline"]


def test_create_selection_model_by_kind() -> None:
    model = create_selection_model("spline", _image())

    assert isinstance(model, SplineSelectionModel)
    assert model.image.width == 30
    assert model.state is SelectionState.NO_SELECTION


def test_create_selection_model_passes_options() -> None:
    model = create_selection_model("scissors", _image(), config=ScissorsConfig(snapshot_interval=10))

    assert isinstance(model, ScissorsSelectionModel)
    assert model.config.snapshot_interval == 10


def test_unknown_kind_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown selection mode"):
        create_selection_model("lasso")


def test_copy_keeps_compatible_selection() -> None:
    source = _closed_triangle()

    copy = create_selection_model("point-to-point", copy=source)

    assert copy is not source
    assert copy.image is source.image
    assert copy.state is SelectionState.SELECTED
    assert copy.control_points() == source.control_points()
    assert copy.selection() == source.selection()


def test_spline_adopts_point_to_point_selection() -> None:
    source = _closed_triangle()

    spline = SplineSelectionModel.from_model(source)

    assert spline.state is SelectionState.SELECTED
    assert spline.selection() == source.selection()
    spline.move_point(1, (25, 5))
    assert spline.selection()[0].end == Point(25, 5)


def test_circle_discards_polygon_selection() -> None:
    circle = CircleSelectionModel.from_model(_closed_triangle())

    assert circle.state is SelectionState.NO_SELECTION
    assert circle.control_points() == ()
    assert circle.image is not None


def test_circle_adopts_single_open_point() -> None:
    source = PointToPointSelectionModel(_image())
    source.add_point((10, 10))

    circle = CircleSelectionModel.from_model(source)
    circle.add_point((13, 10))

    assert circle.state is SelectionState.SELECTED
    assert circle.control_points() == (Point(10, 10), Point(13, 10))


def test_finished_circle_only_survives_as_circle() -> None:
    source = CircleSelectionModel(_image())
    source.add_point((10, 10))
    source.add_point((13, 10))

    assert CircleSelectionModel.from_model(source).state is SelectionState.SELECTED
    polygon = PointToPointSelectionModel.from_model(source)
    assert polygon.state is SelectionState.SELECTED
    assert len(polygon.selection()) == 2


def test_copy_shares_dispatcher() -> None:
    queued = []
    source = PointToPointSelectionModel(_image(), dispatcher=queued.append)

    copy = create_selection_model("spline", copy=source)

    assert copy.dispatcher is source.dispatcher
