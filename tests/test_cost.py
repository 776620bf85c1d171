import math

import numpy as np
import pytest

from region_selector.cost import EPSILON, NEIGHBORS, CostField, cross_gradients
from region_selector.image import RasterImage
from region_selector.interfaces import Point


def _edge_image() -> RasterImage:
    data = np.zeros((20, 20), dtype=np.uint8)
    data[:, 10:] = 255
    return RasterImage(data)


def test_cross_gradients_flat_plane_is_zero() -> None:
    grads = cross_gradients(np.ones((4, 5)))

    assert set(grads) == {(1, 0), (0, 1), (1, 1), (-1, 1)}
    for g in grads.values():
        assert g.shape == (4, 5)
        assert float(g.max()) == 0.0


def test_flat_image_links_cost_epsilon_times_length() -> None:
    field = CostField.from_image(RasterImage(np.zeros((3, 3))))

    assert field.link_cost(Point(1, 1), Point(2, 1)) == pytest.approx(EPSILON)
    assert field.link_cost(Point(1, 1), Point(2, 2)) == pytest.approx(EPSILON * math.sqrt(2.0))


def test_links_leaving_the_image_are_infinite() -> None:
    field = CostField.from_image(_edge_image())

    assert field.link_cost(Point(0, 0), Point(-1, 0)) == math.inf
    assert field.link_cost(Point(19, 19), Point(19, 20)) == math.inf
    assert len(field.costs) == field.node_count * len(NEIGHBORS)


def test_links_along_an_edge_are_cheaper() -> None:
    field = CostField.from_image(_edge_image())

    along_edge = field.link_cost(Point(10, 5), Point(10, 6))
    flat = field.link_cost(Point(3, 5), Point(3, 6))

    assert along_edge < flat


def test_int64_image_still_has_edge_costs() -> None:
    data = np.zeros((20, 20), dtype=np.int64)
    data[:, 10:] = 255
    field = CostField.from_image(RasterImage(data))

    assert field.link_cost(Point(10, 5), Point(10, 6)) < field.link_cost(Point(3, 5), Point(3, 6))


def test_link_costs_are_symmetric() -> None:
    field = CostField.from_image(_edge_image())

    for a, b in [(Point(9, 4), Point(10, 5)), (Point(10, 4), Point(9, 5)), (Point(4, 4), Point(4, 5))]:
        assert field.link_cost(a, b) == pytest.approx(field.link_cost(b, a))


def test_node_outside_field_raises() -> None:
    field = CostField.from_image(_edge_image())

    with pytest.raises(ValueError, match="outside 20x20 image"):
        field.node(Point(20, 0))
    assert field.point(field.node(Point(7, 3))) == Point(7, 3)


def test_unknown_weights_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown weights"):
        CostField.from_image(_edge_image(), "Sobel")


def test_color_weights_accept_rgb() -> None:
    data = np.zeros((6, 6, 3), dtype=np.uint8)
    data[:, 3:, 0] = 255
    field = CostField.from_image(RasterImage(data), "CrossGradColor")

    assert field.weights == "CrossGradColor"
    assert field.link_cost(Point(3, 2), Point(3, 3)) < field.link_cost(Point(0, 2), Point(0, 3))
