from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable

import numpy as np

from .image import RasterImage, scale_to_unit
from .interfaces import Point

logger = logging.getLogger(__name__)

# Neighbour order used for every per-node link table.
NEIGHBORS: tuple[tuple[int, int], ...] = (
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
    (0, -1),
    (1, -1),
)
_FORWARD = ((1, 0), (1, 1), (0, 1), (-1, 1))

# Keeps every link strictly positive so flat regions still prefer short paths.
EPSILON = 1e-3


def cross_gradients(plane: np.ndarray) -> dict[tuple[int, int], np.ndarray]:
    """Intensity change across each forward link of a 2D plane.

    Entry ``(dx, dy)`` at ``[y, x]`` describes the link from ``(x, y)`` to
    ``(x + dx, y + dy)``: the difference between the pixels on either side
    of that link. Borders replicate edge pixels.
    """

    h, w = plane.shape
    padded = np.pad(plane.astype(float), 1, mode="edge")

    def at(dx: int, dy: int) -> np.ndarray:
        return padded[1 + dy : 1 + dy + h, 1 + dx : 1 + dx + w]

    return {
        (1, 0): np.abs((at(0, -1) + at(1, -1)) - (at(0, 1) + at(1, 1))) / 4.0,
        (0, 1): np.abs((at(-1, 0) + at(-1, 1)) - (at(1, 0) + at(1, 1))) / 4.0,
        (1, 1): np.abs(at(1, 0) - at(0, 1)) / math.sqrt(2.0),
        (-1, 1): np.abs(at(-1, 0) - at(0, 1)) / math.sqrt(2.0),
    }


def cross_gradient_mono(image: RasterImage) -> dict[tuple[int, int], np.ndarray]:
    return cross_gradients(image.luminance())


def cross_gradient_color(image: RasterImage) -> dict[tuple[int, int], np.ndarray]:
    if image.channels == 1:
        return cross_gradient_mono(image)
    data = scale_to_unit(image.data.astype(float)[:, :, :3], image.data.dtype)
    per_channel = [cross_gradients(data[:, :, c]) for c in range(3)]
    return {d: sum(g[d] for g in per_channel) / 3.0 for d in _FORWARD}


WEIGHT_FUNCTIONS: dict[str, Callable[[RasterImage], dict[tuple[int, int], np.ndarray]]] = {
    "CrossGradMono": cross_gradient_mono,
    "CrossGradColor": cross_gradient_color,
}


@dataclass(frozen=True, slots=True)
class CostField:
    """Link costs between 8-connected pixels, derived once per image.

    ``costs[node * 8 + k]`` is the cost of moving from ``node`` to its
    neighbour ``NEIGHBORS[k]`` (``inf`` where the neighbour is outside the
    image). Strong edges across a link make it cheap.
    """

    width: int
    height: int
    costs: list[float]
    weights: str = "CrossGradMono"

    @classmethod
    def from_image(cls, image: RasterImage, weights: str = "CrossGradMono") -> "CostField":
        try:
            weight_fn = WEIGHT_FUNCTIONS[weights]
        except KeyError:
            raise ValueError(
                f"Unknown weights {weights!r}; expected one of {sorted(WEIGHT_FUNCTIONS)}"
            ) from None

        grads = weight_fn(image)
        g_max = max(float(g.max()) for g in grads.values())
        forward_costs = {
            d: (g_max - g + EPSILON) * math.hypot(*d) for d, g in grads.items()
        }

        h, w = image.height, image.width
        table = np.full((h, w, len(NEIGHBORS)), np.inf)
        for k, (dx, dy) in enumerate(NEIGHBORS):
            if (dx, dy) in forward_costs:
                src, ox, oy = forward_costs[(dx, dy)], 0, 0
            else:
                src, ox, oy = forward_costs[(-dx, -dy)], dx, dy
            y0, y1 = max(0, -dy), h - max(0, dy)
            x0, x1 = max(0, -dx), w - max(0, dx)
            if y1 <= y0 or x1 <= x0:
                continue
            table[y0:y1, x0:x1, k] = src[y0 + oy : y1 + oy, x0 + ox : x1 + ox]

        logger.debug("Built %s cost field for %dx%d image", weights, w, h)
        return cls(width=w, height=h, costs=table.reshape(-1).tolist(), weights=weights)

    @property
    def node_count(self) -> int:
        return self.width * self.height

    def contains(self, p: Point) -> bool:
        return 0 <= p.x < self.width and 0 <= p.y < self.height

    def node(self, p: Point) -> int:
        if not self.contains(p):
            raise ValueError(f"Point ({p.x}, {p.y}) outside {self.width}x{self.height} image")
        return p.y * self.width + p.x

    def point(self, node: int) -> Point:
        return Point(node % self.width, node // self.width)

    def link_cost(self, a: Point, b: Point) -> float:
        k = NEIGHBORS.index((b.x - a.x, b.y - a.y))
        return self.costs[self.node(a) * len(NEIGHBORS) + k]
