from __future__ import annotations

from typing import Any

from .circle import CircleSelectionModel
from .events import Dispatcher
from .model import SelectionModel
from .point_to_point import PointToPointSelectionModel
from .scissors import ScissorsSelectionModel
from .spline import SplineSelectionModel

MODEL_KINDS: dict[str, type[SelectionModel]] = {
    PointToPointSelectionModel.kind: PointToPointSelectionModel,
    SplineSelectionModel.kind: SplineSelectionModel,
    CircleSelectionModel.kind: CircleSelectionModel,
    ScissorsSelectionModel.kind: ScissorsSelectionModel,
}


def create_selection_model(
    kind: str,
    image: Any = None,
    *,
    copy: SelectionModel | None = None,
    dispatcher: Dispatcher | None = None,
    **options: Any,
) -> SelectionModel:
    """Build a fresh model of the given kind.

    With `copy`, the new model takes over `copy`'s image and dispatcher and
    keeps its selection when the new strategy can represent it.
    """

    try:
        model_cls = MODEL_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown selection mode {kind!r}; expected one of {sorted(MODEL_KINDS)}") from None
    if copy is not None:
        return model_cls.from_model(copy, **options)
    return model_cls(image, dispatcher=dispatcher, **options)
