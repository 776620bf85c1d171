"""Interactive image region selection: point-to-point, spline, circle and intelligent scissors."""

from .circle import CIRCLE_SAMPLES, CircleSelectionModel, circle_boundary
from .cost import CostField
from .events import ChangeNotifier, PropertyChange
from .factory import MODEL_KINDS, create_selection_model
from .image import RasterImage, extract_region, load_image
from .interfaces import ImageSource, Point
from .model import PointIndexError, SelectionModel, SelectionNotReadyError, SelectionStateError
from .point_to_point import PointToPointSelectionModel
from .points_io import load_control_points_csv, save_control_points_csv
from .polyline import PolyLine
from .scissors import ScissorsConfig, ScissorsSelectionModel
from .search import PathSearch, SearchResult, SearchSnapshot, SearchWorker, ShortestPathTree, shortest_path
from .spline import SPLINE_SAMPLES, SplineSelectionModel, catmull_rom
from .state import SelectionState
from .viewer import SelectionController

__all__ = [
    "CIRCLE_SAMPLES",
    "CircleSelectionModel",
    "circle_boundary",
    "CostField",
    "ChangeNotifier",
    "PropertyChange",
    "MODEL_KINDS",
    "create_selection_model",
    "RasterImage",
    "extract_region",
    "load_image",
    "ImageSource",
    "Point",
    "PointIndexError",
    "SelectionModel",
    "SelectionNotReadyError",
    "SelectionStateError",
    "PointToPointSelectionModel",
    "load_control_points_csv",
    "save_control_points_csv",
    "PolyLine",
    "ScissorsConfig",
    "ScissorsSelectionModel",
    "PathSearch",
    "SearchResult",
    "SearchSnapshot",
    "SearchWorker",
    "ShortestPathTree",
    "shortest_path",
    "SPLINE_SAMPLES",
    "SplineSelectionModel",
    "catmull_rom",
    "SelectionState",
    "SelectionController",
]
