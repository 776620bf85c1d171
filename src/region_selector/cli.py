from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .cost import WEIGHT_FUNCTIONS
from .factory import MODEL_KINDS, create_selection_model
from .image import load_image
from .interactive import launch_matplotlib_tracer
from .logging_config import LOG_LEVELS, setup_logging
from .model import SelectionModel, SelectionNotReadyError, SelectionStateError
from .points_io import load_control_points_csv, parse_points, save_control_points_csv
from .scissors import ScissorsConfig, ScissorsSelectionModel

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Select an image region and save the enclosed pixels")
    parser.add_argument("image", help="Image to select from")
    parser.add_argument(
        "--mode",
        choices=sorted(MODEL_KINDS),
        default="point-to-point",
        help="Selection tool used to connect control points",
    )
    parser.add_argument(
        "--points",
        default=None,
        help='Control points as "x,y x,y ..." in image pixel coordinates',
    )
    parser.add_argument("--points-csv", default=None, help="Read control points from a CSV with x,y columns")
    parser.add_argument("--output", default=None, help="Where to write the extracted region (PNG)")
    parser.add_argument("--save-points", default=None, help="Write the final control points to this CSV")
    parser.add_argument(
        "--show-live",
        action="store_true",
        help="Open an interactive tracing window instead of (or after) replaying points",
    )
    parser.add_argument(
        "--weights",
        choices=sorted(WEIGHT_FUNCTIONS),
        default="CrossGradMono",
        help="Edge cost function for scissors mode",
    )
    parser.add_argument("--search-timeout", type=float, default=None, help="Seconds to wait for each scissors search")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging verbosity",
    )
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    return parser


def _collect_points(args) -> list:
    points = []
    if args.points_csv:
        csv_path = Path(args.points_csv)
        if not csv_path.exists():
            raise ValueError(f"Control point CSV not found: {csv_path}")
        points.extend(load_control_points_csv(csv_path))
    if args.points:
        points.extend(parse_points(args.points))
    return points


def _build_model(args) -> SelectionModel:
    image = load_image(args.image)
    if args.mode == ScissorsSelectionModel.kind:
        return create_selection_model(args.mode, image, config=ScissorsConfig(weights=args.weights))
    return create_selection_model(args.mode, image)


def _wait_for_search(model: SelectionModel, timeout: float | None) -> None:
    if not model.state.is_processing():
        return
    assert isinstance(model, ScissorsSelectionModel)
    if not model.wait_for_processing(timeout):
        model.cancel_processing()
        raise ValueError(f"Boundary search did not finish within {timeout} s")


def _replay(model: SelectionModel, points, timeout: float | None) -> None:
    for p in points:
        _wait_for_search(model, timeout)
        model.add_point(p)
    _wait_for_search(model, timeout)
    if model.state.can_finish():
        model.finish_selection()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        points = _collect_points(args)
        model = _build_model(args)
        _replay(model, points, args.search_timeout)
    except (ValueError, FileNotFoundError, SelectionStateError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if args.show_live:
        launch_matplotlib_tracer(model)
    elif not points:
        print("Error: no control points given; use --points, --points-csv or --show-live", file=sys.stderr)
        return 2

    if args.save_points:
        save_control_points_csv(args.save_points, model.control_points())
        logger.info("Saved %d control points to %s", len(model.control_points()), args.save_points)

    if args.output:
        try:
            model.save_selection(args.output)
        except (SelectionNotReadyError, ValueError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 2
        print(f"Saved selection to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
