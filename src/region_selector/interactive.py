from __future__ import annotations

import logging
import math
from typing import Iterable

from .model import SelectionModel, SelectionStateError
from .polyline import PolyLine
from .viewer import SelectionController

logger = logging.getLogger(__name__)


def _polyline_coords(lines: Iterable[PolyLine]) -> tuple[list[float], list[float]]:
    """Flatten polylines into one coordinate list, NaN-separated for plotting."""

    xs: list[float] = []
    ys: list[float] = []
    for line in lines:
        if xs:
            xs.append(math.nan)
            ys.append(math.nan)
        xs.extend(line.xs())
        ys.extend(line.ys())
    return xs, ys


def launch_matplotlib_tracer(
    model: SelectionModel,
    *,
    interval_ms: int = 40,
    title: str | None = None,
) -> SelectionController:
    """Interactive matplotlib window for tracing a selection on `model`'s image.

    Controls:
    - Left click adds a control point; middle click finishes; right click undoes.
    - Once finished, drag a control point with the left button to move it.
    - Press `escape` to reset and `c` to cancel a running boundary search.
    """

    try:
        import matplotlib.pyplot as plt
        from matplotlib.animation import FuncAnimation
    except Exception as exc:  # pragma: no cover
        raise RuntimeError(
            "matplotlib is required for interactive tracing. "
            "Install with: pip install matplotlib"
        ) from exc

    if model.image is None:
        raise ValueError("Model has no image to trace")

    controller = SelectionController(model)
    fig, ax = plt.subplots()
    ax.imshow(model.image.data, cmap="gray")
    ax.set_title(title or f"Trace selection ({model.kind})")

    (perimeter,) = ax.plot([], [], color="blue", linewidth=1)
    (wire,) = ax.plot([], [], color="yellow", linewidth=1)
    (guides,) = ax.plot([], [], color="yellow", linewidth=1, linestyle="--")
    (anchors,) = ax.plot([], [], linestyle="none", marker="o", color="cyan", markersize=4)
    overlay = None
    press: dict = {"pos": None, "dragged": False}

    def _event_xy(event) -> tuple[float, float] | None:
        if event.inaxes is not ax or event.xdata is None or event.ydata is None:
            return None
        return event.xdata, event.ydata

    def _guard(action) -> None:
        try:
            action()
        except (SelectionStateError, ValueError) as exc:
            logger.warning("Ignored interaction: %s", exc)

    def on_press(event) -> None:
        xy = _event_xy(event)
        if xy is None:
            return
        press["pos"] = xy
        press["dragged"] = False
        controller.pressed(xy[0], xy[1], int(event.button))

    def on_motion(event) -> None:
        xy = _event_xy(event)
        if xy is None:
            return
        if press["pos"] is not None:
            press["dragged"] = True
            controller.dragged(*xy)
        else:
            controller.moved(*xy)

    def on_release(event) -> None:
        xy = _event_xy(event)
        start = press["pos"]
        press["pos"] = None
        if xy is None or start is None:
            return
        if controller.is_interacting():
            _guard(lambda: controller.released(xy[0], xy[1], int(event.button)))
        elif not press["dragged"]:
            _guard(lambda: controller.click(xy[0], xy[1], int(event.button)))

    def on_key(event) -> None:
        if event.key == "escape":
            model.reset()
        elif event.key == "c" and model.state.is_processing():
            _guard(model.cancel_processing)  # type: ignore[attr-defined]

    def update(_: int):
        nonlocal overlay
        perimeter.set_data(*_polyline_coords(model.selection()))
        live = controller.live_wire()
        wire.set_data(*_polyline_coords([] if live is None else [live]))
        guides.set_data(*_polyline_coords(controller.move_guides()))
        points = model.control_points()
        anchors.set_data([p.x for p in points], [p.y for p in points])

        tint = controller.progress_overlay()
        if tint is not None:
            if overlay is None:
                overlay = ax.imshow(tint)
            else:
                overlay.set_data(tint)
                overlay.set_visible(True)
        elif overlay is not None:
            overlay.set_visible(False)
        return (perimeter, wire, guides, anchors)

    canvas = fig.canvas
    canvas.mpl_connect("button_press_event", on_press)
    canvas.mpl_connect("motion_notify_event", on_motion)
    canvas.mpl_connect("button_release_event", on_release)
    canvas.mpl_connect("key_press_event", on_key)

    fig._region_selector_anim = FuncAnimation(fig, update, interval=interval_ms, blit=False)  # type: ignore[attr-defined]
    plt.show()
    controller.close()
    return controller
