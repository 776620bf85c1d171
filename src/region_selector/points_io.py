from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from .interfaces import Point


def parse_points(text: str) -> list[Point]:
    """Parse whitespace- or semicolon-separated ``x,y`` pairs."""

    out: list[Point] = []
    for token in text.replace(";", " ").split():
        parts = token.split(",")
        if len(parts) != 2:
            raise ValueError(f"Expected 'x,y' but got {token!r}")
        try:
            out.append(Point(int(parts[0]), int(parts[1])))
        except ValueError as exc:
            raise ValueError(f"Non-integer coordinate in {token!r}") from exc
    return out


def save_control_points_csv(path: str | Path, points: Iterable[Point]) -> None:
    """Write control points so a selection can be replayed later."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=["x", "y"])
        writer.writeheader()
        for p in points:
            writer.writerow({"x": p.x, "y": p.y})


def load_control_points_csv(path: str | Path) -> list[Point]:
    in_path = Path(path)
    with in_path.open("r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        out: list[Point] = []
        for row in reader:
            out.append(Point(int(row["x"]), int(row["y"])))
    return out
