import pytest

from region_selector.interfaces import Point
from region_selector.points_io import load_control_points_csv, parse_points, save_control_points_csv


def test_control_points_csv_round_trip(tmp_path) -> None:
    points = [Point(1, 2), Point(30, 4), Point(5, 60)]
    csv_path = tmp_path / "nested" / "points.csv"

    save_control_points_csv(csv_path, points)

    assert csv_path.read_text(encoding="utf-8").splitlines()[0] == "x,y"
    assert load_control_points_csv(csv_path) == points


def test_parse_points_accepts_spaces_and_semicolons() -> None:
    assert parse_points("1,2 3,4;5,6") == [Point(1, 2), Point(3, 4), Point(5, 6)]
    assert parse_points("  ") == []


def test_parse_points_rejects_malformed_tokens() -> None:
    with pytest.raises(ValueError, match="Expected 'x,y'"):
        parse_points("1,2,3")
    with pytest.raises(ValueError, match="Non-integer coordinate"):
        parse_points("a,2")
