import math

import pytest

from utils.geometry import (
    angle_between, euclidean_distance, horizontal_distance, vertical_deviation, vertical_distance,
)


def test_right_angle():
    assert angle_between((1, 0), (0, 0), (0, 1)) == pytest.approx(90.0)


def test_straight_line_is_180():
    assert angle_between((0, -1), (0, 0), (0, 1)) == pytest.approx(180.0)


def test_reflex_angle_is_folded():
    # Polar angles 170° and -170° differ by 340°, folded to 20°
    a = (math.cos(math.radians(170)), math.sin(math.radians(170)))
    c = (math.cos(math.radians(-170)), math.sin(math.radians(-170)))
    assert angle_between(a, (0, 0), c) == pytest.approx(20.0)


@pytest.mark.parametrize("points", [
    (None, (0, 0), (0, 1)),
    ((1, 0), None, (0, 1)),
    ((1, 0), (0, 0), None),
])
def test_angle_missing_point_is_none(points):
    assert angle_between(*points) is None


def test_vertical_deviation():
    assert vertical_deviation((0, 0), (0, 10)) == pytest.approx(0.0)
    assert vertical_deviation((0, 0), (10, 10)) == pytest.approx(45.0)
    assert vertical_deviation((10, 0), (0, 10)) == pytest.approx(45.0)
    assert vertical_deviation(None, (0, 10)) is None


def test_distances():
    assert horizontal_distance((3, 4), (0, 0)) == 3
    assert vertical_distance((3, 4), (0, 0)) == 4
    assert euclidean_distance((3, 4), (0, 0)) == pytest.approx(5.0)


def test_distances_propagate_none():
    assert horizontal_distance(None, (0, 0)) is None
    assert vertical_distance((0, 0), None) is None
    assert euclidean_distance(None, None) is None
