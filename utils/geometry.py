# geometry.py
"""
Angle and distance helpers for 2D keypoints.
Every function returns None when any input point is missing so callers can
tell "no signal" apart from a real 0° or 0px measurement.
"""

from typing import Optional, Sequence

import numpy as np

Point = Optional[Sequence[float]]


def angle_between(a: Point, pivot: Point, c: Point) -> Optional[float]:
    """
    Angle at pivot between the rays pivot->a and pivot->c, in degrees [0, 180].
    Uses the difference of the two rays' polar angles, folding reflex angles.
    """
    if a is None or pivot is None or c is None:
        return None

    radians1 = np.arctan2(a[1] - pivot[1], a[0] - pivot[0])
    radians2 = np.arctan2(c[1] - pivot[1], c[0] - pivot[0])

    angle = float(np.abs(np.degrees(radians1 - radians2)))
    if angle > 180:
        angle = 360 - angle
    return angle


def vertical_deviation(top: Point, bottom: Point) -> Optional[float]:
    """Absolute angle of the segment top->bottom from the vertical axis."""
    if top is None or bottom is None:
        return None

    dx = bottom[0] - top[0]
    dy = bottom[1] - top[1]
    return float(np.abs(np.degrees(np.arctan2(dx, dy))))


def horizontal_distance(p: Point, q: Point) -> Optional[float]:
    if p is None or q is None:
        return None
    return float(abs(p[0] - q[0]))


def vertical_distance(p: Point, q: Point) -> Optional[float]:
    if p is None or q is None:
        return None
    return float(abs(p[1] - q[1]))


def euclidean_distance(p: Point, q: Point) -> Optional[float]:
    if p is None or q is None:
        return None
    return float(np.hypot(q[0] - p[0], q[1] - p[1]))
