# pose.py
"""
Single-person pose representation shared by the pose service and the counters.
Keypoints follow the COCO-17 order used by both YOLO pose and MoveNet.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np
from config import config

KEYPOINT_NAMES = [
    "nose",
    "left_eye", "right_eye",
    "left_ear", "right_ear",
    "left_shoulder", "right_shoulder",
    "left_elbow", "right_elbow",
    "left_wrist", "right_wrist",
    "left_hip", "right_hip",
    "left_knee", "right_knee",
    "left_ankle", "right_ankle",
]
KEYPOINT_INDEX = {name: i for i, name in enumerate(KEYPOINT_NAMES)}

# Limb connections drawn by the overlay
SKELETON = [
    ("left_shoulder", "right_shoulder"),
    ("left_shoulder", "left_elbow"),
    ("left_elbow", "left_wrist"),
    ("right_shoulder", "right_elbow"),
    ("right_elbow", "right_wrist"),
    ("left_shoulder", "left_hip"),
    ("right_shoulder", "right_hip"),
    ("left_hip", "right_hip"),
    ("left_hip", "left_knee"),
    ("left_knee", "left_ankle"),
    ("right_hip", "right_knee"),
    ("right_knee", "right_ankle"),
]


@dataclass
class Keypoint:
    """One anatomical landmark in image space"""
    name: str
    x: float
    y: float
    confidence: float


class Pose:
    """
    Keypoints of one detected body in one frame, stored as an (17, 3) array
    of [x, y, confidence].
    """

    def __init__(self, data: np.ndarray, min_confidence: Optional[float] = None):
        data = np.asarray(data, dtype=float)
        if data.ndim != 2 or data.shape[0] != len(KEYPOINT_NAMES) or data.shape[1] < 3:
            raise ValueError(f"Expected keypoint array of shape (17, 3), got {data.shape}")
        self.data = data[:, :3]
        self.min_confidence = config.min_confidence if min_confidence is None else min_confidence

    @classmethod
    def from_array(cls, data: np.ndarray) -> "Pose":
        return cls(data)

    @classmethod
    def from_keypoints(cls, keypoints: Iterable[Any]) -> "Pose":
        """
        Build a pose from named keypoints ({name, x, y, score|confidence}).
        Landmarks that are not supplied get zero confidence.
        """
        data = np.zeros((len(KEYPOINT_NAMES), 3), dtype=float)
        for kp in keypoints:
            if isinstance(kp, dict):
                name = kp.get("name")
                x, y = kp.get("x"), kp.get("y")
                confidence = kp.get("confidence", kp.get("score", 0.0))
            else:
                name, x, y, confidence = kp.name, kp.x, kp.y, kp.confidence
            if name not in KEYPOINT_INDEX:
                continue
            data[KEYPOINT_INDEX[name]] = (x, y, confidence or 0.0)
        return cls(data)

    @property
    def keypoints(self) -> List[Keypoint]:
        return [
            Keypoint(name, float(row[0]), float(row[1]), float(row[2]))
            for name, row in zip(KEYPOINT_NAMES, self.data)
        ]

    def confidence(self, name: str) -> float:
        return float(self.data[KEYPOINT_INDEX[name]][2])

    def point(self, name: str) -> Optional[Tuple[float, float]]:
        """(x, y) of a landmark, or None when below the confidence threshold"""
        row = self.data[KEYPOINT_INDEX[name]]
        if row[2] < self.min_confidence:
            return None
        return float(row[0]), float(row[1])

    def first_visible(self, left: str, right: str) -> Optional[Tuple[float, float]]:
        """Left-side landmark first, mirrored right-side landmark as fallback."""
        point = self.point(left)
        if point is None:
            point = self.point(right)
        return point

    def side(self, joint: str) -> Optional[Tuple[float, float]]:
        """Shorthand for first_visible('left_<joint>', 'right_<joint>')"""
        return self.first_visible(f"left_{joint}", f"right_{joint}")

    def visible_points(self) -> Dict[str, Tuple[float, float]]:
        points = {}
        for name in KEYPOINT_NAMES:
            point = self.point(name)
            if point is not None:
                points[name] = point
        return points
