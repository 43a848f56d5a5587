# lunge_counter.py
"""Lunge counter driven by front knee angle."""

from enum import Enum
from typing import Dict, List, Tuple

from models.pose import Pose
from models.workout_counter import (
    AngleSet, DistanceSet, ExerciseKind, ExerciseStateMachine, Transition, flexion_cycle,
)
from utils.geometry import angle_between


class LungePhase(Enum):
    STANDING = "standing"
    DESCENDING = "descending"
    BOTTOM = "bottom"
    ASCENDING = "ascending"


class LungeStateMachine(ExerciseStateMachine):
    """standing -> descending -> bottom -> ascending -> standing"""

    kind = ExerciseKind.LUNGE
    phases = LungePhase
    driving_signals = ("knee",)

    default_thresholds = {
        "descend_knee": 120,
        "bottom_knee": 90,
        "bottom_margin": 10,
        "stand_knee": 160,
    }

    def build_transitions(self, thresholds: Dict[str, float]) -> List[Transition]:
        return flexion_cycle(
            LungePhase, "knee",
            enter=thresholds["descend_knee"],
            bottom=thresholds["bottom_knee"],
            margin=thresholds["bottom_margin"],
            finish=thresholds["stand_knee"],
        )

    def extract_signals(self, pose: Pose) -> Tuple[AngleSet, DistanceSet]:
        hip = pose.side("hip")
        knee = pose.side("knee")
        ankle = pose.side("ankle")

        if hip is None or knee is None or ankle is None:
            return {}, {}
        return {"knee": angle_between(hip, knee, ankle)}, {}
