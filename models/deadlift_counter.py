# deadlift_counter.py
"""Deadlift counter driven by hip hinge angle (shoulder-hip-knee)."""

from enum import Enum
from typing import Dict, List, Tuple

from models.pose import Pose
from models.workout_counter import (
    AngleSet, DistanceSet, ExerciseKind, ExerciseStateMachine, Transition, flexion_cycle,
)
from utils.geometry import angle_between, vertical_deviation


class DeadliftPhase(Enum):
    STANDING = "standing"
    BENDING = "bending"
    BOTTOM = "bottom"
    LIFTING = "lifting"


class DeadliftStateMachine(ExerciseStateMachine):
    """standing -> bending -> bottom -> lifting -> standing"""

    kind = ExerciseKind.DEADLIFT
    phases = DeadliftPhase
    driving_signals = ("hip",)

    default_thresholds = {
        "bend_hip": 120,
        "bottom_hip": 90,
        "bottom_margin": 10,
        "stand_hip": 160,
    }

    def build_transitions(self, thresholds: Dict[str, float]) -> List[Transition]:
        return flexion_cycle(
            DeadliftPhase, "hip",
            enter=thresholds["bend_hip"],
            bottom=thresholds["bottom_hip"],
            margin=thresholds["bottom_margin"],
            finish=thresholds["stand_hip"],
        )

    def extract_signals(self, pose: Pose) -> Tuple[AngleSet, DistanceSet]:
        shoulder = pose.side("shoulder")
        hip = pose.side("hip")
        knee = pose.side("knee")
        ankle = pose.side("ankle")

        if shoulder is None or hip is None or knee is None:
            return {}, {}

        angles = {
            "hip": angle_between(shoulder, hip, knee),
            "knee": angle_between(hip, knee, ankle),
            "backAngle": vertical_deviation(shoulder, hip),
        }
        return angles, {}
