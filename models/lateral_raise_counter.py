# lateral_raise_counter.py
"""
Lateral raise counter using shoulder abduction (hip-shoulder-elbow angle).
The angle opens while raising, so thresholds run the opposite way to the
flexion-based counters.
"""

from enum import Enum
from typing import Dict, List, Tuple

from models.pose import Pose
from models.workout_counter import (
    ABOVE, BELOW, AngleSet, DistanceSet, ExerciseKind, ExerciseStateMachine, Transition,
)
from utils.geometry import angle_between


class LateralRaisePhase(Enum):
    DOWN = "down"
    RAISING = "raising"
    TOP = "top"
    LOWERING = "lowering"


class LateralRaiseStateMachine(ExerciseStateMachine):
    """down -> raising -> top -> lowering -> down"""

    kind = ExerciseKind.LATERAL_RAISE
    phases = LateralRaisePhase
    driving_signals = ("shoulder",)

    default_thresholds = {
        "raise_shoulder": 60,
        "top_shoulder": 90,
        "top_margin": 10,
        "down_shoulder": 30,
    }

    def build_transitions(self, thresholds: Dict[str, float]) -> List[Transition]:
        P = LateralRaisePhase
        return [
            Transition(P.DOWN, P.RAISING, "shoulder", ABOVE, thresholds["raise_shoulder"]),
            Transition(P.RAISING, P.TOP, "shoulder", ABOVE, thresholds["top_shoulder"]),
            Transition(P.TOP, P.LOWERING, "shoulder", BELOW,
                       thresholds["top_shoulder"] - thresholds["top_margin"]),
            Transition(P.LOWERING, P.DOWN, "shoulder", BELOW, thresholds["down_shoulder"],
                       completes_rep=True),
        ]

    def extract_signals(self, pose: Pose) -> Tuple[AngleSet, DistanceSet]:
        shoulder = pose.side("shoulder")
        elbow = pose.side("elbow")
        hip = pose.side("hip")

        if shoulder is None or elbow is None or hip is None:
            return {}, {}
        return {"shoulder": angle_between(hip, shoulder, elbow)}, {}
