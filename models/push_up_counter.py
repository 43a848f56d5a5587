# push_up_counter.py
"""
Elbow-driven pressing counters: push-up and bench press.
Both use the same flexion cycle with a hysteresis band on the bottom exit.
"""

from enum import Enum
from typing import Dict, List, Tuple

from models.pose import Pose
from models.workout_counter import (
    AngleSet, DistanceSet, ExerciseKind, ExerciseStateMachine, Transition, flexion_cycle,
)
from utils.geometry import angle_between


def elbow_signals(pose: Pose) -> Tuple[AngleSet, DistanceSet]:
    """Elbow angle from whichever arm is visible, left arm first."""
    shoulder = pose.side("shoulder")
    elbow = pose.side("elbow")
    wrist = pose.side("wrist")

    if shoulder is None or elbow is None or wrist is None:
        return {}, {}
    return {"elbow": angle_between(shoulder, elbow, wrist)}, {}


class PushUpPhase(Enum):
    UP = "up"
    DESCENDING = "descending"
    BOTTOM = "bottom"
    ASCENDING = "ascending"


class BenchPressPhase(Enum):
    EXTENDED = "extended"
    DESCENDING = "descending"
    BOTTOM = "bottom"
    ASCENDING = "ascending"


PRESS_THRESHOLDS = {
    "descend_elbow": 120,
    "bottom_elbow": 90,
    "bottom_margin": 10,
    "extended_elbow": 160,
}


class PushUpStateMachine(ExerciseStateMachine):
    """up -> descending -> bottom -> ascending -> up"""

    kind = ExerciseKind.PUSHUP
    phases = PushUpPhase
    driving_signals = ("elbow",)
    default_thresholds = PRESS_THRESHOLDS

    def build_transitions(self, thresholds: Dict[str, float]) -> List[Transition]:
        return flexion_cycle(
            PushUpPhase, "elbow",
            enter=thresholds["descend_elbow"],
            bottom=thresholds["bottom_elbow"],
            margin=thresholds["bottom_margin"],
            finish=thresholds["extended_elbow"],
        )

    def extract_signals(self, pose: Pose) -> Tuple[AngleSet, DistanceSet]:
        return elbow_signals(pose)


class BenchPressStateMachine(ExerciseStateMachine):
    """extended -> descending -> bottom -> ascending -> extended"""

    kind = ExerciseKind.BENCH_PRESS
    phases = BenchPressPhase
    driving_signals = ("elbow",)
    default_thresholds = PRESS_THRESHOLDS

    def build_transitions(self, thresholds: Dict[str, float]) -> List[Transition]:
        return flexion_cycle(
            BenchPressPhase, "elbow",
            enter=thresholds["descend_elbow"],
            bottom=thresholds["bottom_elbow"],
            margin=thresholds["bottom_margin"],
            finish=thresholds["extended_elbow"],
        )

    def extract_signals(self, pose: Pose) -> Tuple[AngleSet, DistanceSet]:
        return elbow_signals(pose)
