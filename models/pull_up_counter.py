# pull_up_counter.py
"""
Pull-up counter using elbow flexion: the arms close while pulling to the top
and open again on the way back to a dead hang.
"""

from enum import Enum
from typing import Dict, List, Tuple

from models.pose import Pose
from models.push_up_counter import elbow_signals
from models.workout_counter import (
    AngleSet, DistanceSet, ExerciseKind, ExerciseStateMachine, Transition, flexion_cycle,
)


class PullUpPhase(Enum):
    HANGING = "hanging"
    PULLING = "pulling"
    TOP = "top"
    DESCENDING = "descending"


class PullUpStateMachine(ExerciseStateMachine):
    """hanging -> pulling -> top -> descending -> hanging"""

    kind = ExerciseKind.PULLUP
    phases = PullUpPhase
    driving_signals = ("elbow",)

    default_thresholds = {
        "pull_elbow": 120,
        "top_elbow": 90,
        "top_margin": 10,
        "hang_elbow": 160,
    }

    def build_transitions(self, thresholds: Dict[str, float]) -> List[Transition]:
        return flexion_cycle(
            PullUpPhase, "elbow",
            enter=thresholds["pull_elbow"],
            bottom=thresholds["top_elbow"],
            margin=thresholds["top_margin"],
            finish=thresholds["hang_elbow"],
        )

    def extract_signals(self, pose: Pose) -> Tuple[AngleSet, DistanceSet]:
        return elbow_signals(pose)
