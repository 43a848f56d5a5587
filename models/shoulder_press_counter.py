# shoulder_press_counter.py
"""
Shoulder press counter using the average elbow angle of both arms.
Falls back to a single arm when only one side is visible.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from models.pose import Pose
from models.workout_counter import (
    ABOVE, BELOW, AngleSet, DistanceSet, ExerciseKind, ExerciseStateMachine, Transition,
)
from utils.geometry import angle_between


class ShoulderPressPhase(Enum):
    DOWN = "down"
    UP = "up"


class ShoulderPressStateMachine(ExerciseStateMachine):
    """down -> up -> down, counting on the way back down"""

    kind = ExerciseKind.SHOULDER_PRESS
    phases = ShoulderPressPhase
    driving_signals = ("elbow",)
    missing_signal_text = "Cannot detect arms - face camera with arms visible"

    default_thresholds = {
        "down_elbow": 100,
        "up_elbow": 160,
        "arm_balance_tolerance": 20,
    }

    def build_transitions(self, thresholds: Dict[str, float]) -> List[Transition]:
        return [
            Transition(ShoulderPressPhase.DOWN, ShoulderPressPhase.UP, "elbow", ABOVE,
                       thresholds["up_elbow"]),
            Transition(ShoulderPressPhase.UP, ShoulderPressPhase.DOWN, "elbow", BELOW,
                       thresholds["down_elbow"], completes_rep=True),
        ]

    def extract_signals(self, pose: Pose) -> Tuple[AngleSet, DistanceSet]:
        angles = {
            "leftElbow": angle_between(
                pose.point("left_shoulder"), pose.point("left_elbow"), pose.point("left_wrist")),
            "rightElbow": angle_between(
                pose.point("right_shoulder"), pose.point("right_elbow"), pose.point("right_wrist")),
        }
        return angles, {}

    def select_signals(self, angles: AngleSet) -> Dict[str, Optional[float]]:
        left = angles.get("leftElbow")
        right = angles.get("rightElbow")

        if left is not None and right is not None:
            elbow = (left + right) / 2
        else:
            elbow = left if left is not None else right

        return {"elbow": elbow}

    def check_form(self, angles: AngleSet, distances: DistanceSet):
        left = angles.get("leftElbow")
        right = angles.get("rightElbow")
        if left is not None and right is not None:
            if abs(left - right) > self.thresholds["arm_balance_tolerance"]:
                self.warn("Balance both arms evenly")
