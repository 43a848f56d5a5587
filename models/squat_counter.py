# squat_counter.py
"""
Squat state machine driven by knee angle, with a depth gate and
advisory form checks for knee travel and torso lean.
"""

from enum import Enum
from typing import Dict, List, Tuple

from models.pose import Pose
from models.workout_counter import (
    ABOVE, AngleSet, DistanceSet, ExerciseKind, ExerciseStateMachine, Transition, flexion_cycle,
)
from utils.geometry import angle_between, horizontal_distance, vertical_deviation, vertical_distance
from utils.logging_utils import get_logger

logger = get_logger("counter.squat")


class SquatPhase(Enum):
    STANDING = "standing"
    DESCENDING = "descending"
    BOTTOM = "bottom"
    ASCENDING = "ascending"


class SquatStateMachine(ExerciseStateMachine):
    """
    standing -> descending -> bottom -> ascending -> standing.
    A rep only counts if the knee went below the depth threshold during the
    descent; otherwise the cycle is consumed and reported as too shallow.
    """

    kind = ExerciseKind.SQUAT
    phases = SquatPhase
    driving_signals = ("knee",)
    missing_signal_text = "Cannot detect legs"
    rejection_text = "Too shallow"

    default_thresholds = {
        "descend_knee": 150,   # Start descending when knee bends just a bit
        "bottom_knee": 110,
        "bottom_margin": 15,
        "stand_knee": 150,     # Standing position
        "depth_knee": 130,     # Min depth required for valid rep
        "abort_margin": 15,    # Above stand_knee before an unfinished descent is abandoned
        "knee_toe_ratio": 0.20,
        "torso_lean": 50,
    }

    def __init__(self, thresholds: Dict[str, float] = None):
        self.depth_satisfied = False
        super().__init__(thresholds)

    def build_transitions(self, thresholds: Dict[str, float]) -> List[Transition]:
        table = flexion_cycle(
            SquatPhase, "knee",
            enter=thresholds["descend_knee"],
            bottom=thresholds["bottom_knee"],
            margin=thresholds["bottom_margin"],
            finish=thresholds["stand_knee"],
        )
        # Standing back up before reaching the bottom ends the attempt.
        # Offset from the descent entry so knee jitter near stand_knee stays in descending.
        table.append(Transition(SquatPhase.DESCENDING, SquatPhase.STANDING, "knee", ABOVE,
                                thresholds["stand_knee"] + thresholds["abort_margin"], aborts_rep=True))
        return table

    def extract_signals(self, pose: Pose) -> Tuple[AngleSet, DistanceSet]:
        shoulder = pose.side("shoulder")
        hip = pose.side("hip")
        knee = pose.side("knee")
        ankle = pose.side("ankle")

        if hip is None or knee is None or ankle is None or shoulder is None:
            return {}, {}

        angles = {
            "knee": angle_between(hip, knee, ankle),
            "hip": angle_between(shoulder, hip, knee),
            "torsoLean": vertical_deviation(shoulder, hip),
        }
        distances = {
            "kneeToe": horizontal_distance(knee, ankle),
            "legLength": vertical_distance(hip, ankle),
        }
        return angles, distances

    def before_transition(self, signals: Dict[str, float]):
        if self.phase == SquatPhase.DESCENDING and signals["knee"] < self.thresholds["depth_knee"]:
            if not self.depth_satisfied:
                logger.info(f"Min depth reached at knee {signals['knee']:.1f}°")
            self.depth_satisfied = True

    def on_enter(self, previous, current):
        if previous == SquatPhase.STANDING and current == SquatPhase.DESCENDING:
            self.depth_satisfied = False

    def validate_rep(self, signals: Dict[str, float]) -> bool:
        if not self.depth_satisfied:
            self.error(self.rejection_text)
            logger.info("❌ Squat rep rejected - did not reach min depth")
            return False
        return True

    def after_cycle(self):
        self.depth_satisfied = False

    def check_form(self, angles: AngleSet, distances: DistanceSet):
        knee_toe = distances.get("kneeToe")
        leg_length = distances.get("legLength")
        if knee_toe is not None and leg_length:
            if knee_toe / leg_length > self.thresholds["knee_toe_ratio"]:
                self.warn("Keep knees behind toes")

        torso_lean = angles.get("torsoLean")
        if torso_lean is not None and torso_lean > self.thresholds["torso_lean"]:
            self.warn("Keep torso more upright")

    def reset(self):
        super().reset()
        self.depth_satisfied = False
