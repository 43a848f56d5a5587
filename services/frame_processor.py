# frame_processor.py
"""
Per-frame counting step. tick() takes the frame's pose plus an explicit
session snapshot and returns everything the UI and voice layer need; it has
no scheduling of its own so it can be driven by the camera loop, the HTTP
endpoints, or directly from tests.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.pose import Pose
from models.workout_counter import ExerciseKind, ExerciseStateMachine, Feedback
from utils.logging_utils import get_logger
from utils.motivation import get_form_quality, get_rep_announcement

logger = get_logger("frames")


@dataclass(frozen=True)
class SessionContext:
    """Snapshot of the session state a frame is processed against"""
    exercise: ExerciseKind
    machine: ExerciseStateMachine
    is_counting: bool


@dataclass
class RepEvent:
    exercise: ExerciseKind
    rep_count: int
    announcement: str


@dataclass
class FrameResult:
    """Side effects of one processed frame"""
    exercise: ExerciseKind
    phase: str
    rep_count: int
    pose_detected: bool = False
    counted: bool = False
    angle: Optional[float] = None
    angles: Dict[str, Optional[float]] = field(default_factory=dict)
    feedback: List[Feedback] = field(default_factory=list)
    form_quality: str = "Perfect"
    rep_event: Optional[RepEvent] = None
    timestamp: float = field(default_factory=time.time)


class FrameProcessor:
    """Runs pose -> geometry -> state machine for the active exercise"""

    def __init__(self):
        self.frames_processed = 0
        self.invariant_violations = 0

    def tick(self, pose: Optional[Pose], context: SessionContext) -> FrameResult:
        self.frames_processed += 1
        machine = context.machine

        result = FrameResult(
            exercise=context.exercise,
            phase=machine.phase.value,
            rep_count=machine.rep_count,
            pose_detected=pose is not None,
        )

        # No person in frame: nothing to evaluate
        if pose is None:
            logger.debug("No pose detected in frame")
            return result

        # Paused or not started: overlay only
        if not context.is_counting:
            return result

        angles, distances = machine.extract_signals(pose)

        previous_count = machine.rep_count
        previous_phase = machine.phase
        machine.update(angles, distances)

        result.counted = True
        result.phase = machine.phase.value
        result.rep_count = machine.rep_count
        result.angles = dict(angles)
        result.angle = machine.select_signals(angles).get(machine.driving_signals[0])
        result.feedback = list(machine.feedback_messages)
        result.form_quality = get_form_quality(result.feedback)

        if machine.phase != previous_phase:
            logger.debug(f"State changed: {previous_phase.value} → {machine.phase.value}")

        delta = machine.rep_count - previous_count
        if delta == 1:
            result.rep_event = RepEvent(
                exercise=context.exercise,
                rep_count=machine.rep_count,
                announcement=get_rep_announcement(machine.rep_count),
            )
        elif delta > 1:
            # Thresholds or table ordering bug; report, do not correct
            self.invariant_violations += 1
            logger.error(
                f"Invariant violation: {context.exercise.value} rep count jumped "
                f"{previous_count} → {machine.rep_count} in one update"
            )

        return result
