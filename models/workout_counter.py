# workout_counter.py
"""
Table-driven exercise state machine shared by every exercise counter.
Each exercise supplies its phase enum, default thresholds, a transition table
and the keypoints it reads; the base class owns the update cycle, feedback and
rep bookkeeping.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type

from config import config
from models.pose import Pose
from utils.logging_utils import get_logger

logger = get_logger("counter")

AngleSet = Dict[str, Optional[float]]
DistanceSet = Dict[str, Optional[float]]

BELOW = "below"
ABOVE = "above"


class ExerciseKind(str, Enum):
    """Exercises with a dedicated state machine"""
    SQUAT = "squat"
    BENCH_PRESS = "bench_press"
    DEADLIFT = "deadlift"
    PUSHUP = "pushup"
    PULLUP = "pullup"
    SHOULDER_PRESS = "shoulder_press"
    LATERAL_RAISE = "lateral_raise"
    LUNGE = "lunge"


class FeedbackType(str, Enum):
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class Feedback:
    """One form-feedback message for the current frame"""
    type: FeedbackType
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type.value, "text": self.text}


@dataclass(frozen=True)
class Transition:
    """
    Move from source to target when signal crosses threshold.
    completes_rep marks the edge that closes a cycle; aborts_rep marks an edge
    that returns to the start without a countable rep.
    """
    source: Enum
    target: Enum
    signal: str
    direction: str
    threshold: float
    completes_rep: bool = False
    aborts_rep: bool = False

    def triggered(self, value: float) -> bool:
        if self.direction == BELOW:
            return value < self.threshold
        return value > self.threshold


def flexion_cycle(phases: Type[Enum], signal: str, enter: float, bottom: float,
                  margin: float, finish: float) -> List[Transition]:
    """
    Four-phase cycle for movements that close a joint and open it again:
    start -> closing when signal < enter, -> bottom when signal < bottom,
    bottom -> opening when signal > bottom + margin, opening -> start (rep)
    when signal > finish.
    """
    start, closing, lowest, opening = list(phases)
    return [
        Transition(start, closing, signal, BELOW, enter),
        Transition(closing, lowest, signal, BELOW, bottom),
        Transition(lowest, opening, signal, ABOVE, bottom + margin),
        Transition(opening, start, signal, ABOVE, finish, completes_rep=True),
    ]


class ExerciseStateMachine(ABC):
    """
    Base class for all exercise counters.
    update() consumes one frame's angles and distances, applies at most one
    phase transition and repopulates feedback_messages.
    """

    kind: ExerciseKind
    phases: Type[Enum]
    driving_signals: Tuple[str, ...] = ()
    default_thresholds: Dict[str, float] = {}
    missing_signal_text: str = "Cannot detect pose"
    rejection_text: str = "Incomplete rep"

    def __init__(self, thresholds: Optional[Dict[str, float]] = None):
        self.thresholds: Dict[str, float] = dict(self.default_thresholds)
        if thresholds:
            self.thresholds.update(thresholds)
        self.transitions: List[Transition] = self.build_transitions(self.thresholds)

        self.phase = self.initial_phase
        self.rep_count = 0
        self.frame_count = 0
        self.feedback_messages: List[Feedback] = []

    @property
    def initial_phase(self) -> Enum:
        return next(iter(self.phases))

    @abstractmethod
    def build_transitions(self, thresholds: Dict[str, float]) -> List[Transition]:
        """Return the declarative transition table for this exercise"""

    @abstractmethod
    def extract_signals(self, pose: Pose) -> Tuple[AngleSet, DistanceSet]:
        """Compute the angles and distances this exercise reads from a pose"""

    def select_signals(self, angles: AngleSet) -> Dict[str, Optional[float]]:
        """Map the frame's angles onto the signals named in the transition table"""
        return {name: angles.get(name) for name in self.driving_signals}

    def before_transition(self, signals: Dict[str, float]):
        pass

    def on_enter(self, previous: Enum, current: Enum):
        pass

    def validate_rep(self, signals: Dict[str, float]) -> bool:
        return True

    def after_cycle(self):
        pass

    def check_form(self, angles: AngleSet, distances: DistanceSet):
        pass

    def warn(self, text: str):
        self.feedback_messages.append(Feedback(FeedbackType.WARNING, text))

    def error(self, text: str):
        self.feedback_messages.append(Feedback(FeedbackType.ERROR, text))

    def success(self, text: str):
        self.feedback_messages.append(Feedback(FeedbackType.SUCCESS, text))

    def update(self, angles: Optional[AngleSet], distances: Optional[DistanceSet] = None):
        """
        Advance the machine by one frame.
        A missing driving signal freezes the machine and emits a warning.
        """
        self.feedback_messages = []
        self.frame_count += 1
        angles = angles or {}
        distances = distances or {}

        signals = self.select_signals(angles)
        missing = [name for name in self.driving_signals if signals.get(name) is None]
        if missing:
            self.warn(self.missing_signal_text)
            logger.debug(f"{self.kind.value}: missing {missing}, holding phase {self.phase.value}")
            return

        self.before_transition(signals)

        for transition in self.transitions:
            if transition.source == self.phase and transition.triggered(signals[transition.signal]):
                self._apply(transition, signals)
                break

        self.check_form(angles, distances)

    def _apply(self, transition: Transition, signals: Dict[str, float]):
        previous = self.phase
        value = signals[transition.signal]
        self.phase = transition.target
        logger.info(
            f"{self.kind.value}: {previous.value} → {self.phase.value} "
            f"({transition.signal} {value:.1f}°, {transition.direction} {transition.threshold:g}°)"
        )

        if transition.completes_rep:
            if self.validate_rep(signals):
                self.rep_count += 1
                self.success("Good rep!")
                logger.info(f"🎉 {self.kind.value} REP #{self.rep_count} completed")
            self.after_cycle()
        elif transition.aborts_rep:
            self.error(self.rejection_text)
            logger.info(f"❌ {self.kind.value} attempt abandoned before bottom")
            self.after_cycle()

        self.on_enter(previous, self.phase)

    def reset(self):
        """Zero the rep count and return to the initial phase"""
        self.phase = self.initial_phase
        self.rep_count = 0
        self.frame_count = 0
        self.feedback_messages = []
        logger.info(f"{self.kind.value} counter reset")

    def get_status(self) -> Dict[str, Any]:
        """Get current counter status for debugging"""
        return {
            "exercise": self.kind.value,
            "phase": self.phase.value,
            "count": self.rep_count,
            "frame_count": self.frame_count,
            "feedback": [f.to_dict() for f in self.feedback_messages],
        }


def create_state_machine(kind: ExerciseKind,
                         thresholds: Optional[Dict[str, float]] = None) -> ExerciseStateMachine:
    """
    Factory method to create the state machine for an exercise kind.
    Imports are done locally to avoid circular import issues.
    """
    from models.squat_counter import SquatStateMachine
    from models.push_up_counter import BenchPressStateMachine, PushUpStateMachine
    from models.deadlift_counter import DeadliftStateMachine
    from models.pull_up_counter import PullUpStateMachine
    from models.shoulder_press_counter import ShoulderPressStateMachine
    from models.lateral_raise_counter import LateralRaiseStateMachine
    from models.lunge_counter import LungeStateMachine

    machines = {
        ExerciseKind.SQUAT: SquatStateMachine,
        ExerciseKind.BENCH_PRESS: BenchPressStateMachine,
        ExerciseKind.DEADLIFT: DeadliftStateMachine,
        ExerciseKind.PUSHUP: PushUpStateMachine,
        ExerciseKind.PULLUP: PullUpStateMachine,
        ExerciseKind.SHOULDER_PRESS: ShoulderPressStateMachine,
        ExerciseKind.LATERAL_RAISE: LateralRaiseStateMachine,
        ExerciseKind.LUNGE: LungeStateMachine,
    }

    kind = ExerciseKind(kind)
    overrides = dict(config.thresholds.get(kind.value, {}))
    if thresholds:
        overrides.update(thresholds)
    return machines[kind](overrides)


def create_roster() -> Dict[ExerciseKind, ExerciseStateMachine]:
    """One machine per supported exercise, created once per workout session"""
    roster = {ExerciseKind(mode): create_state_machine(ExerciseKind(mode)) for mode in config.supported_modes}
    logger.info(f"Initialized state machines: {[kind.value for kind in roster]}")
    return roster
