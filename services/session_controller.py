# session_controller.py
"""
Workout session controller.
Owns the exercise roster, the active exercise, the counting flag and the
session log, and hands the finished log to the calorie estimator.
"""

from typing import Any, Dict, List, Optional, Tuple

from config import config
from models.pose import Pose
from models.schemas import SessionSummary, WorkoutEntry
from models.workout_counter import ExerciseKind, ExerciseStateMachine, create_roster
from services.calorie_service import CalorieServiceError, calorie_service
from services.frame_processor import FrameProcessor, FrameResult, SessionContext
from utils.logging_utils import get_logger
from utils.motivation import get_calories_text, get_start_text

logger = get_logger("session")


class SessionActionError(Exception):
    """A user action that is not allowed in the current session state"""


class WorkoutSession:
    """
    One workout session: a state machine per exercise, exactly one of them
    active at a time. Reps move into the session log on pause, on exercise
    switch and at session end.
    """

    def __init__(self, user_id: Optional[str] = None, calorie_client=None,
                 frame_processor: Optional[FrameProcessor] = None):
        self.user_id = user_id
        self.user_profile: Optional[Dict[str, Any]] = None
        self.calorie_client = calorie_client or calorie_service
        self.frame_processor = frame_processor or FrameProcessor()

        self.machines: Dict[ExerciseKind, ExerciseStateMachine] = create_roster()
        self.exercise = ExerciseKind(config.default_mode)
        self.is_active = False
        self.is_counting = False

        self.session_log: Dict[ExerciseKind, int] = {}
        self._logged_reps: Dict[ExerciseKind, int] = {}

        self.frame_loop = None
        self.last_result: Optional[FrameResult] = None
        self.last_rep_at = 0
        self.last_error: Optional[str] = None

    @property
    def machine(self) -> ExerciseStateMachine:
        return self.machines[self.exercise]

    def context(self) -> SessionContext:
        return SessionContext(exercise=self.exercise, machine=self.machine, is_counting=self.is_counting)

    # ---- session lifecycle -------------------------------------------------

    def start_session(self) -> str:
        self.is_active = True
        self.last_error = None
        logger.info("Workout session initiated")
        return "Workout session initiated. Select an exercise to begin."

    def start_counting(self) -> str:
        if not self.is_active:
            raise SessionActionError("Start a workout session first.")
        self.is_counting = True
        logger.info(f"Counting started for {self.exercise.value}")
        return get_start_text(config.exercise_name(self.exercise.value))

    def stop_counting(self) -> str:
        self.flush()
        self.is_counting = False
        logger.info(f"Counting paused for {self.exercise.value}")
        return "Counting paused."

    def switch_exercise(self, exercise) -> str:
        exercise = ExerciseKind(exercise)
        if self.is_counting:
            raise SessionActionError("Please stop counting before changing exercise.")
        if exercise == self.exercise:
            return f"{config.exercise_name(exercise.value)} selected."

        self.flush()
        logger.info(f"Switched exercise {self.exercise.value} → {exercise.value}")
        self.exercise = exercise
        return f"{config.exercise_name(exercise.value)} selected."

    def flush(self, exercise: Optional[ExerciseKind] = None) -> int:
        """
        Move reps counted since the last flush into the session log.
        Returns the number of reps added.
        """
        exercise = exercise or self.exercise
        count = self.machines[exercise].rep_count
        new_reps = count - self._logged_reps.get(exercise, 0)
        if new_reps > 0:
            self.session_log[exercise] = self.session_log.get(exercise, 0) + new_reps
            self._logged_reps[exercise] = count
            logger.info(f"Logged {new_reps} {exercise.value} rep(s), total {self.session_log[exercise]}")
        return max(new_reps, 0)

    def current_log(self) -> Dict[ExerciseKind, int]:
        """Session log including reps of the active exercise not yet flushed"""
        log = dict(self.session_log)
        pending = self.machine.rep_count - self._logged_reps.get(self.exercise, 0)
        if pending > 0:
            log[self.exercise] = log.get(self.exercise, 0) + pending
        return log

    def workouts(self) -> List[WorkoutEntry]:
        return [
            WorkoutEntry(exercise=kind.value, reps=reps, name=config.exercise_name(kind.value))
            for kind, reps in self.session_log.items()
        ]

    # ---- frames -------------------------------------------------------------

    def process_frame(self, pose: Optional[Pose]) -> FrameResult:
        result = self.frame_processor.tick(pose, self.context())
        self.last_result = result
        if result.rep_event is not None:
            self.last_rep_at = int(result.timestamp * 1000)
            logger.info(f"{result.rep_event.announcement} ({self.exercise.value})")
        return result

    def attach_loop(self, frame_loop):
        self.frame_loop = frame_loop

    async def stop_loop(self):
        if self.frame_loop is not None:
            await self.frame_loop.stop()
            self.frame_loop = None

    # ---- end / reset --------------------------------------------------------

    async def end_session(self, user_profile: Optional[Dict[str, Any]] = None) -> SessionSummary:
        """
        Stop counting and the frame loop, flush the active exercise and send
        the log for calorie estimation. On failure the log is kept so the
        call can be retried.
        """
        self.is_counting = False
        await self.stop_loop()
        self.is_active = False

        if user_profile is not None:
            self.user_profile = user_profile

        self.flush()
        workouts = self.workouts()

        try:
            total = await self.calorie_client.calculate(
                self.user_id,
                [w.model_dump() for w in workouts],
                self.user_profile,
            )
        except CalorieServiceError as e:
            logger.error(f"Error calculating calories: {e}")
            self.last_error = "Failed to calculate calories. Please try again."
            return SessionSummary(workouts=workouts, errorMessage=self.last_error)

        message = get_calories_text(total)
        logger.info(message)
        self.last_error = None
        self.reset_workout()
        return SessionSummary(totalCalories=total, workouts=workouts, message=message)

    def reset_workout(self):
        """Clear the session log and reset every state machine"""
        self.session_log = {}
        self._logged_reps = {}
        self.last_result = None
        self.last_rep_at = 0
        for machine in self.machines.values():
            machine.reset()
        logger.info("Workout reset")

    # ---- voice --------------------------------------------------------------

    def handle_voice_command(self, command: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Route a final voice transcript by keyword.
        Returns (spoken reply, action). The "end" action is left to the caller
        because ending a session talks to the calorie service.
        """
        text = command.lower()

        try:
            if "initiate workout" in text or "start workout session" in text:
                if not self.is_active:
                    return self.start_session(), "start_session"
            elif "start workout" in text or "begin counting" in text:
                if self.is_active and not self.is_counting:
                    return self.start_counting(), "start_counting"
            elif "stop counting" in text or "pause counting" in text:
                if self.is_counting:
                    return self.stop_counting(), "stop_counting"
            elif "end workout" in text or "finish workout" in text:
                if self.is_active:
                    return None, "end_session"
        except SessionActionError as e:
            return str(e), None

        return None, None

    def get_status(self) -> Dict[str, Any]:
        status = self.machine.get_status()
        status.update({
            "is_active": self.is_active,
            "is_counting": self.is_counting,
            "session_log": {kind.value: reps for kind, reps in self.current_log().items()},
            "last_error": self.last_error,
            "frames": self.frame_processor.frames_processed,
        })
        return status
