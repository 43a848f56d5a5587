import logging

import pytest

from models.push_up_counter import PushUpStateMachine
from models.workout_counter import ExerciseKind, create_state_machine
from services.frame_processor import FrameProcessor, SessionContext
from pose_helpers import FULL_CYCLES, arm_pose, make_pose, squat_pose


def squat_context(is_counting=True):
    machine = create_state_machine(ExerciseKind.SQUAT)
    return SessionContext(exercise=ExerciseKind.SQUAT, machine=machine, is_counting=is_counting)


def test_no_pose_skips_update():
    processor = FrameProcessor()
    context = squat_context()
    result = processor.tick(None, context)

    assert not result.pose_detected
    assert not result.counted
    assert context.machine.frame_count == 0
    assert result.feedback == []


def test_paused_skips_update():
    processor = FrameProcessor()
    context = squat_context(is_counting=False)
    result = processor.tick(squat_pose(140), context)

    assert result.pose_detected
    assert not result.counted
    assert context.machine.phase.value == "standing"
    assert context.machine.frame_count == 0


def test_rep_event_on_completed_cycle():
    processor = FrameProcessor()
    context = squat_context()
    results = [processor.tick(squat_pose(knee), context) for knee in FULL_CYCLES[ExerciseKind.SQUAT]]

    assert [r.rep_event is not None for r in results] == [False, False, False, False, True]
    event = results[-1].rep_event
    assert event.exercise == ExerciseKind.SQUAT
    assert event.rep_count == 1
    assert event.announcement == "Rep 1"
    assert results[-1].phase == "standing"
    assert results[2].phase == "bottom"
    assert results[2].angle == pytest.approx(100.0)


def test_missing_joints_reported_not_counted():
    processor = FrameProcessor()
    context = squat_context()
    pose = make_pose({"nose": (10, 10)})
    result = processor.tick(pose, context)

    assert result.counted
    assert result.angle is None
    assert result.form_quality == "Good"
    assert result.feedback[0].text == "Cannot detect legs"
    assert context.machine.phase.value == "standing"


def test_form_quality_from_feedback():
    processor = FrameProcessor()
    context = squat_context()
    for knee in (170, 140, 135):
        processor.tick(squat_pose(knee), context)
    result = processor.tick(squat_pose(170), context)

    assert result.form_quality == "Poor"
    assert result.rep_event is None


def test_shoulder_press_reports_average_angle():
    processor = FrameProcessor()
    machine = create_state_machine(ExerciseKind.SHOULDER_PRESS)
    context = SessionContext(ExerciseKind.SHOULDER_PRESS, machine, True)
    result = processor.tick(arm_pose(170, side="right"), context)

    assert result.angle == pytest.approx(170.0)
    assert result.phase == "up"


class DoubleCountingPushUp(PushUpStateMachine):
    def update(self, angles, distances=None):
        super().update(angles, distances)
        self.rep_count += 2


def test_rep_jump_is_logged_not_corrected(caplog):
    processor = FrameProcessor()
    machine = DoubleCountingPushUp()
    context = SessionContext(ExerciseKind.PUSHUP, machine, True)

    with caplog.at_level(logging.ERROR, logger="fitness_coach"):
        result = processor.tick(arm_pose(170), context)

    assert result.rep_count == 2
    assert result.rep_event is None
    assert processor.invariant_violations == 1
    assert "Invariant violation" in caplog.text
