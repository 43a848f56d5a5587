# test_squat_counter.py
import pytest

from models.squat_counter import SquatPhase, SquatStateMachine
from models.workout_counter import FeedbackType
from pose_helpers import bent_joint, make_pose, squat_pose


def feed(machine, *knees, distances=None, **extra):
    for knee in knees:
        machine.update(dict(knee=knee, **extra), distances or {})


def texts(machine):
    return [f.text for f in machine.feedback_messages]


def test_phase_sequence():
    sm = SquatStateMachine()
    feed(sm, 170)
    assert sm.phase == SquatPhase.STANDING
    feed(sm, 140)
    assert sm.phase == SquatPhase.DESCENDING
    feed(sm, 100)
    assert sm.phase == SquatPhase.BOTTOM
    assert sm.depth_satisfied
    feed(sm, 130)
    assert sm.phase == SquatPhase.ASCENDING
    feed(sm, 170)
    assert sm.phase == SquatPhase.STANDING
    assert sm.rep_count == 1
    assert "Good rep!" in texts(sm)
    assert not sm.depth_satisfied


def test_bottom_exit_needs_fifteen_degree_margin():
    sm = SquatStateMachine()
    feed(sm, 170, 140, 100)
    feed(sm, 115, 120, 125)
    assert sm.phase == SquatPhase.BOTTOM
    feed(sm, 126)
    assert sm.phase == SquatPhase.ASCENDING


def test_depth_flag_set_while_descending():
    sm = SquatStateMachine()
    feed(sm, 170, 140)
    assert not sm.depth_satisfied
    feed(sm, 128)
    assert sm.phase == SquatPhase.DESCENDING
    assert sm.depth_satisfied


@pytest.mark.parametrize("lowest", [135, 125])
def test_shallow_attempt_is_rejected(lowest):
    sm = SquatStateMachine()
    feed(sm, 170, 140, lowest, 170)

    assert sm.rep_count == 0
    assert sm.phase == SquatPhase.STANDING
    assert any(f.type == FeedbackType.ERROR and f.text == "Too shallow" for f in sm.feedback_messages)
    assert not sm.depth_satisfied


def test_knee_jitter_near_standing_does_not_abort():
    sm = SquatStateMachine()
    errors = 0
    for knee in (151, 149, 151, 149, 151, 149, 151):
        sm.update({"knee": knee}, {})
        errors += sum(f.type == FeedbackType.ERROR for f in sm.feedback_messages)

    assert errors == 0
    assert sm.phase == SquatPhase.DESCENDING
    assert sm.rep_count == 0


def test_abandoned_descent_needs_abort_margin():
    sm = SquatStateMachine()
    feed(sm, 170, 140, 164)
    assert sm.phase == SquatPhase.DESCENDING
    feed(sm, 166)
    assert sm.phase == SquatPhase.STANDING
    assert "Too shallow" in texts(sm)


def test_depth_gate_with_bottom_above_depth_threshold():
    # Bottom reachable without passing the depth threshold
    sm = SquatStateMachine({"bottom_knee": 140, "depth_knee": 120})
    feed(sm, 170, 145, 135)
    assert sm.phase == SquatPhase.BOTTOM
    assert not sm.depth_satisfied
    feed(sm, 160, 170)

    assert sm.phase == SquatPhase.STANDING
    assert sm.rep_count == 0
    assert "Too shallow" in texts(sm)

    feed(sm, 145, 115, 160, 170)
    assert sm.rep_count == 1
    assert "Good rep!" in texts(sm)


def test_rep_without_depth_flag_is_rejected_on_completion():
    sm = SquatStateMachine()
    feed(sm, 170, 140, 100, 130)
    assert sm.phase == SquatPhase.ASCENDING
    # Depth flag lost (e.g. thresholds retuned mid-rep): completion must not count
    sm.depth_satisfied = False
    feed(sm, 170)

    assert sm.rep_count == 0
    assert sm.phase == SquatPhase.STANDING
    assert "Too shallow" in texts(sm)


def test_new_descent_clears_depth_flag():
    sm = SquatStateMachine()
    feed(sm, 170, 140, 125, 170)  # abandoned attempt
    feed(sm, 140)
    assert sm.phase == SquatPhase.DESCENDING
    assert not sm.depth_satisfied


def test_missing_knee_freezes_and_warns():
    sm = SquatStateMachine()
    feed(sm, 170, 140, 100)
    sm.update({"knee": None, "hip": 90.0}, {})
    assert sm.phase == SquatPhase.BOTTOM
    assert texts(sm) == ["Cannot detect legs"]


def test_knees_over_toes_warning_is_advisory():
    sm = SquatStateMachine()
    feed(sm, 140, distances={"kneeToe": 30.0, "legLength": 100.0})
    assert sm.phase == SquatPhase.DESCENDING
    assert "Keep knees behind toes" in texts(sm)

    feed(sm, 140, distances={"kneeToe": 10.0, "legLength": 100.0})
    assert "Keep knees behind toes" not in texts(sm)


def test_torso_lean_warning():
    sm = SquatStateMachine()
    feed(sm, 170, torsoLean=60.0)
    assert "Keep torso more upright" in texts(sm)
    assert sm.phase == SquatPhase.STANDING
    feed(sm, 170, torsoLean=20.0)
    assert texts(sm) == []


def test_zero_leg_length_skips_knee_check():
    sm = SquatStateMachine()
    feed(sm, 170, distances={"kneeToe": 30.0, "legLength": 0.0})
    assert texts(sm) == []


def test_reset_clears_depth_flag():
    sm = SquatStateMachine()
    feed(sm, 170, 140, 100)
    sm.reset()
    assert sm.phase == SquatPhase.STANDING
    assert sm.rep_count == 0
    assert not sm.depth_satisfied


def test_extract_signals_from_pose():
    sm = SquatStateMachine()
    angles, distances = sm.extract_signals(squat_pose(90))

    assert angles["knee"] == pytest.approx(90.0)
    assert angles["hip"] == pytest.approx(180.0)
    assert angles["torsoLean"] == pytest.approx(0.0)
    assert distances["kneeToe"] == pytest.approx(100.0)
    assert distances["legLength"] == pytest.approx(100.0)


def test_extract_signals_falls_back_to_right_side():
    sm = SquatStateMachine()
    angles, _ = sm.extract_signals(squat_pose(120, side="right"))
    assert angles["knee"] == pytest.approx(120.0)


def test_extract_signals_prefers_left_side():
    l_hip, l_knee, l_ankle = bent_joint(100, origin=(300.0, 300.0))
    r_hip, r_knee, r_ankle = bent_joint(160, origin=(500.0, 300.0))
    pose = make_pose({
        "left_shoulder": (300.0, 50.0), "left_hip": l_hip, "left_knee": l_knee, "left_ankle": l_ankle,
        "right_shoulder": (500.0, 50.0), "right_hip": r_hip, "right_knee": r_knee, "right_ankle": r_ankle,
    })

    angles, _ = SquatStateMachine().extract_signals(pose)
    assert angles["knee"] == pytest.approx(100.0)


def test_extract_signals_missing_joint_gives_no_angles():
    pose = make_pose({"left_hip": (0, 0), "left_knee": (0, 100), "left_ankle": (0, 200)})
    angles, distances = SquatStateMachine().extract_signals(pose)
    assert angles.get("knee") is None
    assert distances == {}
