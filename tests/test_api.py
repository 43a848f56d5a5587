import pytest
from fastapi.testclient import TestClient

import main
from services.calorie_service import CalorieServiceError
from pose_helpers import FULL_CYCLES, pose_keypoints, squat_pose
from models.workout_counter import ExerciseKind


class FakeCalorieClient:
    def __init__(self, total=150.0, error=None):
        self.total = total
        self.error = error

    async def calculate(self, user_id, workouts, user_profile=None):
        if self.error:
            raise CalorieServiceError(self.error)
        return self.total


@pytest.fixture
def client():
    main.workout_sessions.clear()
    # No context manager: the pose model is not loaded for keypoint-only tests
    yield TestClient(main.app)
    main.workout_sessions.clear()


def post_squat(client, knee):
    body = {"keypoints": pose_keypoints(squat_pose(knee))}
    return client.post("/analyze_keypoints", json=body)


def start_counting(client):
    assert client.post("/session/start").status_code == 200
    assert client.post("/session/counting/start").status_code == 200


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_exercises(client):
    data = client.get("/exercises").json()
    assert [e["exercise"] for e in data] == [k.value for k in ExerciseKind]
    assert data[0]["name"] == "Squats"
    assert data[0]["instructions"]


def test_initial_session_state(client):
    state = client.get("/session").json()
    assert state["exercise"] == "squat"
    assert state["phase"] == "standing"
    assert state["repCount"] == 0
    assert not state["isWorkoutActive"]
    assert not state["isCounting"]


def test_counting_requires_session(client):
    response = client.post("/session/counting/start")
    assert response.status_code == 409


def test_keypoints_drive_squat_rep(client):
    start_counting(client)
    states = [post_squat(client, k).json() for k in FULL_CYCLES[ExerciseKind.SQUAT]]

    final = states[-1]
    assert final["repCount"] == 1
    assert final["phase"] == "standing"
    assert final["repEvent"] == {"exercise": "squat", "repCount": 1, "announcement": "Rep 1"}
    assert final["motivation"].startswith("Rep 1")
    assert final["sessionLog"] == {"squat": 1}
    assert final["poseDetected"]
    assert states[1]["repEvent"] is None


@pytest.mark.parametrize("confidence_key", ["confidence", "score"])
def test_keypoint_confidence_key_names(client, confidence_key):
    start_counting(client)
    keypoints = [
        {"name": kp["name"], "x": kp["x"], "y": kp["y"], confidence_key: kp["score"]}
        for kp in pose_keypoints(squat_pose(140))
    ]

    state = client.post("/analyze_keypoints", json={"keypoints": keypoints}).json()

    assert state["phase"] == "descending"
    assert all(f["text"] != "Cannot detect legs" for f in state["feedback"])


def test_keypoints_ignored_while_paused(client):
    client.post("/session/start")
    state = post_squat(client, 100).json()
    assert state["phase"] == "standing"
    assert state["poseDetected"]


def test_empty_keypoints_is_no_pose(client):
    start_counting(client)
    state = client.post("/analyze_keypoints", json={"keypoints": []}).json()
    assert not state["poseDetected"]
    assert state["feedback"] == []


def test_switch_exercise(client):
    client.post("/session/start")
    response = client.post("/session/exercise", data={"exercise": "pushup"})
    assert response.status_code == 200
    assert response.json()["exercise"] == "pushup"
    assert response.json()["phase"] == "up"


def test_switch_while_counting_rejected(client):
    start_counting(client)
    response = client.post("/session/exercise", data={"exercise": "pushup"})
    assert response.status_code == 409
    assert "stop counting" in response.json()["detail"]


def test_switch_unknown_exercise(client):
    response = client.post("/session/exercise", data={"exercise": "burpee"})
    assert response.status_code == 400


def test_end_session_success(client):
    start_counting(client)
    for k in FULL_CYCLES[ExerciseKind.SQUAT]:
        post_squat(client, k)
    main.get_session().calorie_client = FakeCalorieClient(total=42.4)

    response = client.post("/session/end", json={"userId": "u1", "userProfile": {"weight": 70, "goal": "cut"}})

    assert response.status_code == 200
    summary = response.json()
    assert summary["totalCalories"] == 42.4
    assert summary["workouts"] == [{"exercise": "squat", "reps": 1, "name": "Squats"}]
    assert client.get("/session").json()["sessionLog"] == {}


def test_end_session_failure_keeps_log(client):
    start_counting(client)
    for k in FULL_CYCLES[ExerciseKind.SQUAT]:
        post_squat(client, k)
    main.get_session().calorie_client = FakeCalorieClient(error="API error: 503")

    response = client.post("/session/end", json={"userProfile": {"weight": 70}})

    assert response.status_code == 502
    state = client.get("/session").json()
    assert state["sessionLog"] == {"squat": 1}
    assert state["errorMessage"] == "Failed to calculate calories. Please try again."


def test_reset(client):
    start_counting(client)
    for k in FULL_CYCLES[ExerciseKind.SQUAT]:
        post_squat(client, k)
    client.post("/session/counting/stop")

    state = client.post("/session/reset").json()
    assert state["repCount"] == 0
    assert state["sessionLog"] == {}


def test_voice_command(client):
    data = client.post("/voice_command", json={"text": "initiate workout"}).json()
    assert data["action"] == "start_session"
    assert data["state"]["isWorkoutActive"]

    data = client.post("/voice_command", json={"text": "begin counting"}).json()
    assert data["reply"] == "Starting Squats. Let's go!"
    assert data["state"]["isCounting"]


def test_analyze_frame_without_model(client):
    response = client.post("/analyze_frame", files={"file": ("frame.jpg", b"123", "image/jpeg")})
    assert response.status_code == 500
