# main.py
import cv2
import numpy as np
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, File, UploadFile, HTTPException, Form
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional

from config import config
from utils.logging_utils import logger
from utils.motivation import get_motivation_text
from models.pose import Pose
from models.schemas import (
    EndSessionRequest, FeedbackMessage, PoseIn, RepEvent, SessionSummary,
    VoiceCommandRequest, VoiceCommandResponse, WorkoutState,
)
from models.workout_counter import ExerciseKind
from services.camera_loop import CameraLoop
from services.debug_service import debug_service
from services.frame_processor import FrameResult
from services.pose_service import PoseServiceError, pose_service
from services.session_controller import SessionActionError, WorkoutSession


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the pose model on startup, stop any camera loop on shutdown"""
    logger.info(f"Starting in: {config.mode_description}")
    await pose_service.initialize()
    logger.info(f"Supported exercise modes: {config.supported_modes}")
    yield
    for session in workout_sessions.values():
        await session.stop_loop()


# Initialize FastAPI application with dynamic title based on mode
app = FastAPI(title=f"Rep Counter Backend - {config.mode_description}", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# Session storage for maintaining workout state across requests
workout_sessions = {}


def get_session(session_id: str = "default") -> WorkoutSession:
    if session_id not in workout_sessions:
        workout_sessions[session_id] = WorkoutSession()
    return workout_sessions[session_id]


def build_state(session: WorkoutSession, result: Optional[FrameResult] = None) -> WorkoutState:
    """Convert session + frame result into the client-facing workout state"""
    machine = session.machine
    rep_event = None
    feedback = []
    angle = None
    form_quality = "Perfect"
    pose_detected = False

    if result is not None:
        feedback = [FeedbackMessage(**f.to_dict()) for f in result.feedback]
        angle = round(result.angle, 1) if result.angle is not None else None
        form_quality = result.form_quality
        pose_detected = result.pose_detected
        if result.rep_event is not None:
            rep_event = RepEvent(
                exercise=result.rep_event.exercise.value,
                repCount=result.rep_event.rep_count,
                announcement=result.rep_event.announcement,
            )

    return WorkoutState(
        exercise=session.exercise.value,
        phase=machine.phase.value,
        repCount=machine.rep_count,
        angle=angle,
        feedback=feedback,
        formQuality=form_quality,
        motivation=get_motivation_text(machine.rep_count),
        repEvent=rep_event,
        poseDetected=pose_detected,
        isWorkoutActive=session.is_active,
        isCounting=session.is_counting,
        isConnected=True,
        errorMessage=session.last_error,
        framesSent=session.frame_processor.frames_processed,
        lastRepAt=session.last_rep_at,
        sessionLog={kind.value: reps for kind, reps in session.current_log().items()},
    )


@app.post("/analyze_frame", response_model=WorkoutState)
async def analyze_frame(file: UploadFile = File(...)):
    """
    Core endpoint for exercise analysis from uploaded image frames.
    Detects pose keypoints, advances the active exercise's state machine,
    and returns workout state.
    """
    if not pose_service.model:
        raise HTTPException(status_code=500, detail="Model not loaded")

    contents = await file.read()
    nparr = np.frombuffer(contents, np.uint8)
    img = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

    if img is None:
        raise HTTPException(status_code=400, detail="Invalid image")

    session = get_session()

    try:
        pose = pose_service.detect_pose(img)
    except PoseServiceError as e:
        logger.error(f"Error processing frame: {e}")
        session.last_error = str(e)
        raise HTTPException(status_code=500, detail=str(e))

    result = session.process_frame(pose)

    # Save debug frame if enabled
    if config.save_frames:
        debug_service.save_debug_frame(img, session.frame_processor.frames_processed, pose, result)

    logger.info(f"Mode: {session.exercise.value}, Rep: {result.rep_count}, Phase: {result.phase}, Angle: {result.angle}")
    return build_state(session, result)


@app.post("/analyze_keypoints", response_model=WorkoutState)
async def analyze_keypoints(body: PoseIn):
    """Same as /analyze_frame for clients that run pose estimation themselves"""
    session = get_session()
    pose = Pose.from_keypoints([kp.model_dump() for kp in body.keypoints]) if body.keypoints else None
    result = session.process_frame(pose)
    return build_state(session, result)


@app.get("/health")
async def health_check():
    """Simple health check endpoint for service monitoring"""
    return {"status": "healthy", "timestamp": time.time()}


@app.get("/exercises")
async def list_exercises():
    """Supported exercises with display names and camera setup instructions"""
    return [
        {
            "exercise": mode,
            "name": config.exercise_name(mode),
            "instructions": config.exercise_instructions.get(mode, []),
        }
        for mode in config.supported_modes
    ]


@app.get("/session", response_model=WorkoutState)
async def session_state():
    session = get_session()
    return build_state(session, session.last_result)


@app.post("/session/start", response_model=WorkoutState)
async def start_session(camera: bool = Form(False)):
    """Start the workout session, optionally driving it from the local camera"""
    session = get_session()
    session.start_session()
    if camera:
        if not pose_service.model:
            raise HTTPException(status_code=500, detail="Model not loaded")
        if session.frame_loop is None or not session.frame_loop.running:
            await CameraLoop(session).start()
    return build_state(session)


@app.post("/session/counting/start", response_model=WorkoutState)
async def start_counting():
    session = get_session()
    try:
        session.start_counting()
    except SessionActionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return build_state(session)


@app.post("/session/counting/stop", response_model=WorkoutState)
async def stop_counting():
    session = get_session()
    session.stop_counting()
    return build_state(session)


@app.post("/session/exercise", response_model=WorkoutState)
async def switch_exercise(exercise: str = Form(...)):
    """Activate another exercise; rejected while counting"""
    if exercise not in config.supported_modes:
        raise HTTPException(status_code=400, detail=f"Unsupported exercise '{exercise}'")

    session = get_session()
    try:
        session.switch_exercise(ExerciseKind(exercise))
    except SessionActionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return build_state(session)


@app.post("/session/end", response_model=SessionSummary)
async def end_session(body: Optional[EndSessionRequest] = None):
    """
    Finish the workout and request the calorie estimate.
    The session log is kept when the estimate fails so the call can be retried.
    """
    session = get_session()
    if body is not None:
        session.user_id = body.userId or session.user_id
    profile = body.userProfile.model_dump(exclude_unset=True) if body is not None and body.userProfile else None

    summary = await session.end_session(profile)
    if summary.errorMessage:
        raise HTTPException(status_code=502, detail=summary.errorMessage)
    return summary


@app.post("/session/reset", response_model=WorkoutState)
async def reset_session():
    """Reset every exercise counter and clear the session log"""
    session = get_session()
    session.reset_workout()
    logger.info("Session default reset successfully")
    return build_state(session)


@app.post("/voice_command", response_model=VoiceCommandResponse)
async def voice_command(body: VoiceCommandRequest):
    """Route a final speech transcript to the matching session action"""
    session = get_session()
    reply, action = session.handle_voice_command(body.text)

    if action == "end_session":
        summary = await session.end_session()
        reply = summary.errorMessage or summary.message

    return VoiceCommandResponse(reply=reply, action=action, state=build_state(session))
