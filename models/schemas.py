# schemas.py
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Dict, List, Optional

class FeedbackMessage(BaseModel):
    """Form-feedback entry shown to the user for one frame"""
    type: str                                   # warning | error | success
    text: str

class RepEvent(BaseModel):
    """Emitted once per counted repetition"""
    exercise: str
    repCount: int
    announcement: str                           # Spoken/visual text, e.g. "Rep 3"

class WorkoutState(BaseModel):
    """
    Pydantic model representing the complete workout state returned to clients.
    Contains rep count, phase, form feedback, session flags and the session log.
    """
    exercise: str = "squat"                     # Active exercise kind
    phase: Optional[str] = None                 # Current state machine phase
    repCount: int = 0                           # Reps counted by the active machine
    angle: Optional[float] = None               # Driving joint angle for this frame (degrees)
    feedback: List[FeedbackMessage] = Field(default_factory=list)
    formQuality: str = "Perfect"                # Perfect | Good | Poor
    motivation: str = "Ready to start!"         # Motivational message for user engagement
    repEvent: Optional[RepEvent] = None         # Set only on the frame that counted a rep
    poseDetected: bool = False                  # Whether a person was found in the frame
    isWorkoutActive: bool = False               # Whether the workout session (camera) is active
    isCounting: bool = False                    # Whether reps are being counted
    isConnected: bool = True                    # Connection status to backend
    errorMessage: Optional[str] = None          # User-facing error, if any
    framesSent: int = 0                         # Total frames processed in session
    lastRepAt: int = 0                          # Timestamp of last completed repetition (milliseconds)
    sessionLog: Dict[str, int] = Field(default_factory=dict)

class KeypointIn(BaseModel):
    """Keypoint posted by a client-side pose model; MoveNet clients send "score"."""
    name: str
    x: float
    y: float
    confidence: float = Field(0.0, validation_alias=AliasChoices("confidence", "score"))

class PoseIn(BaseModel):
    keypoints: List[KeypointIn] = Field(default_factory=list)

class HealthProfile(BaseModel):
    """User health attributes forwarded unmodified to the calorie estimator"""
    model_config = ConfigDict(extra="allow")

    weight: Optional[float] = None
    height: Optional[float] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    activityLevel: Optional[str] = None

class EndSessionRequest(BaseModel):
    userId: Optional[str] = None
    userProfile: Optional[HealthProfile] = None

class WorkoutEntry(BaseModel):
    exercise: str
    reps: int
    name: str

class SessionSummary(BaseModel):
    totalCalories: Optional[float] = None
    workouts: List[WorkoutEntry] = Field(default_factory=list)
    message: str = ""
    errorMessage: Optional[str] = None

class VoiceCommandRequest(BaseModel):
    text: str

class VoiceCommandResponse(BaseModel):
    reply: Optional[str] = None
    action: Optional[str] = None
    state: WorkoutState
