import argparse
import os
from pathlib import Path
from typing import Dict, List, Optional

class Config:
    """
    Central configuration manager for the rep counter backend.
    Handles command-line argument parsing, debug modes, and exercise parameters.
    """

    def __init__(self):
        # Application mode settings
        self.debug_mode: str = "debug_no_save"
        self.save_frames: bool = False
        self.debug_dir: Optional[Path] = None

        # Pose detection thresholds
        self.min_confidence: float = 0.3  # Minimum keypoint confidence required
        self.model_conf_threshold: float = 0.4  # YOLO model confidence threshold
        self.pose_model_path: str = os.environ.get("POSE_MODEL_PATH", "yolov8n-pose.pt")

        # Image processing settings
        self.image_width_limit: int = 640  # Resize images larger than this for performance
        self.camera_index: int = 0

        # Server
        self.host: str = os.environ.get("HOST", "0.0.0.0")
        self.port: int = int(os.environ.get("PORT", "8000"))

        # Calorie estimation collaborator
        self.calorie_api_url: str = os.environ.get(
            "CALORIE_API_URL", "http://localhost:5000/api/workout/calculate-calories"
        )
        self.calorie_timeout: float = 15.0

        # Exercise mode configuration
        self.supported_modes: List[str] = [
            "squat", "bench_press", "deadlift", "pushup",
            "pullup", "shoulder_press", "lateral_raise", "lunge",
        ]
        self.default_mode: str = "squat"

        self.exercise_names: Dict[str, str] = {
            "squat": "Squats",
            "bench_press": "Bench Press",
            "deadlift": "Deadlift",
            "pushup": "Push-ups",
            "pullup": "Pull-ups",
            "shoulder_press": "Shoulder Press",
            "lateral_raise": "Lateral Raises",
            "lunge": "Lunges",
        }

        # Camera setup hints shown before counting starts
        self.exercise_instructions: Dict[str, List[str]] = {
            "squat": [
                "Stand sideways to camera",
                "Keep entire body visible",
                "Squat down until thighs parallel to ground",
                "Keep knees behind toes",
            ],
            "bench_press": [
                "Face camera or use side view",
                "Keep arms visible",
                "Lower arms to 90° elbow angle",
                "Press back up to full extension",
            ],
            "deadlift": [
                "Stand sideways to camera",
                "Keep back straight",
                "Lift from bent position to standing",
                "Fully extend hips at top",
            ],
            "pushup": [
                "Position sideways to camera",
                "Maintain plank position",
                "Lower chest until elbows at 90°",
                "Keep body straight - engage core",
            ],
            "pullup": [
                "Face camera directly",
                "Hang with arms extended",
                "Pull until chin above bar level",
                "Control the descent",
            ],
            "shoulder_press": [
                "Face camera or use side view",
                "Start with arms at 90° (shoulder level)",
                "Press weights overhead until arms straight",
                "Control the descent back to start",
            ],
            "lateral_raise": [
                "Face camera directly",
                "Arms start at sides",
                "Raise arms to shoulder height",
                "Control the descent",
            ],
            "lunge": [
                "Stand sideways to camera",
                "Step forward into lunge",
                "Both knees should reach 90°",
                "Push back to standing",
            ],
        }

        # Per-exercise threshold overrides, merged over each machine's defaults
        self.thresholds: Dict[str, Dict[str, float]] = {}

        # Human-readable descriptions for each debug mode
        self.mode_descriptions = {
            "debug": "Debug Mode (with frame saving)",
            "debug_no_save": "Debug Mode (without frame saving)",
            "non_debug": "Non-Debug Mode (minimal logging)"
        }

    def setup_from_args(self, argv: Optional[List[str]] = None):
        """
        Parse command line arguments and configure application settings.
        Creates debug directory if frame saving is enabled.
        """
        parser = argparse.ArgumentParser(description="Rep Counter Backend")
        parser.add_argument(
            "--mode",
            choices=["debug", "debug_no_save", "non_debug"],
            default="debug_no_save",
            help="Debug mode setting"
        )
        parser.add_argument(
            "--calorie-url",
            default=self.calorie_api_url,
            help="Calorie estimation endpoint"
        )
        parser.add_argument(
            "--camera",
            type=int,
            default=self.camera_index,
            help="Camera index for the local frame loop"
        )
        parser.add_argument("--host", default=self.host, help="Bind address")
        parser.add_argument("--port", type=int, default=self.port, help="HTTP port")
        args = parser.parse_args(argv)

        self.debug_mode = args.mode
        self.save_frames = (self.debug_mode == "debug")
        self.calorie_api_url = args.calorie_url
        self.camera_index = args.camera
        self.host = args.host
        self.port = args.port

        # Create debug frame directory if needed
        if self.save_frames:
            self.debug_dir = Path("debug_frames")
            self.debug_dir.mkdir(exist_ok=True)

    @property
    def mode_description(self) -> str:
        """Get human-readable description of current mode"""
        return self.mode_descriptions[self.debug_mode]

    def exercise_name(self, mode: str) -> str:
        return self.exercise_names.get(mode, mode)

# Global configuration instance - import this in other modules
config = Config()
