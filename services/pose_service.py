import cv2
import numpy as np
from typing import Optional
from ultralytics import YOLO
from utils.logging_utils import get_logger
from config import config
from models.pose import Pose

logger = get_logger("pose")

class PoseServiceError(RuntimeError):
    """Pose model missing or inference failed"""

class PoseService:
    """
    Single-person pose source backed by a YOLO pose model.
    When several people are in view the one with the most confident
    keypoints is tracked.
    """

    def __init__(self, model_path: Optional[str] = None):
        self.model_path = model_path or config.pose_model_path
        self.model = None
        self.inferences = 0

    async def initialize(self):
        """Load the model and warm it up on a blank frame"""
        logger.info(f"Loading pose model {self.model_path}")
        self.model = YOLO(self.model_path)
        self.model(np.zeros((480, 640, 3), dtype=np.uint8), verbose=False)
        logger.info("Pose model ready")

    @staticmethod
    def _downscale(img: np.ndarray):
        """Shrink wide frames to the configured width; returns (image, scale)"""
        height, width = img.shape[:2]
        if width <= config.image_width_limit:
            return img, 1.0
        scale = config.image_width_limit / width
        return cv2.resize(img, (config.image_width_limit, int(height * scale))), scale

    def detect_pose(self, img: np.ndarray) -> Optional[Pose]:
        """
        Pose of the tracked person in original image coordinates,
        or None when nobody is detected.
        """
        if not self.model:
            raise PoseServiceError("Model not initialized")

        small, scale = self._downscale(img)
        try:
            results = self.model(small, verbose=False, conf=config.model_conf_threshold)
        except Exception as e:
            raise PoseServiceError(f"Pose inference failed: {e}") from e
        self.inferences += 1

        keypoints = results[0].keypoints
        if keypoints is None or len(keypoints.data) == 0:
            return None

        people = keypoints.data.cpu().numpy().astype(float)
        best = int(np.argmax(people[:, :, 2].mean(axis=1)))
        if len(people) > 1:
            logger.debug(f"{len(people)} people in frame, tracking #{best}")

        data = people[best]
        data[:, :2] /= scale
        return Pose.from_array(data)

pose_service = PoseService()
