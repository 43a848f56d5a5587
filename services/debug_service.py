import cv2
import numpy as np
import time
from typing import Optional
from config import config
from models.pose import SKELETON, Pose
from services.frame_processor import FrameResult
from utils.logging_utils import logger

class DebugService:
    """
    Skeleton overlay and debug frame saving.
    Draws the tracked pose and counter state on frames, and saves them when
    frame saving is enabled.
    """

    LINE_COLOR = (0, 255, 0)
    POINT_BORDER = (255, 255, 255)
    QUALITY_COLORS = {
        "Perfect": (0, 255, 0),
        "Good": (0, 200, 255),
        "Poor": (0, 0, 255),
    }

    @staticmethod
    def draw_pose(img: np.ndarray, pose: Optional[Pose]) -> np.ndarray:
        """Draw visible skeleton connections, then keypoints on top"""
        if pose is None:
            return img

        points = pose.visible_points()
        for start, end in SKELETON:
            if start in points and end in points:
                p1 = tuple(int(v) for v in points[start])
                p2 = tuple(int(v) for v in points[end])
                cv2.line(img, p1, p2, DebugService.LINE_COLOR, 3)

        for x, y in points.values():
            center = (int(x), int(y))
            cv2.circle(img, center, 7, DebugService.POINT_BORDER, -1)
            cv2.circle(img, center, 5, DebugService.LINE_COLOR, -1)
        return img

    @staticmethod
    def render_overlay(img: np.ndarray, pose: Optional[Pose], result: FrameResult) -> np.ndarray:
        """
        Annotated copy of a frame: skeleton, exercise, phase, reps, and the
        frame's feedback messages.
        """
        overlay = DebugService.draw_pose(img.copy(), pose)
        font = cv2.FONT_HERSHEY_SIMPLEX

        angle_text = f"{result.angle:.1f}" if result.angle is not None else "-"
        texts = [
            f"Exercise: {config.exercise_name(result.exercise.value)}",
            f"Phase: {result.phase}",
            f"Reps: {result.rep_count}",
            f"Angle: {angle_text}",
        ]
        texts.extend(f.text for f in result.feedback)

        color = DebugService.QUALITY_COLORS.get(result.form_quality, DebugService.LINE_COLOR)
        for i, text in enumerate(texts):
            y_pos = 40 + (i * 35)
            cv2.putText(overlay, text, (10, y_pos), font, 0.8, color, 2)
        return overlay

    @staticmethod
    def save_debug_frame(img: np.ndarray, frame_count: int, pose: Optional[Pose], result: FrameResult):
        """
        Save annotated debug frame to disk if frame saving is enabled.
        Overlays exercise metrics and saves with descriptive filename.
        """
        if not config.save_frames or not config.debug_dir:
            return

        try:
            debug_img = DebugService.render_overlay(img, pose, result)

            # Generate descriptive filename with timestamp
            timestamp = int(time.time())
            filename = f"frame_{frame_count:04d}_{result.exercise.value}_reps_{result.rep_count}_{timestamp}.jpg"
            filepath = config.debug_dir / filename

            cv2.imwrite(str(filepath), debug_img)
            logger.debug(f"Debug frame saved: {filename}")

        except cv2.error as e:
            logger.error(f"Error saving debug frame: {e}")

# Global service instance
debug_service = DebugService()
