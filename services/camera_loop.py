# camera_loop.py
"""
Local camera frame loop.
Reads a frame, awaits pose inference, feeds the session and renders the
overlay, one frame at a time. Inference and counting are serialized: a slow
inference only delays the next counting decision.
"""

import asyncio
from typing import Callable, Optional

import cv2
import numpy as np

from config import config
from services.debug_service import debug_service
from services.frame_processor import RepEvent
from services.pose_service import pose_service
from utils.logging_utils import get_logger

logger = get_logger("camera")


class CameraLoop:
    """
    Drives a WorkoutSession from a frame source with a VideoCapture-like
    interface (read() -> (ok, frame), release()).
    stop() cancels scheduling and releases the source; it never resets any
    state machine.
    """

    def __init__(self, session, frame_source=None, pose_source=None,
                 on_rep: Optional[Callable[[RepEvent], None]] = None):
        self.session = session
        self.frame_source = frame_source
        self.pose_source = pose_source or pose_service
        self.on_rep = on_rep

        self.latest_frame: Optional[np.ndarray] = None
        self.last_error: Optional[str] = None
        self.frame_count = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self):
        if self.running:
            return
        previous = self.session.frame_loop
        if previous is not None and previous is not self:
            # One loop per session: the old capture would keep feeding the same machine
            logger.info("Replacing the session's existing camera loop")
            await self.session.stop_loop()
        if self.frame_source is None:
            self.frame_source = cv2.VideoCapture(config.camera_index)
        self.session.attach_loop(self)
        self._task = asyncio.create_task(self._run())
        logger.info("Camera loop started")

    async def stop(self):
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self._release()
        logger.info(f"Camera loop stopped after {self.frame_count} frames")

    def _release(self):
        """Release the frame source and detach from the session"""
        if self.frame_source is not None:
            self.frame_source.release()
            self.frame_source = None
        if self.session.frame_loop is self:
            self.session.frame_loop = None

    async def _run(self):
        try:
            while True:
                ok, frame = await asyncio.to_thread(self.frame_source.read)
                if not ok or frame is None:
                    logger.warning("Frame source exhausted, stopping loop")
                    break

                await self.process(frame)
                await asyncio.sleep(0)
        finally:
            self._release()

    async def process(self, frame: np.ndarray):
        """Run one frame through pose inference, counting and the overlay"""
        self.frame_count += 1

        try:
            pose = await asyncio.to_thread(self.pose_source.detect_pose, frame)
        except Exception as e:
            # Pose source is external: report, keep the session intact
            self.last_error = f"Pose detection failed: {e}"
            self.session.last_error = self.last_error
            logger.error(self.last_error)
            return None

        result = self.session.process_frame(pose)
        self.latest_frame = debug_service.render_overlay(frame, pose, result)
        debug_service.save_debug_frame(frame, self.frame_count, pose, result)

        if result.rep_event is not None and self.on_rep is not None:
            self.on_rep(result.rep_event)
        return result
