from typing import Callable, Optional

import cv2
import numpy as np

from .config import CAMERA_BUFFERSIZE, CAMERA_FPS, CAMERA_HEIGHT, CAMERA_INDEX, CAMERA_WIDTH
from .errors import CameraError
from .logging_utils import log

FrameCallback = Callable[[np.ndarray], None]


class CameraCapture:
    """Pulls frames from a webcam and hands each one to `on_frame` before returning."""

    def __init__(
        self,
        on_frame: FrameCallback,
        width: int = CAMERA_WIDTH,
        height: int = CAMERA_HEIGHT,
        index: int = CAMERA_INDEX,
        fps: int = CAMERA_FPS,
    ):
        self.on_frame = on_frame
        self.width = width
        self.height = height
        self.index = index
        self.fps = fps
        self._cap: Optional[cv2.VideoCapture] = None
        self.frame_count = 0

    @property
    def running(self) -> bool:
        return self._cap is not None

    def start(self) -> None:
        if self._cap is not None:
            return
        cap = cv2.VideoCapture(self.index)
        if not cap.isOpened():
            cap.release()
            raise CameraError(f"Camera {self.index} could not be opened")
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        cap.set(cv2.CAP_PROP_FPS, self.fps)
        cap.set(cv2.CAP_PROP_BUFFERSIZE, CAMERA_BUFFERSIZE)
        self._cap = cap
        log(f"Camera opened ({self.width}x{self.height})")

    def step(self) -> bool:
        if self._cap is None:
            return False
        ret, frame = self._cap.read()
        if not ret or frame is None:
            return False
        self.frame_count += 1
        self.on_frame(frame)
        return True

    def stop(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            log("Camera released")
