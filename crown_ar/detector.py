import os
import time
import urllib.request
from typing import Callable, List, Optional

import cv2
import numpy as np

from .config import (
    FACE_MODEL_PATH,
    FACE_MODEL_URL,
    MAX_NUM_FACES,
    MIN_DETECTION_CONFIDENCE,
    MIN_TRACKING_CONFIDENCE,
)
from .logging_utils import log

try:
    import mediapipe as mp
    from mediapipe.tasks import python as mp_tasks
    from mediapipe.tasks.python import vision
    MEDIAPIPE_AVAILABLE = True
except ImportError:
    mp = None
    mp_tasks = None
    vision = None
    MEDIAPIPE_AVAILABLE = False


ResultCallback = Callable[[Optional[List]], None]


def ensure_model(path: str = FACE_MODEL_PATH, url: str = FACE_MODEL_URL) -> str:
    """Fetch the face landmarker model from the CDN on first use."""
    if os.path.exists(path):
        return path
    os.makedirs(os.path.dirname(path), exist_ok=True)
    log(f"Downloading face landmarker model to {path}")
    tmp_path = path + ".part"
    try:
        urllib.request.urlretrieve(url, tmp_path)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
    log("Model download complete")
    return path


class FaceLandmarkSource:
    """MediaPipe FaceLandmarker driven frame by frame, reporting through a callback.

    Every `send` produces exactly one callback: the first face's landmark
    list, or None when no face was found.
    """

    def __init__(
        self,
        model_path: str = FACE_MODEL_PATH,
        max_faces: int = MAX_NUM_FACES,
        min_detection_confidence: float = MIN_DETECTION_CONFIDENCE,
        min_tracking_confidence: float = MIN_TRACKING_CONFIDENCE,
    ):
        if not MEDIAPIPE_AVAILABLE:
            raise RuntimeError("MediaPipe is not installed")

        options = vision.FaceLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=model_path),
            running_mode=vision.RunningMode.VIDEO,
            num_faces=max_faces,
            min_face_detection_confidence=min_detection_confidence,
            min_face_presence_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
            output_face_blendshapes=False,
            output_facial_transformation_matrixes=False,
        )
        self._landmarker = vision.FaceLandmarker.create_from_options(options)
        self._callback: Optional[ResultCallback] = None
        self._last_timestamp_ms = -1
        log(f"FaceLandmarker initialized (max faces {max_faces}, 478 landmarks)")

    def on_results(self, callback: ResultCallback) -> None:
        self._callback = callback

    def _next_timestamp_ms(self) -> int:
        # VIDEO mode rejects non-increasing timestamps
        ts = int(time.monotonic() * 1000)
        if ts <= self._last_timestamp_ms:
            ts = self._last_timestamp_ms + 1
        self._last_timestamp_ms = ts
        return ts

    def detect(self, frame_bgr: np.ndarray) -> Optional[List]:
        if self._landmarker is None:
            raise RuntimeError("FaceLandmarkSource is closed")
        rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(rgb))
        result = self._landmarker.detect_for_video(image, self._next_timestamp_ms())
        if not result.face_landmarks:
            return None
        return result.face_landmarks[0]

    def send(self, frame_bgr: np.ndarray) -> Optional[List]:
        landmarks = self.detect(frame_bgr)
        if self._callback is not None:
            self._callback(landmarks)
        return landmarks

    def close(self) -> None:
        if self._landmarker is not None:
            try:
                self._landmarker.close()
            finally:
                self._landmarker = None
