from typing import Optional

import cv2
import numpy as np
import tkinter as tk

from ..assets import AssetLoader
from ..camera import CameraCapture
from ..config import (
    BORDER_COLOR_BGR,
    BORDER_THICKNESS,
    CROWN_ASSET_PATH,
    PREVIEW_WINDOW,
    STATUS_CAMERA_UNAVAILABLE,
    STATUS_DETECTOR_UNAVAILABLE,
    STATUS_MEDIAPIPE_MISSING,
    STATUS_MODEL_UNAVAILABLE,
    STATUS_STARTING,
    STATUS_STOPPED,
    WINDOW_TITLE,
)
from ..detector import MEDIAPIPE_AVAILABLE, FaceLandmarkSource, ensure_model
from ..errors import CameraError
from ..logging_utils import log
from ..renderer import composite
from ..session import FaceARSession


class CrownARApp:
    def __init__(self, asset_path: str = CROWN_ASSET_PATH) -> None:
        self.asset_path = asset_path
        self.session: Optional[FaceARSession] = None
        self.detector: Optional[FaceLandmarkSource] = None
        self.camera: Optional[CameraCapture] = None
        self.running = False
        self._closing = False

        self.root = tk.Tk()
        self.root.title(WINDOW_TITLE)
        self.root.configure(bg="#000")
        self.status_var = tk.StringVar(value=self._format_status(STATUS_STARTING))
        self._build_ui()
        self.root.protocol("WM_DELETE_WINDOW", self._quit)

        log("=== Crown AR started ===")

    @staticmethod
    def _format_status(status: str) -> str:
        return f"\U0001F451 {status}"

    def _build_ui(self) -> None:
        frame = tk.Frame(self.root, padx=20, pady=20, bg="#000")
        frame.pack(fill="both", expand=True)

        tk.Label(
            frame,
            textvariable=self.status_var,
            font=("Segoe UI", 18, "bold"),
            fg="#ffd700",
            bg="#000",
        ).pack(pady=(0, 12))

        info = tk.Frame(frame, padx=15, pady=15, bg="#222")
        info.pack(fill="x")
        tk.Label(info, text="Sparkles & Tilak Added", fg="gold", bg="#222", font=("Consolas", 11)).pack()
        tk.Label(
            info,
            text="Crown follows your forehead; press Q in the preview to exit",
            fg="#fff",
            bg="#222",
            font=("Consolas", 10),
        ).pack()

        tk.Button(frame, text="Exit", command=self._quit).pack(fill="x", pady=(12, 0))

    def _set_status(self, status: str) -> None:
        self.status_var.set(self._format_status(status))

    def _start(self) -> None:
        if not MEDIAPIPE_AVAILABLE:
            log("MediaPipe not installed, nothing to start")
            self._set_status(STATUS_MEDIAPIPE_MISSING)
            return

        try:
            model_path = ensure_model()
        except OSError as exc:
            log(f"Face landmarker model unavailable: {exc}")
            self._set_status(STATUS_MODEL_UNAVAILABLE)
            return

        try:
            detector = FaceLandmarkSource(model_path)
        except (RuntimeError, ValueError) as exc:
            log(f"Face landmarker could not be created: {exc}")
            self._set_status(STATUS_DETECTOR_UNAVAILABLE)
            return

        session = FaceARSession(loader=AssetLoader(self.asset_path))
        session.add_status_listener(self._set_status)
        detector.on_results(session.on_results)

        camera = CameraCapture(on_frame=self._on_frame)
        try:
            camera.start()
        except CameraError as exc:
            log(f"Camera error: {exc}")
            detector.close()
            session.close()
            self._set_status(STATUS_CAMERA_UNAVAILABLE)
            return

        session.attach_camera(camera)
        self.session = session
        self.detector = detector
        self.camera = camera
        session.start_assets()

        cv2.namedWindow(PREVIEW_WINDOW, cv2.WINDOW_AUTOSIZE)
        self.running = True
        log("=== TRACKING STARTED ===")

        while self.running:
            session.poll_assets()

            if not camera.step():
                log("Camera read failed, stopping")
                break

            try:
                self.root.update_idletasks()
                self.root.update()
            except tk.TclError:
                break

            key = cv2.waitKey(1) & 0xFF
            if key == 27 or key == ord("q"):
                break

        self._teardown()

    def _on_frame(self, frame: np.ndarray) -> None:
        # Landmarks come from the raw frame; only the displayed image is mirrored.
        self.detector.send(frame)

        display = cv2.flip(frame, 1)
        if self.session.overlay is not None:
            display = composite(display, self.session.overlay)
        h, w = display.shape[:2]
        cv2.rectangle(display, (0, 0), (w - 1, h - 1), BORDER_COLOR_BGR, BORDER_THICKNESS)
        cv2.imshow(PREVIEW_WINDOW, display)

    def _teardown(self) -> None:
        self.running = False
        log("=== TRACKING STOPPED ===")

        if self.detector is not None:
            try:
                self.detector.close()
            except RuntimeError as exc:
                log(f"Warning: detector.close failed: {exc}")
            finally:
                self.detector = None
        if self.session is not None:
            self.session.close()
        self.camera = None
        cv2.destroyAllWindows()

        if self._closing:
            self.root.destroy()
        else:
            self._set_status(STATUS_STOPPED)

    def _quit(self) -> None:
        self._closing = True
        if self.running:
            # the tracking loop tears down and destroys the window on exit
            self.running = False
            return
        if self.session is not None:
            self.session.close()
        self.root.destroy()

    def run(self) -> None:
        self.root.after(0, self._start)
        self.root.mainloop()


def main() -> None:
    app = CrownARApp()
    app.run()
