from typing import Callable, List, Optional

import numpy as np

from .assets import AssetLoader
from .camera import CameraCapture
from .config import STATUS_CROWN_FAILED, STATUS_READY, STATUS_STARTING
from .logging_utils import log, log_every
from .renderer import SoftwareRenderer
from .scene import Scene, SceneObject, build_crown, build_scene
from .tracker import OverlayTracker

StatusListener = Callable[[str], None]


class FaceARSession:
    """Owns the scene, its renderer and the overlay poses for one camera session.

    All mutation happens on the thread that calls `on_results` and
    `poll_assets`; the asset loader only hands its result over through a
    queue. Each detection result triggers exactly one render.
    """

    def __init__(
        self,
        scene: Optional[Scene] = None,
        renderer: Optional[SoftwareRenderer] = None,
        loader: Optional[AssetLoader] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.scene = scene if scene is not None else build_scene(rng)
        self.renderer = renderer if renderer is not None else SoftwareRenderer()
        self.loader = loader
        self.tracker = OverlayTracker(
            sparkles=self.scene.get("sparkles"),
            marker=self.scene.get("tilak"),
            crown=self.scene.get("crown"),
        )
        self.status = STATUS_STARTING
        self.face_tracked = False
        self.frame_count = 0
        self.overlay: Optional[np.ndarray] = None
        self.camera: Optional[CameraCapture] = None
        self._listeners: List[StatusListener] = []
        self._closed = False

    @property
    def crown(self) -> Optional[SceneObject]:
        return self.tracker.crown

    def add_status_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def set_status(self, status: str) -> None:
        if status == self.status:
            return
        self.status = status
        log(f"Status: {status}")
        for listener in self._listeners:
            listener(status)

    def attach_camera(self, camera: CameraCapture) -> None:
        self.camera = camera

    def start_assets(self) -> None:
        if self.loader is not None:
            self.loader.start()

    def poll_assets(self) -> bool:
        if self.loader is None:
            return False
        result = self.loader.poll()
        if result is None:
            return False
        if result.ok:
            crown = build_crown(result.mesh)
            self.scene.add(crown)
            self.tracker.attach_crown(crown)
            self.set_status(STATUS_READY)
        else:
            log(f"Crown unavailable, continuing without it: {result.error}")
            self.set_status(STATUS_CROWN_FAILED)
        return True

    def on_results(self, landmarks) -> np.ndarray:
        self.frame_count += 1
        if self.crown is None or not landmarks:
            self.face_tracked = False
            return self._render()

        self.face_tracked = True
        pose = self.tracker.apply(landmarks)
        x, y, z = pose.crown.position
        log_every(
            self.frame_count,
            f"Crown pos=({x:.2f}, {y:.2f}, {z:.2f}) scale={pose.crown.scale[0]:.2f} "
            f"tilt={pose.crown.rotation[2]:.2f} pitch={pose.crown.rotation[0]:.2f}",
        )
        return self._render()

    def _render(self) -> np.ndarray:
        self.overlay = self.renderer.render(self.scene)
        return self.overlay

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self.camera is not None:
                self.camera.stop()
        finally:
            self.camera = None
            self.renderer.dispose()
            log("Session closed")
