import os
import queue
import threading
from dataclasses import dataclass
from typing import Optional

import trimesh

from .errors import AssetLoadError
from .logging_utils import log


@dataclass
class LoadResult:
    path: str
    mesh: Optional[trimesh.Trimesh] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.mesh is not None and self.error is None


def load_crown_mesh(path: str) -> trimesh.Trimesh:
    """Load a glTF/GLB crown and flatten all sub-meshes into one mesh."""
    if not os.path.exists(path):
        raise AssetLoadError(f"Crown asset not found: {path}")
    try:
        mesh = trimesh.load(path, force="mesh")
    except Exception as exc:
        raise AssetLoadError(f"Crown asset unreadable: {path}: {exc}") from exc
    if not isinstance(mesh, trimesh.Trimesh) or len(mesh.faces) == 0:
        raise AssetLoadError(f"Crown asset has no triangles: {path}")
    return mesh


class AssetLoader:
    """Loads the crown off the render thread and hands the result back once."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._results: "queue.Queue[LoadResult]" = queue.Queue(maxsize=1)
        self._thread: Optional[threading.Thread] = None
        self._delivered = False

    @property
    def started(self) -> bool:
        return self._thread is not None

    @property
    def delivered(self) -> bool:
        return self._delivered

    def start(self) -> None:
        if self._thread is not None:
            return

        def worker():
            try:
                mesh = load_crown_mesh(self.path)
                log(f"Crown loaded: {len(mesh.vertices)} vertices, {len(mesh.faces)} faces")
                self._results.put(LoadResult(self.path, mesh=mesh))
            except AssetLoadError as exc:
                log(f"Crown load error: {exc}")
                self._results.put(LoadResult(self.path, error=exc))

        self._thread = threading.Thread(target=worker, daemon=True)
        self._thread.start()

    def poll(self) -> Optional[LoadResult]:
        if self._delivered:
            return None
        try:
            result = self._results.get_nowait()
        except queue.Empty:
            return None
        self._delivered = True
        return result

    def wait(self, timeout: Optional[float] = None) -> Optional[LoadResult]:
        if self._thread is not None:
            self._thread.join(timeout)
        return self.poll()
