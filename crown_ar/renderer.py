import math
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .config import (
    CAMERA_FAR,
    CAMERA_FOV,
    CAMERA_NEAR,
    CAMERA_Z,
    MIRROR_OUTPUT,
    RENDER_HEIGHT,
    RENDER_WIDTH,
)
from .scene import Scene, SceneObject
from .transforms import Transform

_SUBPIXEL_SHIFT = 4
_SUBPIXEL_SCALE = 1 << _SUBPIXEL_SHIFT


def euler_matrix(rx: float, ry: float, rz: float) -> np.ndarray:
    """Rotation matrix for intrinsic XYZ Euler angles (radians)."""
    cx, sx = math.cos(rx), math.sin(rx)
    cy, sy = math.cos(ry), math.sin(ry)
    cz, sz = math.cos(rz), math.sin(rz)
    Rx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]], dtype=np.float64)
    Ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]], dtype=np.float64)
    Rz = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]], dtype=np.float64)
    return Rx @ Ry @ Rz


def compose(transform: Transform) -> np.ndarray:
    """4x4 model matrix T * R * S."""
    M = np.eye(4, dtype=np.float64)
    M[:3, :3] = euler_matrix(*transform.rotation) @ np.diag(transform.scale)
    M[:3, 3] = transform.position
    return M


def apply_transform(vertices: np.ndarray, transform: Transform) -> np.ndarray:
    M = compose(transform)
    return vertices @ M[:3, :3].T + M[:3, 3]


class PerspectiveCamera:
    def __init__(
        self,
        fov: float = CAMERA_FOV,
        aspect: float = RENDER_WIDTH / RENDER_HEIGHT,
        near: float = CAMERA_NEAR,
        far: float = CAMERA_FAR,
        z: float = CAMERA_Z,
    ) -> None:
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        self.position = np.array([0.0, 0.0, z], dtype=np.float64)
        self.focal = 1.0 / math.tan(math.radians(fov) / 2.0)

    def depth(self, points: np.ndarray) -> np.ndarray:
        """Distance in front of the camera along its -Z viewing axis."""
        return self.position[2] - points[..., 2]

    def project(self, points: np.ndarray, width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
        """World points -> (pixel xy, depth). Points behind the camera get depth <= 0."""
        rel = points - self.position
        depth = self.depth(points)
        safe = np.where(np.abs(depth) < 1e-9, 1e-9, depth)
        x_ndc = (self.focal / self.aspect) * rel[..., 0] / safe
        y_ndc = self.focal * rel[..., 1] / safe
        px = (x_ndc + 1.0) * 0.5 * width
        py = (1.0 - y_ndc) * 0.5 * height
        return np.stack([px, py], axis=-1), depth

    def in_range(self, depth: np.ndarray) -> np.ndarray:
        return (depth >= self.near) & (depth <= self.far)


class SoftwareRenderer:
    """Rasterizes a Scene onto a transparent BGRA canvas with numpy and OpenCV.

    Meshes are drawn back-to-front (painter's algorithm) with Lambert shading
    for lit materials and leave their depth in a per-pixel buffer; point
    clouds are drawn afterwards as perspective-sized discs, additively
    blended, and hidden wherever a mesh is nearer. The finished canvas is mirrored horizontally
    so it lines up with a selfie-view camera frame.
    """

    def __init__(
        self,
        width: int = RENDER_WIDTH,
        height: int = RENDER_HEIGHT,
        camera: Optional[PerspectiveCamera] = None,
        mirror: bool = MIRROR_OUTPUT,
    ) -> None:
        self.width = width
        self.height = height
        self.camera = camera or PerspectiveCamera(aspect=width / height)
        self.mirror = mirror
        self.render_count = 0
        self._canvas: Optional[np.ndarray] = np.zeros((height, width, 4), dtype=np.uint8)
        self._depth = np.full((height, width), np.inf, dtype=np.float32)

    @property
    def disposed(self) -> bool:
        return self._canvas is None

    def dispose(self) -> None:
        self._canvas = None

    def render(self, scene: Scene) -> np.ndarray:
        if self._canvas is None:
            raise RuntimeError("Renderer already disposed")

        canvas = self._canvas
        canvas[:] = 0
        self._depth[:] = np.inf

        meshes = [obj for obj in scene if obj.visible and not obj.is_points]
        points = [obj for obj in scene if obj.visible and obj.is_points]

        self._draw_meshes(canvas, meshes, scene)
        for obj in points:
            self._draw_points(canvas, obj)

        self.render_count += 1
        out = cv2.flip(canvas, 1) if self.mirror else canvas.copy()
        return out

    # -- meshes --

    def _light_terms(self, scene: Scene) -> Tuple[np.ndarray, List[Tuple[np.ndarray, np.ndarray]]]:
        ambient = np.zeros(3, dtype=np.float64)
        directional = []
        for light in scene.lights:
            color = np.asarray(light.color, dtype=np.float64) * light.intensity
            if light.position is None:
                ambient += color
            else:
                direction = np.asarray(light.position, dtype=np.float64)
                norm = np.linalg.norm(direction)
                if norm > 0:
                    directional.append((direction / norm, color))
        return ambient, directional

    def _draw_meshes(self, canvas: np.ndarray, meshes: List[SceneObject], scene: Scene) -> None:
        ambient, directional = self._light_terms(scene)
        polys = []
        depths = []
        colors = []

        for obj in meshes:
            if not np.any(obj.transform.scale):
                continue
            world = apply_transform(obj.vertices, obj.transform)
            pix, depth = self.camera.project(world, self.width, self.height)
            tris = world[obj.faces]
            tri_depth = depth[obj.faces]
            keep = np.all(self.camera.in_range(tri_depth), axis=1)
            if not np.any(keep):
                continue

            normals = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
            lengths = np.linalg.norm(normals, axis=1)
            keep &= lengths > 1e-12
            normals = normals / np.where(lengths > 1e-12, lengths, 1.0)[:, None]

            centroids = tris.mean(axis=1)
            to_camera = self.camera.position - centroids
            facing = np.einsum("ij,ij->i", normals, to_camera) >= 0
            if obj.material.double_sided:
                normals = np.where(facing[:, None], normals, -normals)
            else:
                keep &= facing

            base = np.tile(np.asarray(obj.material.color, dtype=np.float64), (len(obj.faces), 1))
            if obj.face_colors is not None:
                base = obj.face_colors
            if obj.material.lit:
                shade = np.tile(ambient, (len(obj.faces), 1))
                for direction, color in directional:
                    lambert = np.clip(normals @ direction, 0.0, None)
                    shade += lambert[:, None] * color
                # three.js lights scale irradiance by 1/pi for Lambert BRDFs
                shade = shade / math.pi
                rgb = np.clip(base * shade, 0.0, 1.0)
            else:
                rgb = np.clip(base, 0.0, 1.0)

            idx = np.nonzero(keep)[0]
            polys.append(pix[obj.faces[idx]])
            depths.append(tri_depth[idx].mean(axis=1))
            colors.append(rgb[idx])

        if not polys:
            return

        all_polys = np.concatenate(polys)
        all_depths = np.concatenate(depths)
        all_colors = np.concatenate(colors)
        order = np.argsort(-all_depths, kind="stable")

        fixed = np.round(all_polys * _SUBPIXEL_SCALE).astype(np.int32)
        bgra = np.concatenate(
            [(all_colors[:, ::-1] * 255.0).round(), np.full((len(all_colors), 1), 255.0)], axis=1
        ).astype(np.int32)
        for i in order:
            cv2.fillConvexPoly(
                canvas,
                fixed[i],
                tuple(int(c) for c in bgra[i]),
                lineType=cv2.LINE_8,
                shift=_SUBPIXEL_SHIFT,
            )
            cv2.fillConvexPoly(
                self._depth,
                fixed[i],
                float(all_depths[i]),
                lineType=cv2.LINE_8,
                shift=_SUBPIXEL_SHIFT,
            )

    # -- points --

    def _draw_points(self, canvas: np.ndarray, obj: SceneObject) -> None:
        world = apply_transform(obj.vertices, obj.transform)
        pix, depth = self.camera.project(world, self.width, self.height)
        visible = self.camera.in_range(depth)
        if not np.any(visible):
            return

        layer = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        point_depth = np.full((self.height, self.width), np.inf, dtype=np.float32)
        b, g, r = (int(round(c * 255)) for c in obj.material.color[::-1])
        half_height = self.height / 2.0
        pix, depth = pix[visible], depth[visible]
        # far to near so the nearest disc owns each pixel of point_depth
        for i in np.argsort(-depth, kind="stable"):
            px, py = pix[i]
            d = float(depth[i])
            center = (int(round(px)), int(round(py)))
            # matches size attenuation: diameter = size * (height / 2) / depth
            radius = max(1, int(round(obj.material.point_size * half_height / d / 2.0)))
            cv2.circle(layer, center, radius, (b, g, r), -1, lineType=cv2.LINE_AA)
            cv2.circle(point_depth, center, radius + 1, d, -1, lineType=cv2.LINE_8)

        layer[point_depth >= self._depth] = 0

        if obj.material.additive:
            summed = canvas[..., :3].astype(np.uint16) + layer
            canvas[..., :3] = np.minimum(summed, 255).astype(np.uint8)
        else:
            drawn = layer.any(axis=2)
            canvas[..., :3][drawn] = layer[drawn]
        coverage = layer.max(axis=2)
        canvas[..., 3] = np.maximum(canvas[..., 3], coverage)


def composite(frame_bgr: np.ndarray, overlay_bgra: np.ndarray) -> np.ndarray:
    """Alpha-blend a BGRA overlay over a BGR frame of any size."""
    h, w = frame_bgr.shape[:2]
    if overlay_bgra.shape[:2] != (h, w):
        overlay_bgra = cv2.resize(overlay_bgra, (w, h), interpolation=cv2.INTER_LINEAR)
    alpha = overlay_bgra[..., 3:4].astype(np.float32) / 255.0
    blended = frame_bgr.astype(np.float32) * (1.0 - alpha) + overlay_bgra[..., :3].astype(np.float32) * alpha
    return blended.astype(np.uint8)
