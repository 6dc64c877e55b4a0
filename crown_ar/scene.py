from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

import numpy as np
import trimesh

from .config import (
    AMBIENT_COLOR,
    AMBIENT_INTENSITY,
    CROWN_COLOR,
    DIRECTIONAL_COLOR,
    DIRECTIONAL_INTENSITY,
    DIRECTIONAL_POSITION,
    SPARKLE_COLOR,
    SPARKLE_COUNT,
    SPARKLE_SIZE,
    SPARKLE_SPREAD,
    TILAK_COLOR,
    TILAK_RADIUS,
    TILAK_SEGMENTS,
)
from .transforms import Transform


def hex_to_rgb(color: int) -> Tuple[float, float, float]:
    return ((color >> 16) & 0xFF) / 255.0, ((color >> 8) & 0xFF) / 255.0, (color & 0xFF) / 255.0


@dataclass
class Material:
    color: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    lit: bool = True
    double_sided: bool = False
    additive: bool = False
    point_size: float = 0.0


@dataclass
class Light:
    color: Tuple[float, float, float]
    intensity: float
    position: Optional[Tuple[float, float, float]] = None  # None for ambient


@dataclass(eq=False)
class SceneObject:
    name: str
    vertices: np.ndarray
    faces: Optional[np.ndarray] = None  # None for point clouds
    material: Material = field(default_factory=Material)
    transform: Transform = field(default_factory=Transform)
    visible: bool = True
    # Per-face colours (RGB 0..1) when the asset carries them
    face_colors: Optional[np.ndarray] = None

    @property
    def is_points(self) -> bool:
        return self.faces is None

    # three.js-style accessors so per-frame code reads like the scene graph
    @property
    def position(self) -> np.ndarray:
        return self.transform.position

    @property
    def rotation(self) -> np.ndarray:
        return self.transform.rotation

    @property
    def scale(self) -> np.ndarray:
        return self.transform.scale


class Scene:
    def __init__(self) -> None:
        self.objects: List[SceneObject] = []
        self.lights: List[Light] = []

    def add(self, obj: SceneObject) -> SceneObject:
        self.objects.append(obj)
        return obj

    def remove(self, obj: SceneObject) -> None:
        if obj in self.objects:
            self.objects.remove(obj)

    def add_light(self, light: Light) -> None:
        self.lights.append(light)

    def get(self, name: str) -> Optional[SceneObject]:
        for obj in self.objects:
            if obj.name == name:
                return obj
        return None

    def __iter__(self) -> Iterator[SceneObject]:
        return iter(list(self.objects))


def build_sparkles(
    count: int = SPARKLE_COUNT,
    spread: float = SPARKLE_SPREAD,
    rng: Optional[np.random.Generator] = None,
) -> SceneObject:
    rng = rng if rng is not None else np.random.default_rng()
    points = (rng.random((count, 3)) - 0.5) * spread
    material = Material(
        color=hex_to_rgb(SPARKLE_COLOR),
        lit=False,
        additive=True,
        point_size=SPARKLE_SIZE,
    )
    return SceneObject("sparkles", points.astype(np.float64), material=material)


def build_tilak() -> SceneObject:
    sphere = trimesh.creation.uv_sphere(radius=TILAK_RADIUS, count=[TILAK_SEGMENTS, TILAK_SEGMENTS])
    material = Material(color=hex_to_rgb(TILAK_COLOR), lit=False)
    return SceneObject(
        "tilak",
        np.asarray(sphere.vertices, dtype=np.float64),
        np.asarray(sphere.faces, dtype=np.int64),
        material=material,
    )


def _mesh_face_colors(mesh: trimesh.Trimesh) -> Optional[np.ndarray]:
    visual = getattr(mesh, "visual", None)
    if visual is None or visual.kind is None:
        return None
    try:
        if visual.kind == "texture":
            visual = visual.to_color()
        colors = visual.face_colors
    except (AttributeError, ValueError, TypeError, IndexError):
        return None
    if colors is None or len(colors) != len(mesh.faces):
        return None
    return np.asarray(colors[:, :3], dtype=np.float64) / 255.0


def build_crown(mesh: trimesh.Trimesh) -> SceneObject:
    """Wrap a loaded crown mesh; every surface renders both faces."""
    material = Material(color=hex_to_rgb(CROWN_COLOR), lit=True, double_sided=True)
    return SceneObject(
        "crown",
        np.asarray(mesh.vertices, dtype=np.float64),
        np.asarray(mesh.faces, dtype=np.int64),
        material=material,
        face_colors=_mesh_face_colors(mesh),
    )


def build_scene(rng: Optional[np.random.Generator] = None) -> Scene:
    scene = Scene()
    scene.add_light(Light(AMBIENT_COLOR, AMBIENT_INTENSITY))
    scene.add_light(Light(DIRECTIONAL_COLOR, DIRECTIONAL_INTENSITY, DIRECTIONAL_POSITION))
    scene.add(build_sparkles(rng=rng))
    scene.add(build_tilak())
    return scene
