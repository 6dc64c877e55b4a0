from types import SimpleNamespace

import numpy as np
import pytest
import trimesh

from crown_ar.landmarks import FOREHEAD, GLABELLA, LEFT_EYE_OUTER, NOSE_TIP, RIGHT_EYE_OUTER

NUM_LANDMARKS = 478

REFERENCE_FACE = {
    "forehead": (0.5, 0.4, 0.0),
    "left_eye": (0.3, 0.5, 0.0),
    "right_eye": (0.7, 0.5, 0.0),
    "nose": (0.5, 0.6, 0.0),
    "glabella": (0.5, 0.45, 0.0),
}


def _point(xyz):
    x, y, z = xyz
    return SimpleNamespace(x=x, y=y, z=z)


def build_landmarks(**overrides):
    """478 neutral landmarks with the five overlay anchors filled in."""
    points = dict(REFERENCE_FACE)
    points.update(overrides)
    landmarks = [_point((0.5, 0.5, 0.0)) for _ in range(NUM_LANDMARKS)]
    landmarks[FOREHEAD] = _point(points["forehead"])
    landmarks[LEFT_EYE_OUTER] = _point(points["left_eye"])
    landmarks[RIGHT_EYE_OUTER] = _point(points["right_eye"])
    landmarks[NOSE_TIP] = _point(points["nose"])
    landmarks[GLABELLA] = _point(points["glabella"])
    return landmarks


@pytest.fixture
def make_landmarks():
    return build_landmarks


@pytest.fixture
def reference_landmarks():
    return build_landmarks()


@pytest.fixture
def box_mesh():
    return trimesh.creation.box(extents=(1.0, 1.0, 1.0))


@pytest.fixture
def rng():
    return np.random.default_rng(7)
