import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from .landmarks import FOREHEAD, GLABELLA, LEFT_EYE_OUTER, NOSE_TIP, RIGHT_EYE_OUTER, get_point_3d

# Empirically tuned for the 63 degree camera at z=5. Not derived from geometry.
CROWN_X_GAIN = 8.0
CROWN_Y_GAIN = 1.0
CROWN_Y_OFFSET = 1.5
CROWN_Z_GAIN = 10.0
CROWN_SCALE_GAIN = 3.0
PITCH_GAIN = 2.0

MARKER_X_GAIN = 8.0
MARKER_Y_GAIN = 6.0
MARKER_Z_GAIN = 10.0
MARKER_Z_OFFSET = 0.2
MARKER_SCALE_GAIN = 2.0

SPARKLE_Y_OFFSET = 0.5


def _vec3(values: Sequence[float] = (0.0, 0.0, 0.0)) -> np.ndarray:
    return np.array(values, dtype=np.float64)


@dataclass
class Transform:
    position: np.ndarray = field(default_factory=_vec3)
    rotation: np.ndarray = field(default_factory=_vec3)
    scale: np.ndarray = field(default_factory=lambda: _vec3((1.0, 1.0, 1.0)))

    def set_position(self, x: float, y: float, z: float) -> None:
        self.position[:] = (x, y, z)

    def set_rotation(self, x: float, y: float, z: float) -> None:
        self.rotation[:] = (x, y, z)

    def set_scale(self, x: float, y: float, z: float) -> None:
        self.scale[:] = (x, y, z)

    def copy(self) -> "Transform":
        return Transform(self.position.copy(), self.rotation.copy(), self.scale.copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, Transform):
            return NotImplemented
        return (
            np.array_equal(self.position, other.position)
            and np.array_equal(self.rotation, other.rotation)
            and np.array_equal(self.scale, other.scale)
        )


@dataclass
class OverlayTransforms:
    crown: Transform
    sparkles: Transform
    marker: Transform
    head_width: float


def map_landmarks(landmarks) -> OverlayTransforms:
    """Map one face's landmarks to crown, sparkle and marker transforms.

    Pure: the same landmark set always yields the same transforms. Zero
    head width (coincident eye corners) collapses both scales to zero.
    The sparkle rotation is left at identity; the idle yaw belongs to the
    scene object, not to the landmarks.
    """
    forehead = get_point_3d(FOREHEAD, landmarks)
    left_eye = get_point_3d(LEFT_EYE_OUTER, landmarks)
    right_eye = get_point_3d(RIGHT_EYE_OUTER, landmarks)
    nose = get_point_3d(NOSE_TIP, landmarks)
    glabella = get_point_3d(GLABELLA, landmarks)

    width = abs(right_eye[0] - left_eye[0])

    crown = Transform()
    x = (forehead[0] - 0.5) * CROWN_X_GAIN
    y = -(forehead[1] - 0.5) * CROWN_Y_GAIN + CROWN_Y_OFFSET
    z = -forehead[2] * CROWN_Z_GAIN
    crown.set_position(x, y, z)

    tilt = math.atan2(right_eye[1] - left_eye[1], right_eye[0] - left_eye[0])
    pitch = (nose[1] - forehead[1]) * PITCH_GAIN
    crown.set_rotation(pitch, 0.0, tilt)

    crown_scale = width * CROWN_SCALE_GAIN
    crown.set_scale(crown_scale, crown_scale, crown_scale)

    marker = Transform()
    marker.set_position(
        (glabella[0] - 0.5) * MARKER_X_GAIN,
        -(glabella[1] - 0.5) * MARKER_Y_GAIN,
        -glabella[2] * MARKER_Z_GAIN + MARKER_Z_OFFSET,
    )
    marker_scale = width * MARKER_SCALE_GAIN
    marker.set_scale(marker_scale, marker_scale, marker_scale)

    sparkles = Transform()
    sparkles.set_position(x, y + SPARKLE_Y_OFFSET, z)

    return OverlayTransforms(crown=crown, sparkles=sparkles, marker=marker, head_width=float(width))
