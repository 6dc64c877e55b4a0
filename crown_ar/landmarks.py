import numpy as np

# MediaPipe face mesh indices (478 landmarks with iris refinement)

FOREHEAD = 10
LEFT_EYE_OUTER = 33
RIGHT_EYE_OUTER = 263
NOSE_TIP = 1
GLABELLA = 168


def get_point_3d(index: int, landmarks) -> np.ndarray:
    lm = landmarks[index]
    return np.array([lm.x, lm.y, lm.z], dtype=np.float64)
