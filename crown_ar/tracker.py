from typing import Optional

from .config import SPARKLE_YAW_STEP
from .scene import SceneObject
from .transforms import OverlayTransforms, map_landmarks


class OverlayTracker:
    """Copies mapped landmark poses onto the crown, sparkle and tilak objects."""

    def __init__(
        self,
        sparkles: SceneObject,
        marker: SceneObject,
        crown: Optional[SceneObject] = None,
        yaw_step: float = SPARKLE_YAW_STEP,
    ):
        self.crown = crown
        self.sparkles = sparkles
        self.marker = marker
        self.yaw_step = yaw_step
        self.last_pose: Optional[OverlayTransforms] = None

    @property
    def ready(self) -> bool:
        return self.crown is not None

    def attach_crown(self, crown: SceneObject) -> None:
        self.crown = crown

    def apply(self, landmarks) -> OverlayTransforms:
        pose = map_landmarks(landmarks)

        if self.crown is not None:
            self.crown.transform.set_position(*pose.crown.position)
            self.crown.transform.set_rotation(*pose.crown.rotation)
            self.crown.transform.set_scale(*pose.crown.scale)

        self.marker.transform.set_position(*pose.marker.position)
        self.marker.transform.set_scale(*pose.marker.scale)

        self.sparkles.transform.set_position(*pose.sparkles.position)
        self.sparkles.transform.rotation[1] += self.yaw_step

        self.last_pose = pose
        return pose
