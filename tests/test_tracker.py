import numpy as np
import pytest

from crown_ar.config import SPARKLE_YAW_STEP
from crown_ar.scene import build_crown, build_sparkles, build_tilak
from crown_ar.tracker import OverlayTracker


@pytest.fixture
def tracker(box_mesh, rng):
    return OverlayTracker(
        sparkles=build_sparkles(rng=rng),
        marker=build_tilak(),
        crown=build_crown(box_mesh),
    )


def test_apply_moves_all_three_objects(tracker, reference_landmarks):
    pose = tracker.apply(reference_landmarks)

    np.testing.assert_allclose(tracker.crown.position, pose.crown.position)
    np.testing.assert_allclose(tracker.crown.rotation, pose.crown.rotation)
    np.testing.assert_allclose(tracker.crown.scale, pose.crown.scale)
    np.testing.assert_allclose(tracker.marker.position, pose.marker.position)
    np.testing.assert_allclose(tracker.marker.scale, pose.marker.scale)
    np.testing.assert_allclose(tracker.sparkles.position, pose.sparkles.position)
    assert tracker.last_pose is pose


def test_sparkle_yaw_advances_every_apply(tracker, reference_landmarks):
    tracker.apply(reference_landmarks)
    tracker.apply(reference_landmarks)
    tracker.apply(reference_landmarks)

    assert tracker.sparkles.rotation[1] == pytest.approx(3 * SPARKLE_YAW_STEP)
    assert tracker.sparkles.rotation[0] == 0.0
    assert tracker.sparkles.rotation[2] == 0.0


def test_same_landmarks_give_same_crown_pose(tracker, reference_landmarks):
    tracker.apply(reference_landmarks)
    first = tracker.crown.transform.copy()
    tracker.apply(reference_landmarks)

    assert tracker.crown.transform == first


def test_marker_keeps_its_rotation(tracker, make_landmarks):
    tracker.apply(make_landmarks(left_eye=(0.3, 0.4, 0.0), right_eye=(0.7, 0.6, 0.0)))

    np.testing.assert_array_equal(tracker.marker.rotation, [0.0, 0.0, 0.0])
    assert tracker.crown.rotation[2] != 0.0


def test_apply_without_crown(rng, reference_landmarks):
    tracker = OverlayTracker(sparkles=build_sparkles(rng=rng), marker=build_tilak())
    assert not tracker.ready

    tracker.apply(reference_landmarks)

    np.testing.assert_allclose(tracker.marker.position, [0.0, 0.3, 0.2], atol=1e-12)
