"""CrownARApp start-up branches, exercised without a Tk display."""

from unittest.mock import MagicMock, patch

import pytest

pytest.importorskip("tkinter")

import crown_ar.ui.app as app_module
from crown_ar.config import (
    STATUS_CAMERA_UNAVAILABLE,
    STATUS_DETECTOR_UNAVAILABLE,
    STATUS_MEDIAPIPE_MISSING,
    STATUS_MODEL_UNAVAILABLE,
    STATUS_STARTING,
)
from crown_ar.errors import CameraError
from crown_ar.ui.app import CrownARApp


def _bare_app():
    app = CrownARApp.__new__(CrownARApp)
    app.asset_path = "crown.glb"
    app.session = None
    app.detector = None
    app.camera = None
    app.running = False
    app._closing = False
    app.root = MagicMock()
    app.status_var = MagicMock()
    return app


def _shown_statuses(app):
    return [c.args[0] for c in app.status_var.set.call_args_list]


@pytest.fixture
def collaborators():
    mocks = {
        "FaceLandmarkSource": MagicMock(name="FaceLandmarkSource"),
        "FaceARSession": MagicMock(name="FaceARSession"),
        "CameraCapture": MagicMock(name="CameraCapture"),
        "AssetLoader": MagicMock(name="AssetLoader"),
        "ensure_model": MagicMock(name="ensure_model", return_value="face_landmarker.task"),
    }
    with patch.object(app_module, "MEDIAPIPE_AVAILABLE", True), \
            patch.multiple(app_module, **mocks), \
            patch.object(app_module.cv2, "namedWindow"), \
            patch.object(app_module.cv2, "destroyAllWindows"):
        yield mocks


# ─── Missing capabilities ─────────────────────────────────────

def test_missing_mediapipe_sets_status_and_builds_nothing(collaborators):
    app = _bare_app()
    with patch.object(app_module, "MEDIAPIPE_AVAILABLE", False):
        app._start()

    assert _shown_statuses(app) == [app._format_status(STATUS_MEDIAPIPE_MISSING)]
    collaborators["ensure_model"].assert_not_called()
    collaborators["FaceARSession"].assert_not_called()
    collaborators["CameraCapture"].assert_not_called()
    assert app.session is None


def test_model_download_failure_sets_status(collaborators):
    collaborators["ensure_model"].side_effect = OSError("network unreachable")
    app = _bare_app()

    app._start()

    assert _shown_statuses(app) == [app._format_status(STATUS_MODEL_UNAVAILABLE)]
    collaborators["FaceLandmarkSource"].assert_not_called()
    collaborators["FaceARSession"].assert_not_called()
    collaborators["CameraCapture"].assert_not_called()


def test_detector_creation_failure_sets_status_and_builds_no_session(collaborators):
    collaborators["FaceLandmarkSource"].side_effect = RuntimeError("Unable to open model")
    app = _bare_app()

    app._start()

    shown = _shown_statuses(app)
    assert shown == [app._format_status(STATUS_DETECTOR_UNAVAILABLE)]
    assert app._format_status(STATUS_STARTING) not in shown
    collaborators["FaceARSession"].assert_not_called()
    collaborators["CameraCapture"].assert_not_called()
    assert app.session is None
    assert app.detector is None


def test_camera_failure_releases_detector_and_session(collaborators):
    camera = collaborators["CameraCapture"].return_value
    camera.start.side_effect = CameraError("Camera 0 could not be opened")
    detector = collaborators["FaceLandmarkSource"].return_value
    session = collaborators["FaceARSession"].return_value
    app = _bare_app()

    app._start()

    assert _shown_statuses(app) == [app._format_status(STATUS_CAMERA_UNAVAILABLE)]
    detector.close.assert_called_once()
    session.close.assert_called_once()
    session.start_assets.assert_not_called()
    assert app.running is False
    assert app.camera is None


# ─── Running loop ─────────────────────────────────────────────

def test_failed_camera_read_tears_everything_down(collaborators):
    camera = collaborators["CameraCapture"].return_value
    camera.step.return_value = False
    detector = collaborators["FaceLandmarkSource"].return_value
    session = collaborators["FaceARSession"].return_value
    app = _bare_app()

    app._start()

    session.start_assets.assert_called_once()
    session.poll_assets.assert_called_once()
    detector.on_results.assert_called_once_with(session.on_results)
    detector.close.assert_called_once()
    session.close.assert_called_once()
    assert app.detector is None
    assert app.running is False
