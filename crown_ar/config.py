import os

# Camera
CAMERA_INDEX = 0
CAMERA_WIDTH = 640
CAMERA_HEIGHT = 480
CAMERA_FPS = 30
CAMERA_BUFFERSIZE = 1

# Face landmarker (MediaPipe Tasks, 478 landmarks incl. iris)
MAX_NUM_FACES = 1
MIN_DETECTION_CONFIDENCE = 0.5
MIN_TRACKING_CONFIDENCE = 0.5
FACE_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/"
    "face_landmarker/face_landmarker/float16/1/face_landmarker.task"
)
FACE_MODEL_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "models", "face_landmarker.task"
)

# Render surface
RENDER_WIDTH = 640
RENDER_HEIGHT = 480
CAMERA_FOV = 63.0
CAMERA_NEAR = 0.1
CAMERA_FAR = 1000.0
CAMERA_Z = 5.0
MIRROR_OUTPUT = True

# Lights
AMBIENT_COLOR = (1.0, 1.0, 1.0)
AMBIENT_INTENSITY = 2.0
DIRECTIONAL_COLOR = (1.0, 1.0, 1.0)
DIRECTIONAL_INTENSITY = 2.0
DIRECTIONAL_POSITION = (0.0, 5.0, 5.0)

# Sparkles
SPARKLE_COUNT = 30
SPARKLE_SPREAD = 2.0
SPARKLE_COLOR = 0xFFD700
SPARKLE_SIZE = 0.08
SPARKLE_YAW_STEP = 0.02

# Tilak
TILAK_RADIUS = 0.05
TILAK_SEGMENTS = 16
TILAK_COLOR = 0xFF0000

# Crown
CROWN_ASSET_PATH = "crown.glb"
CROWN_COLOR = 0xFFD700

# Status
STATUS_STARTING = "Starting..."
STATUS_READY = "Ready"
STATUS_MEDIAPIPE_MISSING = "MediaPipe missing!"
STATUS_CROWN_FAILED = "Crown failed to load"
STATUS_CAMERA_UNAVAILABLE = "Camera unavailable"
STATUS_MODEL_UNAVAILABLE = "Face model unavailable"
STATUS_DETECTOR_UNAVAILABLE = "Face detector unavailable"
STATUS_STOPPED = "Stopped"

# UI
WINDOW_TITLE = "Crown AR"
PREVIEW_WINDOW = "Crown AR Preview"
BORDER_COLOR_BGR = (0, 215, 255)
BORDER_THICKNESS = 3

# Logging
LOG_FILE = "crown_ar_debug.log"
LOG_INTERVAL = 30
