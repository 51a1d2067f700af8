"""Constants and default values for head pose and gaze tracking."""

import math

# MediaPipe Face Mesh with refine_landmarks=True: 468 face + 10 iris points
MIN_LANDMARKS = 478

# Reference camera frame. Normalized landmarks are scaled into this space so
# that the 4:3 aspect ratio does not distort geometry (z shares the x scale).
REFERENCE_WIDTH = 640
REFERENCE_HEIGHT = 480

# Anchor points for head pose estimation
POSE_LANDMARKS = {
    "nose": 1,
    "chin": 152,
    "left_eye_outer": 263,   # Subject's left eye (viewer's right)
    "right_eye_outer": 33,   # Subject's right eye (viewer's left)
}

# 6-point EAR ordering: [corner, upper1, upper2, corner, lower2, lower1]
# p0-p3 is the horizontal span, p1-p5 and p2-p4 the vertical spans
EAR_LANDMARKS = {
    "right": [33, 160, 158, 133, 153, 144],
    "left": [362, 385, 387, 263, 373, 380],
}

# Iris center and the eye corner its offset is measured from
IRIS_LANDMARKS = {
    "right": {"center": 468, "anchor": 33},
    "left": {"center": 473, "anchor": 362},
}

# Eye scale: mean of outer-corner and inner-corner distances
EYE_SCALE_LANDMARKS = {
    "outer": (33, 263),
    "inner": (133, 362),
}

# Points averaged for the lateral head position proxy
# [nose bottom, chin, left eye outer, right eye outer, mouth left, mouth right]
EYE_POSITION_LANDMARKS = [4, 152, 263, 33, 308, 78]

# Eye position model (pixel-equivalent units, z is eye-to-screen distance)
NEUTRAL_EYE_POSITION = (0.0, 0.0, 800.0)
EYE_POSITION_BASE_DEPTH = 700.0
EYE_POSITION_MIN_DEPTH = 450.0
EYE_POSITION_REFERENCE_FACE_WIDTH = 250.0
EYE_POSITION_DEPTH_GAIN = 0.8

# Default tuning
DEFAULT_MIN_CUTOFF = 0.1
DEFAULT_BETA = 5.0
DEFAULT_D_CUTOFF = 1.0
DEFAULT_SPEED_GAIN = 2.0
DEFAULT_EYE_GAIN = 5.0
DEFAULT_BLINK_THRESHOLD = 0.18
DEFAULT_PROCESS_NOISE = 0.01
DEFAULT_MEASUREMENT_NOISE = 0.1
DEFAULT_POSITION_ALPHA = 0.25
DEFAULT_DECAY_ALPHA = 0.05
DEFAULT_EYE_RADIUS_FACTOR = 0.4

# Numerical guards
EAR_MIN_WIDTH = 1e-9
EYE_SCALE_FLOOR = 1e-6
KALMAN_DET_EPSILON = 1e-6
PIVOT_EPSILON = 1e-10

# Calibration grid: 3x3 normalized screen targets, row-major from top-left
CALIBRATION_POINTS = [
    (0.1, 0.1), (0.5, 0.1), (0.9, 0.1),
    (0.1, 0.5), (0.5, 0.5), (0.9, 0.5),
    (0.1, 0.9), (0.5, 0.9), (0.9, 0.9),
]
CALIBRATION_COUNTDOWN = 3
CALIBRATION_TICK_INTERVAL = 1.0  # seconds per countdown tick
MIN_CALIBRATION_SAMPLES = 6

# Cursor view plane used when no calibration model is applied
VIEW_PLANE_SCALE = 70.0
VIEW_PLANE_HALF_HEIGHT = 45.0

TWO_PI = 2.0 * math.pi
