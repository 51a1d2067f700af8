"""
Gaze Tracker Package

A Python package for estimating head pose and eye gaze from MediaPipe face
landmarks, smoothing them into a stable control signal, and calibrating
gaze angles against screen positions.
"""

__version__ = "1.0.0"

from .calibration.regression import CalibrationModel, PolynomialRegression
from .calibration.session import CalibrationSession, CalibrationState
from .core.config import TrackerConfig
from .core.errors import (
    GazeTrackingError,
    InsufficientCalibrationDataError,
    MalformedFrameError,
    SingularMatrixError,
)
from .core.landmarks import LandmarkFrame
from .core.tracking_mode import TrackingMode
from .core.types import (
    BlinkState,
    EyePosition,
    GazeVector,
    HeadRotation,
    IrisOffset,
    TrackingOutputs,
)
from .mappers.screen_mapper import ScreenMapper
from .processors.landmark_loader import LandmarkLoader
from .processors.output_recorder import OutputRecorder
from .processors.tracker import HeadTracker

__all__ = [
    "BlinkState",
    "CalibrationModel",
    "CalibrationSession",
    "CalibrationState",
    "EyePosition",
    "GazeTrackingError",
    "GazeVector",
    "HeadRotation",
    "HeadTracker",
    "InsufficientCalibrationDataError",
    "IrisOffset",
    "LandmarkFrame",
    "LandmarkLoader",
    "MalformedFrameError",
    "OutputRecorder",
    "PolynomialRegression",
    "ScreenMapper",
    "SingularMatrixError",
    "TrackerConfig",
    "TrackingMode",
    "TrackingOutputs",
]
