"""Core types, constants and configuration for gaze_tracker."""

from .base_detector import BaseDetector
from .config import TrackerConfig
from .landmarks import LandmarkFrame
from .tracking_mode import TrackingMode
from .types import TrackingOutputs

__all__ = [
    "BaseDetector",
    "LandmarkFrame",
    "TrackerConfig",
    "TrackingMode",
    "TrackingOutputs",
]
