"""Per-frame head pose, blink and iris measurements."""

from .blink import EyeBlinkAnalyzer
from .iris import IrisOffsetTracker
from .pose import PoseEstimator

__all__ = [
    "EyeBlinkAnalyzer",
    "IrisOffsetTracker",
    "PoseEstimator",
]
