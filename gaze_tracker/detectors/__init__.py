"""Landmark detector adapters (requires the ``mediapipe`` extra)."""

from .mediapipe_detector import MediaPipeDetector

__all__ = [
    "MediaPipeDetector",
]
