"""Tracking orchestration and recorded data I/O."""

from .landmark_loader import LandmarkLoader
from .output_recorder import OutputRecorder
from .streaming_json_reader import StreamingJSONReader
from .tracker import HeadTracker

__all__ = [
    "HeadTracker",
    "LandmarkLoader",
    "OutputRecorder",
    "StreamingJSONReader",
]
