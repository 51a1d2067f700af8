"""Mappers from head and eye measurements to gaze and screen space."""

from .eye_position import EyePositionSmoother
from .gaze_fusion import GazeFusion
from .screen_mapper import ScreenMapper

__all__ = [
    "EyePositionSmoother",
    "GazeFusion",
    "ScreenMapper",
]
