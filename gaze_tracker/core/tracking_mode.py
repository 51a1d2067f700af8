"""Tracking mode enumeration for gaze fusion."""

from enum import Enum


class TrackingMode(Enum):
    """Which signals drive the unified gaze vector."""
    HEAD = "head"
    IRIS = "iris"
