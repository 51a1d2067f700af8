"""Tracker configuration."""

import dataclasses
from dataclasses import dataclass

from .constants import (
    DEFAULT_BETA,
    DEFAULT_BLINK_THRESHOLD,
    DEFAULT_D_CUTOFF,
    DEFAULT_DECAY_ALPHA,
    DEFAULT_EYE_GAIN,
    DEFAULT_EYE_RADIUS_FACTOR,
    DEFAULT_MEASUREMENT_NOISE,
    DEFAULT_MIN_CUTOFF,
    DEFAULT_POSITION_ALPHA,
    DEFAULT_PROCESS_NOISE,
    DEFAULT_SPEED_GAIN,
)


@dataclass(frozen=True)
class TrackerConfig:
    """
    Tunable parameters for the tracking pipeline.

    Instances are immutable; use ``replace`` to derive a validated copy.
    """

    # Head rotation filter (One-Euro)
    min_cutoff: float = DEFAULT_MIN_CUTOFF  # Jitter floor in Hz
    beta: float = DEFAULT_BETA              # Speed responsiveness
    d_cutoff: float = DEFAULT_D_CUTOFF      # Derivative cutoff in Hz

    # Iris filter (constant-velocity Kalman)
    process_noise: float = DEFAULT_PROCESS_NOISE
    measurement_noise: float = DEFAULT_MEASUREMENT_NOISE

    # Gaze fusion
    eye_gain: float = DEFAULT_EYE_GAIN
    eye_radius_factor: float = DEFAULT_EYE_RADIUS_FACTOR
    blink_threshold: float = DEFAULT_BLINK_THRESHOLD

    # Eye position
    speed_gain: float = DEFAULT_SPEED_GAIN
    position_alpha: float = DEFAULT_POSITION_ALPHA
    decay_alpha: float = DEFAULT_DECAY_ALPHA

    def __post_init__(self) -> None:
        if not self.min_cutoff > 0:
            raise ValueError(f"min_cutoff must be > 0, got {self.min_cutoff}")
        if not self.beta >= 0:
            raise ValueError(f"beta must be >= 0, got {self.beta}")
        if not self.d_cutoff > 0:
            raise ValueError(f"d_cutoff must be > 0, got {self.d_cutoff}")
        for name in ("process_noise", "measurement_noise"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"{name} must be > 0, got {value}")
        if not self.eye_radius_factor > 0:
            raise ValueError(f"eye_radius_factor must be > 0, got {self.eye_radius_factor}")
        if not self.blink_threshold >= 0:
            raise ValueError(f"blink_threshold must be >= 0, got {self.blink_threshold}")
        for name in ("position_alpha", "decay_alpha"):
            value = getattr(self, name)
            if not 0.0 < value <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {value}")

    def replace(self, **changes) -> "TrackerConfig":
        """Return a copy with ``changes`` applied; None values are ignored."""
        changes = {key: value for key, value in changes.items() if value is not None}
        return dataclasses.replace(self, **changes)
