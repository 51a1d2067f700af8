"""Type definitions for tracking outputs and intermediate measurements."""

from dataclasses import dataclass, field, asdict
from typing import Dict, Any
import math

from .constants import NEUTRAL_EYE_POSITION, TWO_PI


def wrap_angle(angle: float) -> float:
    """Wrap an angle in radians into [-pi, pi]."""
    if angle < -math.pi:
        angle += TWO_PI
    elif angle > math.pi:
        angle -= TWO_PI
    return angle


@dataclass(frozen=True)
class HeadRotation:
    """Head rotation in radians about the face-local axes."""

    yaw: float = 0.0    # Left/right
    pitch: float = 0.0  # Up/down
    roll: float = 0.0   # Tilt

    def relative_to(self, offset: "HeadRotation") -> "HeadRotation":
        """
        Express this rotation relative to a tare baseline.

        Each axis difference is wrapped into [-pi, pi] so that a baseline
        captured near the +/-pi seam does not produce a full-turn jump.
        """
        return HeadRotation(
            yaw=wrap_angle(self.yaw - offset.yaw),
            pitch=wrap_angle(self.pitch - offset.pitch),
            roll=wrap_angle(self.roll - offset.roll),
        )


@dataclass(frozen=True)
class BlinkState:
    """Eye openness metrics for one frame."""

    is_blinking: bool = False
    left_ear: float = 0.0
    right_ear: float = 0.0
    strength: float = 0.0  # Average EAR of both eyes


@dataclass(frozen=True)
class IrisOffset:
    """Iris displacement from its eye anchor, in 640x480 pixel-equivalent units."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class GazeVector:
    """Fused gaze direction in radians."""

    yaw: float = 0.0
    pitch: float = 0.0

    def is_finite(self) -> bool:
        return math.isfinite(self.yaw) and math.isfinite(self.pitch)


@dataclass(frozen=True)
class EyePosition:
    """Lateral head position proxy (x, y) and eye-to-screen distance (z)."""

    x: float = NEUTRAL_EYE_POSITION[0]
    y: float = NEUTRAL_EYE_POSITION[1]
    z: float = NEUTRAL_EYE_POSITION[2]

    @classmethod
    def neutral(cls) -> "EyePosition":
        return cls(*NEUTRAL_EYE_POSITION)

    def blend(self, target: "EyePosition", alpha: float) -> "EyePosition":
        """Exponential moving average step: alpha * target + (1 - alpha) * self."""
        return EyePosition(
            x=alpha * target.x + (1 - alpha) * self.x,
            y=alpha * target.y + (1 - alpha) * self.y,
            z=alpha * target.z + (1 - alpha) * self.z,
        )


@dataclass
class TrackingOutputs:
    """
    Latest smoothed outputs of the tracking pipeline.

    Rotation is tare-relative and filtered, gaze is the fused head/eye
    estimate, iris is the averaged filtered offset of both eyes.
    """

    rotation: HeadRotation = field(default_factory=HeadRotation)
    blink: BlinkState = field(default_factory=BlinkState)
    iris: IrisOffset = field(default_factory=IrisOffset)
    gaze: GazeVector = field(default_factory=GazeVector)
    eye_position: EyePosition = field(default_factory=EyePosition.neutral)
    fps: int = 0
    face_detected: bool = False
    frame_index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert outputs to a JSON-serializable dictionary."""
        return asdict(self)
