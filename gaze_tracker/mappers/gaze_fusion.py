"""Fuses filtered head rotation and iris offsets into one gaze vector."""

import logging
import math
from typing import Optional
import torch

from ..core.config import TrackerConfig
from ..core.constants import (
    EYE_SCALE_FLOOR,
    EYE_SCALE_LANDMARKS,
    REFERENCE_HEIGHT,
    REFERENCE_WIDTH,
)
from ..core.landmarks import LandmarkFrame
from ..core.tracking_mode import TrackingMode
from ..core.types import GazeVector, HeadRotation, IrisOffset

logger = logging.getLogger(__name__)


def eye_scale(frame: LandmarkFrame) -> float:
    """
    Face scale at eye level in normalized units.

    Mean of the outer-corner and inner-corner distances, using only x and y.
    """
    outer_a, outer_b = EYE_SCALE_LANDMARKS["outer"]
    inner_a, inner_b = EYE_SCALE_LANDMARKS["inner"]
    points = frame.points[:, :2]

    d_outer = torch.linalg.norm(points[outer_b] - points[outer_a]).item()
    d_inner = torch.linalg.norm(points[inner_b] - points[inner_a]).item()

    return max(EYE_SCALE_FLOOR, (d_outer + d_inner) / 2.0)


class GazeFusion:
    """
    Owns the tare baseline and combines head and eye signals.

    Recentering captures the raw rotation of the *next* processed frame as
    the baseline; frames already produced are not changed.
    """

    def __init__(self, config: TrackerConfig):
        self.config = config
        self.offset = HeadRotation()
        self._recenter_pending = False

    @property
    def recenter_pending(self) -> bool:
        return self._recenter_pending

    def request_recenter(self):
        """Arm baseline capture for the next frame."""
        self._recenter_pending = True

    def clear_offset(self):
        self.offset = HeadRotation()
        self._recenter_pending = False

    def apply_offset(self, raw: HeadRotation) -> HeadRotation:
        """
        Express a raw rotation relative to the tare baseline.

        If a recenter is pending, ``raw`` becomes the new baseline first.
        """
        if self._recenter_pending:
            self.offset = raw
            self._recenter_pending = False
            logger.info(
                "Recentered head pose at yaw=%.3f pitch=%.3f roll=%.3f",
                raw.yaw, raw.pitch, raw.roll,
            )
        return raw.relative_to(self.offset)

    def eye_angles(self, right: IrisOffset, left: IrisOffset, scale: float) -> GazeVector:
        """
        Convert filtered iris offsets into an eye rotation estimate.

        Each pixel offset is normalized back to frame units and turned into an
        angle against an eye radius proportional to the face scale; the two
        eyes are then averaged.

        Args:
            right: Filtered right-eye offset (pixels)
            left: Filtered left-eye offset (pixels)
            scale: Eye scale from ``eye_scale`` (normalized units)

        Returns:
            Eye yaw/pitch in radians
        """
        radius = scale * self.config.eye_radius_factor

        yaws = []
        pitches = []
        for offset in (right, left):
            yaws.append(math.atan2(offset.x / REFERENCE_WIDTH, radius))
            pitches.append(math.atan2(offset.y / REFERENCE_HEIGHT, radius))

        return GazeVector(yaw=sum(yaws) / 2, pitch=sum(pitches) / 2)

    def fuse(self,
             head: HeadRotation,
             eye: Optional[GazeVector],
             mode: TrackingMode) -> GazeVector:
        """
        Combine head and eye rotation according to the tracking mode.

        HEAD: head yaw/pitch only.
        IRIS: head plus eye angles scaled by ``eye_gain``; eye pitch is
        negated because image y grows downward.
        """
        if mode is TrackingMode.HEAD or eye is None:
            return GazeVector(yaw=head.yaw, pitch=head.pitch)

        gain = self.config.eye_gain
        return GazeVector(
            yaw=head.yaw + eye.yaw * gain,
            pitch=head.pitch - eye.pitch * gain,
        )
