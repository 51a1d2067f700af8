"""Per-channel filter state owned by one tracking session."""

from typing import Optional, Tuple

from ..core.config import TrackerConfig
from ..core.types import HeadRotation, IrisOffset
from .kalman import ConstantVelocityKalmanFilter
from .one_euro import OneEuroFilter


class FilterBank:
    """
    Named filter instances for every smoothed channel.

    - yaw, pitch, roll: One-Euro filters on tare-relative head rotation
    - right_eye, left_eye: constant-velocity Kalman filters on iris offsets
    """

    def __init__(self, config: TrackerConfig):
        self.yaw = OneEuroFilter(config.min_cutoff, config.beta, config.d_cutoff)
        self.pitch = OneEuroFilter(config.min_cutoff, config.beta, config.d_cutoff)
        self.roll = OneEuroFilter(config.min_cutoff, config.beta, config.d_cutoff)

        self.right_eye = ConstantVelocityKalmanFilter(config.process_noise, config.measurement_noise)
        self.left_eye = ConstantVelocityKalmanFilter(config.process_noise, config.measurement_noise)

    @property
    def rotation_filters(self) -> Tuple[OneEuroFilter, OneEuroFilter, OneEuroFilter]:
        return self.yaw, self.pitch, self.roll

    def set_tuning(self, min_cutoff: Optional[float] = None, beta: Optional[float] = None) -> None:
        """Retune the rotation filters; applies from the next sample on."""
        for rotation_filter in self.rotation_filters:
            rotation_filter.set_parameters(min_cutoff, beta)

    def filter_rotation(self, rotation: HeadRotation, timestamp: float) -> HeadRotation:
        """Smooth each rotation axis independently."""
        return HeadRotation(
            yaw=self.yaw.filter(rotation.yaw, timestamp),
            pitch=self.pitch.filter(rotation.pitch, timestamp),
            roll=self.roll.filter(rotation.roll, timestamp),
        )

    def filter_iris(self, right: IrisOffset, left: IrisOffset) -> Tuple[IrisOffset, IrisOffset]:
        """Smooth each eye's iris offset independently."""
        return (
            IrisOffset(*self.right_eye.update(right.x, right.y)),
            IrisOffset(*self.left_eye.update(left.x, left.y)),
        )

    def reset(self):
        """Reset all channels; each re-seeds from its next sample."""
        for rotation_filter in self.rotation_filters:
            rotation_filter.reset()
        self.right_eye.reset()
        self.left_eye.reset()
