"""Temporal filters for head rotation and iris offsets."""

from .filter_bank import FilterBank
from .kalman import ConstantVelocityKalmanFilter
from .one_euro import OneEuroFilter

__all__ = [
    "ConstantVelocityKalmanFilter",
    "FilterBank",
    "OneEuroFilter",
]
