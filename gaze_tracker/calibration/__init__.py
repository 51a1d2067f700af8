"""Gaze-to-screen calibration."""

from .regression import CalibrationModel, PolynomialRegression
from .session import CalibrationPoint, CalibrationSession, CalibrationState

__all__ = [
    "CalibrationModel",
    "CalibrationPoint",
    "CalibrationSession",
    "CalibrationState",
    "PolynomialRegression",
]
