"""Exception types raised inside the tracking core."""


class GazeTrackingError(Exception):
    """Base class for recoverable tracking errors."""


class MalformedFrameError(GazeTrackingError, ValueError):
    """A landmark frame does not satisfy the minimum landmark layout."""


class SingularMatrixError(GazeTrackingError, ArithmeticError):
    """A matrix pivot fell below the elimination epsilon."""


class InsufficientCalibrationDataError(GazeTrackingError, ValueError):
    """Too few valid calibration samples to fit the gaze model."""
