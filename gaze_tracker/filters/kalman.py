"""Constant-velocity Kalman filter for 2D points."""

import logging
from typing import Optional, Tuple
import torch

from ..core.constants import KALMAN_DET_EPSILON

logger = logging.getLogger(__name__)


def invert_2x2(matrix: torch.Tensor, epsilon: float = KALMAN_DET_EPSILON) -> Optional[torch.Tensor]:
    """
    Closed-form inverse of a 2x2 matrix.

    Returns:
        Inverse matrix, or None if |det| < epsilon
    """
    a, b = matrix[0, 0], matrix[0, 1]
    c, d = matrix[1, 0], matrix[1, 1]
    det = a * d - b * c
    if abs(det.item()) < epsilon:
        return None
    return torch.stack([
        torch.stack([d, -b]),
        torch.stack([-c, a]),
    ]) / det


class ConstantVelocityKalmanFilter:
    """
    Kalman filter over the state [x, y, vx, vy] with position measurements.

    Position advances by velocity once per update (dt = 1 frame). Process and
    measurement noise are scalars applied uniformly to the covariance
    diagonals.
    """

    def __init__(self, process_noise: float = 0.01, measurement_noise: float = 0.1):
        """
        Initialize the filter.

        Args:
            process_noise: Diagonal of the process noise covariance Q (4x4)
            measurement_noise: Diagonal of the measurement noise covariance R (2x2)
        """
        if not process_noise > 0 or not measurement_noise > 0:
            raise ValueError(
                f"Noise covariances must be > 0, got Q={process_noise}, R={measurement_noise}"
            )
        self.process_noise = process_noise
        self.measurement_noise = measurement_noise

        # Transition: position += velocity
        self.F = torch.tensor([
            [1.0, 0.0, 1.0, 0.0],
            [0.0, 1.0, 0.0, 1.0],
            [0.0, 0.0, 1.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ], dtype=torch.float64)
        # Measurement: position only
        self.H = torch.tensor([
            [1.0, 0.0, 0.0, 0.0],
            [0.0, 1.0, 0.0, 0.0],
        ], dtype=torch.float64)
        self.Q = torch.eye(4, dtype=torch.float64) * process_noise
        self.R = torch.eye(2, dtype=torch.float64) * measurement_noise

        self.reset()

    def reset(self):
        """Forget the state; the next measurement re-initializes it."""
        self.x = torch.zeros(4, dtype=torch.float64)
        self.P = torch.eye(4, dtype=torch.float64)
        self.initialized = False

    @property
    def position(self) -> Tuple[float, float]:
        return self.x[0].item(), self.x[1].item()

    def predict(self):
        """Advance the state one frame."""
        self.x = self.F @ self.x
        self.P = self.F @ self.P @ self.F.T + self.Q

    def update(self, mx: float, my: float) -> Tuple[float, float]:
        """
        Predict, then correct with a position measurement.

        The first measurement seeds the state directly (zero velocity).

        Args:
            mx: Measured x
            my: Measured y

        Returns:
            Filtered (x, y)
        """
        if not self.initialized:
            self.x = torch.tensor([mx, my, 0.0, 0.0], dtype=torch.float64)
            self.initialized = True
            return mx, my

        self.predict()

        z = torch.tensor([mx, my], dtype=torch.float64)
        innovation = z - self.H @ self.x
        S = self.H @ self.P @ self.H.T + self.R

        S_inv = invert_2x2(S)
        if S_inv is None:
            # Ill-conditioned innovation covariance: keep the prediction
            logger.debug("Skipping Kalman correction, singular innovation covariance")
            return self.position

        K = self.P @ self.H.T @ S_inv
        self.x = self.x + K @ innovation
        self.P = (torch.eye(4, dtype=torch.float64) - K @ self.H) @ self.P

        return self.position
