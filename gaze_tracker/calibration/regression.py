"""
Bivariate quadratic regression from gaze angle to screen position.

Model:
    screen_x = a0*gx + a1*gy + a2*gx*gy + a3*gx^2 + a4*gy^2 + a5
    screen_y = b0*gx + b1*gy + b2*gx*gy + b3*gx^2 + b4*gy^2 + b5

Fit by ordinary least squares through the normal equations
(X^T X) beta = X^T y, inverting the 6x6 X^T X by Gauss-Jordan elimination.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple
import torch

from ..core.constants import MIN_CALIBRATION_SAMPLES, PIVOT_EPSILON
from ..core.errors import InsufficientCalibrationDataError, SingularMatrixError

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

NUM_TERMS = 6


def design_row(x: float, y: float) -> List[float]:
    """Quadratic basis [x, y, x*y, x^2, y^2, 1]."""
    return [x, y, x * y, x * x, y * y, 1.0]


def invert_matrix(matrix: torch.Tensor, epsilon: float = PIVOT_EPSILON) -> torch.Tensor:
    """
    Invert a square matrix by Gauss-Jordan elimination with partial pivoting.

    No regularization is applied: a near-zero pivot fails the inversion.

    Args:
        matrix: (n, n) matrix
        epsilon: Smallest acceptable pivot magnitude

    Returns:
        (n, n) inverse

    Raises:
        SingularMatrixError: If a pivot magnitude falls below epsilon
    """
    n = matrix.shape[0]
    augmented = torch.cat(
        [matrix.to(torch.float64), torch.eye(n, dtype=torch.float64)],
        dim=1,
    )

    for col in range(n):
        pivot_row = col + int(torch.argmax(augmented[col:, col].abs()).item())
        if pivot_row != col:
            augmented[[col, pivot_row]] = augmented[[pivot_row, col]]

        pivot = augmented[col, col].item()
        if abs(pivot) < epsilon:
            raise SingularMatrixError(f"Pivot {pivot:.3e} below {epsilon:.0e} in column {col}")

        augmented[col] = augmented[col] / pivot
        for row in range(n):
            if row != col:
                augmented[row] = augmented[row] - augmented[row, col] * augmented[col]

    return augmented[:, n:]


@dataclass(frozen=True)
class CalibrationModel:
    """Fitted gaze-to-screen coefficients; immutable once fit."""

    coefficients_x: Tuple[float, ...]
    coefficients_y: Tuple[float, ...]

    def __post_init__(self):
        if len(self.coefficients_x) != NUM_TERMS or len(self.coefficients_y) != NUM_TERMS:
            raise ValueError(f"Calibration model needs {NUM_TERMS} coefficients per axis")

    def predict(self, x: float, y: float) -> Point:
        """
        Map a gaze (yaw, pitch) to normalized screen coordinates.

        Args:
            x: Gaze yaw in radians
            y: Gaze pitch in radians

        Returns:
            Predicted (screen_x, screen_y), nominally in [0, 1]
        """
        terms = design_row(x, y)
        out_x = sum(t * c for t, c in zip(terms, self.coefficients_x))
        out_y = sum(t * c for t, c in zip(terms, self.coefficients_y))
        return out_x, out_y

    def to_dict(self) -> Dict[str, List[float]]:
        return {"x": list(self.coefficients_x), "y": list(self.coefficients_y)}

    @classmethod
    def from_dict(cls, data: Dict[str, Sequence[float]]) -> "CalibrationModel":
        return cls(
            coefficients_x=tuple(float(c) for c in data["x"]),
            coefficients_y=tuple(float(c) for c in data["y"]),
        )


class PolynomialRegression:
    """Least-squares solver for the quadratic gaze-to-screen model."""

    def __init__(self, min_samples: int = MIN_CALIBRATION_SAMPLES, epsilon: float = PIVOT_EPSILON):
        self.min_samples = min_samples
        self.epsilon = epsilon

    def fit(self, inputs: Sequence[Point], outputs: Sequence[Point]) -> CalibrationModel:
        """
        Fit the model on paired gaze/screen samples.

        Args:
            inputs: Gaze (yaw, pitch) per sample
            outputs: Normalized screen (x, y) target per sample

        Returns:
            Fitted CalibrationModel

        Raises:
            ValueError: If inputs and outputs differ in length
            InsufficientCalibrationDataError: Fewer than ``min_samples`` finite pairs
            SingularMatrixError: X^T X is not invertible
        """
        if len(inputs) != len(outputs):
            raise ValueError(f"Got {len(inputs)} inputs but {len(outputs)} outputs")

        pairs = [
            (gaze, target) for gaze, target in zip(inputs, outputs)
            if all(math.isfinite(v) for v in (*gaze, *target))
        ]
        if len(pairs) < self.min_samples:
            raise InsufficientCalibrationDataError(
                f"Need at least {self.min_samples} valid samples for a quadratic fit, got {len(pairs)}"
            )

        X = torch.tensor([design_row(gx, gy) for (gx, gy), _ in pairs], dtype=torch.float64)  # N x 6
        Y = torch.tensor([target for _, target in pairs], dtype=torch.float64)  # N x 2

        Xt = X.T
        XtX_inv = invert_matrix(Xt @ X, self.epsilon)
        beta = XtX_inv @ (Xt @ Y)  # 6 x 2

        model = CalibrationModel(
            coefficients_x=tuple(beta[:, 0].tolist()),
            coefficients_y=tuple(beta[:, 1].tolist()),
        )
        logger.info("Fitted calibration model on %d samples", len(pairs))
        logger.debug("Calibration coefficients: %s", model.to_dict())
        return model
