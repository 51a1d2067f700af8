"""Validated landmark frame with named, pixel-space accessors."""

from typing import Sequence, Union
import numpy as np
import torch

from .constants import MIN_LANDMARKS, REFERENCE_WIDTH, REFERENCE_HEIGHT
from .errors import MalformedFrameError

LandmarkInput = Union[torch.Tensor, np.ndarray, Sequence[Sequence[float]]]


class LandmarkFrame:
    """
    One face worth of landmarks.

    Holds the normalized (N, 3) coordinates as produced by MediaPipe:
    - x, y in [0, 1] relative to image width/height
    - z roughly on the x scale (negative = closer to camera)

    and their projection into the 640x480 reference frame, where x and z are
    scaled by the width and y by the height.
    """

    def __init__(self, points: torch.Tensor):
        self.points = points
        scale = torch.tensor(
            [REFERENCE_WIDTH, REFERENCE_HEIGHT, REFERENCE_WIDTH],
            dtype=points.dtype,
            device=points.device,
        )
        self.pixels = points * scale

    @classmethod
    def from_tensor(cls, landmarks: LandmarkInput) -> "LandmarkFrame":
        """
        Validate raw landmarks and build a frame.

        Args:
            landmarks: (N, 3) tensor, array or nested list with N >= 478

        Returns:
            LandmarkFrame with float64 coordinates

        Raises:
            MalformedFrameError: If the layout is wrong, too few points are
                present, or any coordinate is not finite
        """
        try:
            points = torch.as_tensor(landmarks, dtype=torch.float64)
        except (TypeError, ValueError, RuntimeError) as e:
            raise MalformedFrameError(f"Landmarks are not numeric: {e}") from e

        if points.dim() != 2 or points.shape[1] < 3:
            raise MalformedFrameError(
                f"Expected landmarks of shape (N, 3), got {tuple(points.shape)}"
            )
        if points.shape[0] < MIN_LANDMARKS:
            raise MalformedFrameError(
                f"Expected at least {MIN_LANDMARKS} landmarks, got {points.shape[0]}"
            )
        points = points[:, :3]
        if not bool(torch.isfinite(points).all()):
            raise MalformedFrameError("Landmarks contain non-finite coordinates")

        return cls(points)

    def __len__(self) -> int:
        return self.points.shape[0]

    def normalized(self, index: int) -> torch.Tensor:
        """Normalized (x, y, z) of one landmark."""
        return self.points[index]

    def pixel(self, index: int) -> torch.Tensor:
        """Reference-frame (x, y, z) of one landmark."""
        return self.pixels[index]
