"""Base class for landmark sources."""

from abc import ABC, abstractmethod
from typing import Optional, Union
import numpy as np
import torch

from .constants import MIN_LANDMARKS


class BaseDetector(ABC):
    """
    Abstract base class for facial landmark sources.

    A detector turns one image into either a (N, 3) tensor of normalized
    landmarks for a single face, or None when no usable face is present.
    """

    def __init__(self, device: str = "cpu"):
        self.device = device

    @abstractmethod
    def detect(self, image: np.ndarray) -> Optional[torch.Tensor]:
        """
        Detect landmarks in the given image.

        Args:
            image: Input image as numpy array (H, W, 3) in RGB format

        Returns:
            Landmarks as torch tensor (N, 3) normalized to [0, 1], or None
        """
        pass

    def get_num_landmarks(self) -> int:
        """Return the number of landmarks this detector provides."""
        return MIN_LANDMARKS

    def postprocess_landmarks(self, landmarks: Union[np.ndarray, torch.Tensor]) -> Optional[torch.Tensor]:
        """
        Convert detector output to a float tensor on the configured device.

        Frames with fewer points than ``get_num_landmarks()`` are rejected
        rather than padded, so downstream code never indexes filler values.

        Args:
            landmarks: Raw (N, 3) landmarks already normalized to [0, 1]

        Returns:
            Landmarks tensor, or None if the frame is incomplete
        """
        if isinstance(landmarks, np.ndarray):
            landmarks = torch.from_numpy(landmarks)

        if landmarks.dim() != 2 or landmarks.shape[0] < self.get_num_landmarks():
            return None

        return landmarks.to(self.device).float()
