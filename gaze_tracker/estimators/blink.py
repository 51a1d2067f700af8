"""Eye aspect ratio and blink detection."""

import logging
from typing import List, Optional
import torch

from ..core.constants import DEFAULT_BLINK_THRESHOLD, EAR_LANDMARKS, EAR_MIN_WIDTH
from ..core.landmarks import LandmarkFrame
from ..core.types import BlinkState

logger = logging.getLogger(__name__)


def eye_aspect_ratio(frame: LandmarkFrame, indices: List[int]) -> Optional[float]:
    """
    Compute the Eye Aspect Ratio (EAR) for one eye.

    EAR = (||p1 - p5|| + ||p2 - p4||) / (2 * ||p0 - p3||), using 3D distances
    between normalized landmarks.

    Args:
        frame: Landmark frame
        indices: Six landmark indices ordered [corner, upper1, upper2, corner, lower2, lower1]

    Returns:
        EAR (typical open ~0.25-0.35, closed < 0.15), or None if the eye
        corners coincide
    """
    p = [frame.normalized(i) for i in indices]

    vertical_1 = torch.linalg.norm(p[1] - p[5])
    vertical_2 = torch.linalg.norm(p[2] - p[4])
    horizontal = torch.linalg.norm(p[0] - p[3])

    if horizontal.item() < EAR_MIN_WIDTH:
        return None

    return ((vertical_1 + vertical_2) / (2.0 * horizontal)).item()


class EyeBlinkAnalyzer:
    """Classifies blinks by thresholding the mean EAR of both eyes."""

    def __init__(self, threshold: float = DEFAULT_BLINK_THRESHOLD):
        """
        Args:
            threshold: Mean EAR strictly below this counts as a blink.
                       Kept low to avoid false positives, since a blink
                       freezes iris tracking downstream.
        """
        self.threshold = threshold

    def classify(self, left_ear: float, right_ear: float) -> BlinkState:
        """Apply the blink threshold to a pair of EAR values."""
        average = (left_ear + right_ear) / 2
        return BlinkState(
            is_blinking=average < self.threshold,
            left_ear=left_ear,
            right_ear=right_ear,
            strength=average,
        )

    def analyze(self, frame: LandmarkFrame) -> BlinkState:
        """
        Compute per-eye EAR and blink state for one frame.

        A degenerate eye (coincident corners) reports EAR 0.0 and the frame
        is classified as not blinking, so iris tracking is never frozen by a
        bad detection.
        """
        right_ear = eye_aspect_ratio(frame, EAR_LANDMARKS["right"])
        left_ear = eye_aspect_ratio(frame, EAR_LANDMARKS["left"])

        if right_ear is None or left_ear is None:
            logger.debug("Degenerate eye corners, skipping blink classification")
            return BlinkState(
                is_blinking=False,
                left_ear=left_ear or 0.0,
                right_ear=right_ear or 0.0,
                strength=0.0,
            )

        return self.classify(left_ear, right_ear)
