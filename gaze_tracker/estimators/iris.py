"""Per-eye iris offset measurement with blink hold."""

from typing import Tuple

from ..core.constants import IRIS_LANDMARKS
from ..core.landmarks import LandmarkFrame
from ..core.types import IrisOffset
from ..filters.filter_bank import FilterBank


def iris_offset(frame: LandmarkFrame, side: str) -> IrisOffset:
    """
    Iris center minus the eye's anchor corner, in reference-frame pixels.

    Args:
        frame: Landmark frame
        side: "left" or "right" (subject's perspective)
    """
    indices = IRIS_LANDMARKS[side]
    delta = frame.pixel(indices["center"]) - frame.pixel(indices["anchor"])
    return IrisOffset(x=delta[0].item(), y=delta[1].item())


class IrisOffsetTracker:
    """
    Measures both iris offsets and smooths them through the filter bank.

    While the eyes are closed the iris landmarks follow the lid rather than
    the eyeball, so blinking frames are not fed to the filters and the last
    filtered offsets are held instead.
    """

    def __init__(self):
        self.last_right = IrisOffset()
        self.last_left = IrisOffset()

    def measure(self, frame: LandmarkFrame) -> Tuple[IrisOffset, IrisOffset]:
        """Raw (right, left) offsets for one frame."""
        return iris_offset(frame, "right"), iris_offset(frame, "left")

    def update(self,
               frame: LandmarkFrame,
               is_blinking: bool,
               filters: FilterBank) -> Tuple[IrisOffset, IrisOffset]:
        """
        Filter this frame's offsets, or hold the previous ones while blinking.

        Args:
            frame: Landmark frame
            is_blinking: Blink state for this frame
            filters: Filter bank owning the per-eye Kalman filters

        Returns:
            Filtered (right, left) offsets
        """
        if not is_blinking:
            right, left = self.measure(frame)
            self.last_right, self.last_left = filters.filter_iris(right, left)
        return self.last_right, self.last_left

    @property
    def average(self) -> IrisOffset:
        """Mean of the two held offsets."""
        return IrisOffset(
            x=(self.last_right.x + self.last_left.x) / 2,
            y=(self.last_right.y + self.last_left.y) / 2,
        )

    def reset(self):
        self.last_right = IrisOffset()
        self.last_left = IrisOffset()
