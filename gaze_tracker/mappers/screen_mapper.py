"""Maps fused gaze angles to screen coordinates."""

import math
from typing import Optional, Tuple

from ..calibration.regression import CalibrationModel
from ..core.constants import VIEW_PLANE_HALF_HEIGHT, VIEW_PLANE_SCALE
from ..core.types import GazeVector


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class ScreenMapper:
    """
    Applies a fitted calibration model to gaze, or falls back to a fixed
    angle-to-plane scaling when no model is available.
    """

    def __init__(self, model: Optional[CalibrationModel] = None, aspect: float = 16 / 9):
        """
        Args:
            model: Fitted calibration model, or None
            aspect: Viewport width / height for the view-plane fallback
        """
        if not aspect > 0:
            raise ValueError(f"aspect must be > 0, got {aspect}")
        self.model = model
        self.aspect = aspect

    def to_screen(self, gaze: GazeVector) -> Optional[Tuple[float, float]]:
        """
        Normalized screen position for a gaze, clamped to [0, 1].

        Returns:
            (x, y) with (0, 0) at the top-left, or None without a model or
            for a non-finite gaze
        """
        if self.model is None or not gaze.is_finite():
            return None
        x, y = self.model.predict(gaze.yaw, gaze.pitch)
        return _clamp(x, 0.0, 1.0), _clamp(y, 0.0, 1.0)

    def to_view_plane(self, gaze: GazeVector) -> Tuple[float, float]:
        """
        Cursor position on a plane in front of the camera, in scene units.

        Radians are scaled linearly and clamped so the cursor stays inside
        the visible field; NaN angles count as 0.
        """
        yaw = 0.0 if math.isnan(gaze.yaw) else gaze.yaw
        pitch = 0.0 if math.isnan(gaze.pitch) else gaze.pitch

        max_y = VIEW_PLANE_HALF_HEIGHT
        max_x = VIEW_PLANE_HALF_HEIGHT * self.aspect

        return (
            _clamp(yaw * VIEW_PLANE_SCALE, -max_x, max_x),
            _clamp(pitch * VIEW_PLANE_SCALE, -max_y, max_y),
        )
