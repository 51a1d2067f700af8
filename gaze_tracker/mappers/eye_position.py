"""Head position proxy for camera parallax, smoothed by EMA."""

from ..core.config import TrackerConfig
from ..core.constants import (
    EYE_POSITION_BASE_DEPTH,
    EYE_POSITION_DEPTH_GAIN,
    EYE_POSITION_LANDMARKS,
    EYE_POSITION_MIN_DEPTH,
    EYE_POSITION_REFERENCE_FACE_WIDTH,
    REFERENCE_HEIGHT,
    REFERENCE_WIDTH,
)
from ..core.landmarks import LandmarkFrame
from ..core.types import EyePosition


def measure_eye_position(frame: LandmarkFrame, speed_gain: float) -> EyePosition:
    """
    Unsmoothed eye position from six stable face points.

    x/y are the offset of the point centroid from the frame center (y up),
    scaled by ``speed_gain``. z grows as the face shrinks in the image,
    floored at the minimum viewing distance.
    """
    points = frame.pixels[EYE_POSITION_LANDMARKS, :2]
    center = points.mean(dim=0)
    face_width = (points[:, 0].max() - points[:, 0].min()).item()

    x = (center[0].item() - REFERENCE_WIDTH / 2) * speed_gain
    y = (REFERENCE_HEIGHT / 2 - center[1].item()) * speed_gain
    z = EYE_POSITION_BASE_DEPTH + (EYE_POSITION_REFERENCE_FACE_WIDTH - face_width) * EYE_POSITION_DEPTH_GAIN

    return EyePosition(x=x, y=y, z=max(EYE_POSITION_MIN_DEPTH, z))


class EyePositionSmoother:
    """
    Exponential moving average over eye positions.

    Reacts with ``position_alpha`` while a face is present and drifts back to
    the neutral position with the smaller ``decay_alpha`` while it is absent,
    so momentary detection loss does not snap the camera.
    """

    def __init__(self, config: TrackerConfig):
        self.config = config
        self.position = EyePosition.neutral()

    def update(self, measured: EyePosition) -> EyePosition:
        self.position = self.position.blend(measured, self.config.position_alpha)
        return self.position

    def decay(self) -> EyePosition:
        self.position = self.position.blend(EyePosition.neutral(), self.config.decay_alpha)
        return self.position

    def reset(self) -> EyePosition:
        self.position = EyePosition.neutral()
        return self.position
