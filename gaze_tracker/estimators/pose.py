"""Head pose estimation from four facial anchor landmarks."""

from typing import Tuple
import math
import torch

from ..core.constants import POSE_LANDMARKS
from ..core.errors import MalformedFrameError
from ..core.landmarks import LandmarkFrame
from ..core.types import HeadRotation, wrap_angle

# Below this length an anchor difference vector has no usable direction
_MIN_AXIS_NORM = 1e-9


def _normalize(vector: torch.Tensor) -> torch.Tensor:
    norm = torch.linalg.norm(vector)
    if norm.item() < _MIN_AXIS_NORM:
        raise MalformedFrameError("Degenerate pose anchors (coincident landmarks)")
    return vector / norm


def euler_yxz(matrix: torch.Tensor) -> Tuple[float, float, float]:
    """
    Decompose a rotation matrix as R = Ry(yaw) @ Rx(pitch) @ Rz(roll).

    Args:
        matrix: 3x3 rotation matrix

    Returns:
        (yaw, pitch, roll) in radians
    """
    m = matrix.tolist()
    m11, m12, m13 = m[0]
    m21, m22, m23 = m[1]
    m31, m32, m33 = m[2]

    pitch = math.asin(-max(-1.0, min(1.0, m23)))
    if abs(m23) < 0.9999999:
        yaw = math.atan2(m13, m33)
        roll = math.atan2(m21, m22)
    else:
        # Gimbal lock: roll folds into yaw
        yaw = math.atan2(-m31, m11)
        roll = 0.0
    return yaw, pitch, roll


class PoseEstimator:
    """
    Estimates raw head rotation from nose, chin and outer eye corners.

    Anchors are taken in the 640x480 reference frame so the face-local basis
    is not skewed by the 4:3 normalization. The basis is right-handed:
    X runs from the subject's right eye to the left eye, Z is normal to the
    plane spanned by X and the chin-to-nose direction, Y completes the frame.
    """

    def face_basis(self, frame: LandmarkFrame) -> torch.Tensor:
        """
        Build the face-local rotation matrix with basis vectors as columns.

        Raises:
            MalformedFrameError: If anchor points coincide
        """
        nose = frame.pixel(POSE_LANDMARKS["nose"])
        chin = frame.pixel(POSE_LANDMARKS["chin"])
        left_eye = frame.pixel(POSE_LANDMARKS["left_eye_outer"])
        right_eye = frame.pixel(POSE_LANDMARKS["right_eye_outer"])

        face_x = _normalize(left_eye - right_eye)
        temp_up = _normalize(nose - chin)
        face_z = _normalize(torch.linalg.cross(face_x, temp_up))
        face_y = _normalize(torch.linalg.cross(face_z, face_x))

        return torch.stack([face_x, face_y, face_z], dim=1)

    def estimate(self, frame: LandmarkFrame) -> HeadRotation:
        """
        Estimate raw (pre-tare) head rotation for one frame.

        Args:
            frame: Validated landmark frame

        Returns:
            HeadRotation in radians with yaw in [-pi, pi]
        """
        yaw, pitch, roll = euler_yxz(self.face_basis(frame))

        # A frontal face decomposes to yaw = pi (camera forward); shift and
        # flip so that facing the camera reads as yaw 0 (face forward)
        fixed_yaw = -wrap_angle(yaw - math.pi)

        return HeadRotation(yaw=fixed_yaw, pitch=pitch, roll=roll)
