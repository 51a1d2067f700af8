import math

import pytest
import torch

from gaze_tracker.core.config import TrackerConfig
from gaze_tracker.core.errors import MalformedFrameError
from gaze_tracker.core.landmarks import LandmarkFrame
from gaze_tracker.estimators.blink import EyeBlinkAnalyzer, eye_aspect_ratio
from gaze_tracker.estimators.iris import IrisOffsetTracker, iris_offset
from gaze_tracker.estimators.pose import PoseEstimator, euler_yxz
from gaze_tracker.filters.filter_bank import FilterBank


def frame_of(points):
    return LandmarkFrame.from_tensor(points)


# ---------------------------------------------------------------------------
# LandmarkFrame
# ---------------------------------------------------------------------------

def test_frame_rejects_too_few_points():
    with pytest.raises(MalformedFrameError):
        LandmarkFrame.from_tensor(torch.zeros(468, 3))


def test_frame_rejects_non_finite_points(face):
    points = face()
    points[10, 0] = float("nan")
    with pytest.raises(MalformedFrameError):
        LandmarkFrame.from_tensor(points)


def test_frame_rejects_wrong_shape():
    with pytest.raises(MalformedFrameError):
        LandmarkFrame.from_tensor(torch.zeros(478, 2))


def test_frame_pixel_space(face):
    frame = frame_of(face())
    assert frame.pixel(33).tolist() == pytest.approx([256.0, 216.0, 0.0])
    assert frame.pixel(1)[2].item() == pytest.approx(-0.05 * 640)


# ---------------------------------------------------------------------------
# Pose
# ---------------------------------------------------------------------------

def test_frontal_face_has_zero_yaw(face):
    rotation = PoseEstimator().estimate(frame_of(face()))
    assert rotation.yaw == pytest.approx(0.0, abs=1e-9)


@pytest.mark.parametrize("angle", [0.2, -0.3, 0.6])
def test_turning_the_head_changes_yaw(face, angle):
    rotation = PoseEstimator().estimate(frame_of(face(yaw=angle)))
    assert rotation.yaw == pytest.approx(-angle, abs=1e-9)


def test_yaw_does_not_leak_into_pitch(face):
    estimator = PoseEstimator()
    frontal = estimator.estimate(frame_of(face()))
    turned = estimator.estimate(frame_of(face(yaw=0.4)))
    assert turned.pitch == pytest.approx(frontal.pitch, abs=1e-9)


def test_pose_is_translation_invariant(face):
    estimator = PoseEstimator()
    a = estimator.estimate(frame_of(face(yaw=0.25)))
    b = estimator.estimate(frame_of(face(yaw=0.25, shift=(0.1, -0.05))))
    assert b.yaw == pytest.approx(a.yaw, abs=1e-9)
    assert b.pitch == pytest.approx(a.pitch, abs=1e-9)


def test_face_basis_is_orthonormal(face):
    basis = PoseEstimator().face_basis(frame_of(face(yaw=0.3)))
    assert torch.allclose(basis.T @ basis, torch.eye(3, dtype=torch.float64), atol=1e-12)


def test_coincident_anchors_are_malformed(face):
    points = face()
    points[263] = points[33]
    with pytest.raises(MalformedFrameError):
        PoseEstimator().estimate(frame_of(points))


def test_euler_identity():
    assert euler_yxz(torch.eye(3, dtype=torch.float64)) == pytest.approx((0.0, 0.0, 0.0))


def test_euler_gimbal_lock():
    matrix = torch.tensor([
        [1.0, 0.0, 0.0],
        [0.0, 0.0, 1.0],
        [0.0, -1.0, 0.0],
    ], dtype=torch.float64)
    yaw, pitch, roll = euler_yxz(matrix)
    assert pitch == pytest.approx(-math.pi / 2)
    assert yaw == pytest.approx(0.0)
    assert roll == 0.0


# ---------------------------------------------------------------------------
# Blink
# ---------------------------------------------------------------------------

def test_eye_aspect_ratio(face):
    frame = frame_of(face(ear=0.3))
    assert eye_aspect_ratio(frame, [33, 160, 158, 133, 153, 144]) == pytest.approx(0.3)
    assert eye_aspect_ratio(frame, [362, 385, 387, 263, 373, 380]) == pytest.approx(0.3)


def test_open_eyes_are_not_blinking(face):
    state = EyeBlinkAnalyzer().analyze(frame_of(face(ear=0.3)))
    assert not state.is_blinking
    assert state.strength == pytest.approx(0.3)


def test_closed_eyes_are_blinking(face):
    state = EyeBlinkAnalyzer().analyze(frame_of(face(ear=0.1)))
    assert state.is_blinking
    assert state.left_ear == pytest.approx(0.1)
    assert state.right_ear == pytest.approx(0.1)


def test_blink_threshold_is_strict():
    analyzer = EyeBlinkAnalyzer(threshold=0.18)
    assert not analyzer.classify(0.18, 0.18).is_blinking
    assert analyzer.classify(0.17, 0.18).is_blinking


def test_degenerate_eye_is_not_a_blink(face):
    points = face(ear=0.1)
    points[133] = points[33]
    state = EyeBlinkAnalyzer().analyze(frame_of(points))
    assert not state.is_blinking
    assert state.right_ear == 0.0
    assert state.strength == 0.0


# ---------------------------------------------------------------------------
# Iris
# ---------------------------------------------------------------------------

def test_iris_offset_in_pixels(face):
    frame = frame_of(face(iris=(0.01, -0.02)))
    right = iris_offset(frame, "right")
    left = iris_offset(frame, "left")
    assert (right.x, right.y) == pytest.approx((6.4, -9.6))
    assert (left.x, left.y) == pytest.approx((6.4, -9.6))


def test_iris_offsets_are_held_while_blinking(face):
    tracker = IrisOffsetTracker()
    filters = FilterBank(TrackerConfig())

    open_right, _ = tracker.update(frame_of(face(iris=(0.01, 0.0))), False, filters)
    held_right, _ = tracker.update(frame_of(face(iris=(-0.02, 0.01), ear=0.1)), True, filters)

    assert held_right == open_right
    assert filters.right_eye.position == pytest.approx((open_right.x, open_right.y))


def test_iris_average(face):
    tracker = IrisOffsetTracker()
    tracker.update(frame_of(face(iris=(0.01, 0.02))), False, FilterBank(TrackerConfig()))
    assert (tracker.average.x, tracker.average.y) == pytest.approx((6.4, 9.6))
