import math

import pytest

from gaze_tracker.calibration.regression import CalibrationModel
from gaze_tracker.core.config import TrackerConfig
from gaze_tracker.core.landmarks import LandmarkFrame
from gaze_tracker.core.tracking_mode import TrackingMode
from gaze_tracker.core.types import EyePosition, GazeVector, HeadRotation, IrisOffset
from gaze_tracker.mappers.eye_position import EyePositionSmoother, measure_eye_position
from gaze_tracker.mappers.gaze_fusion import GazeFusion, eye_scale
from gaze_tracker.mappers.screen_mapper import ScreenMapper


def test_eye_scale(face):
    # Outer corners 0.2 apart, inner corners 0.08 apart
    assert eye_scale(LandmarkFrame.from_tensor(face())) == pytest.approx(0.14)


def test_eye_angles_zero_offset():
    fusion = GazeFusion(TrackerConfig())
    assert fusion.eye_angles(IrisOffset(), IrisOffset(), 0.14) == GazeVector(0.0, 0.0)


def test_eye_angles_average_both_eyes():
    fusion = GazeFusion(TrackerConfig())
    radius = 0.14 * 0.4
    eye = fusion.eye_angles(IrisOffset(6.4, 0.0), IrisOffset(0.0, 4.8), 0.14)
    assert eye.yaw == pytest.approx(math.atan2(0.01, radius) / 2)
    assert eye.pitch == pytest.approx(math.atan2(0.01, radius) / 2)


def test_fuse_head_mode_ignores_eyes():
    fusion = GazeFusion(TrackerConfig())
    gaze = fusion.fuse(HeadRotation(0.1, 0.2, 0.3), GazeVector(0.5, 0.5), TrackingMode.HEAD)
    assert gaze == GazeVector(0.1, 0.2)


def test_fuse_iris_mode_adds_scaled_eye_angles():
    fusion = GazeFusion(TrackerConfig())
    gaze = fusion.fuse(HeadRotation(0.1, 0.2, 0.0), GazeVector(0.02, 0.01), TrackingMode.IRIS)
    assert gaze.yaw == pytest.approx(0.1 + 0.02 * 5)
    assert gaze.pitch == pytest.approx(0.2 - 0.01 * 5)


def test_recenter_captures_next_rotation():
    fusion = GazeFusion(TrackerConfig())
    first = fusion.apply_offset(HeadRotation(0.3, -0.1, 0.05))
    assert first == HeadRotation(0.3, -0.1, 0.05)

    fusion.request_recenter()
    tared = fusion.apply_offset(HeadRotation(0.3, -0.1, 0.05))
    assert tared == HeadRotation(0.0, 0.0, 0.0)
    assert not fusion.recenter_pending

    later = fusion.apply_offset(HeadRotation(0.5, -0.1, 0.05))
    assert later.yaw == pytest.approx(0.2)


def test_recenter_wraps_across_the_seam():
    fusion = GazeFusion(TrackerConfig())
    fusion.request_recenter()
    fusion.apply_offset(HeadRotation(0.0, 0.0, 3.0))
    relative = fusion.apply_offset(HeadRotation(0.0, 0.0, -3.0))
    assert relative.roll == pytest.approx(2 * math.pi - 6.0)


def test_measure_eye_position(face):
    position = measure_eye_position(LandmarkFrame.from_tensor(face()), speed_gain=2.0)
    assert position.x == pytest.approx(0.0, abs=1e-9)
    assert position.y == pytest.approx((240 - 0.585 * 480) * 2.0)
    assert position.z == pytest.approx(700 + (250 - 128) * 0.8)


def test_eye_position_follows_the_head(face):
    position = measure_eye_position(LandmarkFrame.from_tensor(face(shift=(0.1, 0.0))), speed_gain=2.0)
    assert position.x == pytest.approx(64 * 2.0)


def test_eye_position_depth_floor(face):
    points = face()
    points[33, 0] = 0.0
    points[263, 0] = 1.0
    assert measure_eye_position(LandmarkFrame.from_tensor(points), 2.0).z == 450.0


def test_smoother_blends_and_decays():
    smoother = EyePositionSmoother(TrackerConfig())
    updated = smoother.update(EyePosition(100.0, 40.0, 600.0))
    assert updated.x == pytest.approx(25.0)
    assert updated.y == pytest.approx(10.0)
    assert updated.z == pytest.approx(750.0)

    decayed = smoother.decay()
    assert decayed.x == pytest.approx(25.0 * 0.95)
    assert decayed.z == pytest.approx(750.0 * 0.95 + 800.0 * 0.05)

    assert smoother.reset() == EyePosition.neutral()


def test_screen_mapper_without_model():
    mapper = ScreenMapper()
    assert mapper.to_screen(GazeVector(0.1, 0.1)) is None


def test_screen_mapper_applies_and_clamps():
    model = CalibrationModel(
        coefficients_x=(1.0, 0.0, 0.0, 0.0, 0.0, 0.5),
        coefficients_y=(0.0, 1.0, 0.0, 0.0, 0.0, 0.5),
    )
    mapper = ScreenMapper(model)
    assert mapper.to_screen(GazeVector(0.2, -0.1)) == pytest.approx((0.7, 0.4))
    assert mapper.to_screen(GazeVector(2.0, -2.0)) == (1.0, 0.0)
    assert mapper.to_screen(GazeVector(float("nan"), 0.0)) is None


def test_view_plane_scales_and_clamps():
    mapper = ScreenMapper(aspect=2.0)
    assert mapper.to_view_plane(GazeVector(0.1, -0.2)) == pytest.approx((7.0, -14.0))
    assert mapper.to_view_plane(GazeVector(5.0, 5.0)) == (90.0, 45.0)
    assert mapper.to_view_plane(GazeVector(float("nan"), float("nan"))) == (0.0, 0.0)
