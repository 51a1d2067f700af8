import pytest
import torch

from gaze_tracker.core.config import TrackerConfig
from gaze_tracker.core.types import HeadRotation, IrisOffset
from gaze_tracker.filters.filter_bank import FilterBank
from gaze_tracker.filters.kalman import ConstantVelocityKalmanFilter, invert_2x2
from gaze_tracker.filters.one_euro import OneEuroFilter, smoothing_factor


def test_one_euro_first_sample_passes_through():
    f = OneEuroFilter(min_cutoff=0.1, beta=5.0)
    assert f.filter(1.25, 0.0) == 1.25


def test_one_euro_constant_signal_is_unchanged():
    f = OneEuroFilter(min_cutoff=0.1, beta=5.0)
    for i in range(20):
        assert f.filter(0.7, i / 30) == pytest.approx(0.7)


def test_one_euro_smooths_a_step():
    f = OneEuroFilter(min_cutoff=0.1, beta=0.0)
    f.filter(0.0, 0.0)
    out = f.filter(1.0, 1 / 30)
    expected = smoothing_factor(0.1, 1 / 30)
    assert out == pytest.approx(expected)
    assert 0.0 < out < 1.0


def test_one_euro_higher_beta_reduces_lag():
    slow = OneEuroFilter(min_cutoff=0.1, beta=0.0)
    fast = OneEuroFilter(min_cutoff=0.1, beta=5.0)
    for f in (slow, fast):
        f.filter(0.0, 0.0)
    assert fast.filter(1.0, 0.1) > slow.filter(1.0, 0.1)


def test_one_euro_ignores_non_increasing_timestamps():
    f = OneEuroFilter(min_cutoff=1.0, beta=0.0)
    f.filter(0.0, 1.0)
    first = f.filter(1.0, 1.1)

    assert f.filter(5.0, 1.1) == first
    assert f.filter(5.0, 0.5) == first
    assert f.t_prev == 1.1


def test_one_euro_retune_applies_to_next_sample():
    f = OneEuroFilter(min_cutoff=0.1, beta=0.0)
    f.filter(0.0, 0.0)
    before = f.filter(1.0, 0.1)

    f.set_parameters(min_cutoff=10.0)
    assert f.x_prev == before
    assert before < 0.1
    assert f.filter(1.0, 0.2) > 0.5


@pytest.mark.parametrize("kwargs", [{"min_cutoff": 0.0}, {"min_cutoff": -1.0}, {"beta": -0.1}])
def test_one_euro_rejects_invalid_parameters(kwargs):
    with pytest.raises(ValueError):
        OneEuroFilter().set_parameters(**kwargs)


def test_one_euro_reset_reseeds():
    f = OneEuroFilter()
    f.filter(0.0, 0.0)
    f.filter(1.0, 0.1)
    f.reset()
    assert f.filter(3.0, 0.2) == 3.0


def test_kalman_first_measurement_seeds_state():
    kf = ConstantVelocityKalmanFilter()
    assert kf.update(4.0, -2.0) == (4.0, -2.0)
    assert kf.initialized


def test_kalman_converges_on_constant_measurement():
    kf = ConstantVelocityKalmanFilter()
    kf.update(0.0, 0.0)
    for _ in range(200):
        x, y = kf.update(10.0, -5.0)
    assert x == pytest.approx(10.0, abs=1e-2)
    assert y == pytest.approx(-5.0, abs=1e-2)


def test_kalman_output_lies_between_prediction_and_measurement():
    kf = ConstantVelocityKalmanFilter()
    kf.update(0.0, 0.0)
    x, y = kf.update(1.0, 1.0)
    assert 0.0 < x < 1.0
    assert 0.0 < y < 1.0


def test_kalman_tracks_constant_velocity():
    kf = ConstantVelocityKalmanFilter()
    for i in range(100):
        x, _ = kf.update(float(i), 0.0)
    assert x == pytest.approx(99.0, abs=0.1)


def test_kalman_skips_correction_when_innovation_covariance_is_singular():
    kf = ConstantVelocityKalmanFilter()
    kf.update(0.0, 0.0)
    kf.update(1.0, 1.0)

    # Force S = H P H^T + R to zero so the correction cannot be computed
    kf.P = torch.zeros(4, 4, dtype=torch.float64)
    kf.Q = torch.zeros(4, 4, dtype=torch.float64)
    kf.R = torch.zeros(2, 2, dtype=torch.float64)
    predicted = (kf.F @ kf.x)[:2].tolist()

    assert kf.update(50.0, -50.0) == pytest.approx(tuple(predicted))


@pytest.mark.parametrize("noise", [(0.0, 0.1), (0.01, 0.0), (0.0, 0.0), (-0.01, 0.1)])
def test_kalman_rejects_non_positive_noise(noise):
    with pytest.raises(ValueError):
        ConstantVelocityKalmanFilter(*noise)


def test_invert_2x2():
    m = torch.tensor([[2.0, 1.0], [1.0, 3.0]], dtype=torch.float64)
    inv = invert_2x2(m)
    assert torch.allclose(inv @ m, torch.eye(2, dtype=torch.float64))


def test_invert_2x2_singular_returns_none():
    m = torch.tensor([[1.0, 2.0], [2.0, 4.0]], dtype=torch.float64)
    assert invert_2x2(m) is None


def test_filter_bank_channels_are_independent():
    bank = FilterBank(TrackerConfig())
    bank.filter_rotation(HeadRotation(0.1, 0.2, 0.3), 0.0)
    out = bank.filter_rotation(HeadRotation(0.1, 0.2, 0.3), 0.1)
    assert out == HeadRotation(pytest.approx(0.1), pytest.approx(0.2), pytest.approx(0.3))

    right, left = bank.filter_iris(IrisOffset(1.0, 2.0), IrisOffset(-1.0, -2.0))
    assert right == IrisOffset(1.0, 2.0)
    assert left == IrisOffset(-1.0, -2.0)


def test_filter_bank_set_tuning_retunes_all_rotation_axes():
    bank = FilterBank(TrackerConfig())
    bank.set_tuning(min_cutoff=2.0, beta=0.5)
    for f in bank.rotation_filters:
        assert f.min_cutoff == 2.0
        assert f.beta == 0.5


def test_filter_bank_reset():
    bank = FilterBank(TrackerConfig())
    bank.filter_rotation(HeadRotation(1.0, 1.0, 1.0), 0.0)
    bank.filter_iris(IrisOffset(1.0, 1.0), IrisOffset(1.0, 1.0))
    bank.reset()
    assert bank.yaw.x_prev is None
    assert not bank.right_eye.initialized
    assert not bank.left_eye.initialized
