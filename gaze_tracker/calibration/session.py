"""Guided 9-point calibration procedure."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..core.constants import (
    CALIBRATION_COUNTDOWN,
    CALIBRATION_POINTS,
    CALIBRATION_TICK_INTERVAL,
)
from ..core.errors import InsufficientCalibrationDataError, SingularMatrixError
from ..core.types import GazeVector
from .regression import CalibrationModel, PolynomialRegression

logger = logging.getLogger(__name__)


class CalibrationState(Enum):
    """Calibration session states."""
    IDLE = "idle"
    AWAITING_POINT = "awaiting_point"
    SAMPLING = "sampling"
    AVERAGING = "averaging"
    FITTING = "fitting"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


# States from which a new session may be started
_RESTARTABLE = {
    CalibrationState.IDLE,
    CalibrationState.DONE,
    CalibrationState.FAILED,
    CalibrationState.CANCELLED,
}


@dataclass
class CalibrationPoint:
    """One screen target and the gaze samples collected while it was shown."""
    index: int
    target: Tuple[float, float]
    samples: List[GazeVector] = field(default_factory=list)
    average: Optional[GazeVector] = None


class CalibrationSession:
    """
    Drives the fixed 3x3 calibration procedure and fits the gaze model.

    Each point runs a countdown of discrete ticks. Gaze samples are collected
    while the countdown is on its last tick; the tick after that averages the
    samples and moves to the next point. After the last point the quadratic
    model is fit. A successful fit replaces the committed model; a failed
    fit or a cancellation leaves it untouched.

    Ticks come either from ``tick()`` or from ``advance(timestamp)``, which
    ticks at most once per ``tick_interval`` seconds. There is no timeout: a
    session that receives no ticks stays on its current point.
    """

    def __init__(self,
                 screen_points: Sequence[Tuple[float, float]] = CALIBRATION_POINTS,
                 countdown: int = CALIBRATION_COUNTDOWN,
                 tick_interval: float = CALIBRATION_TICK_INTERVAL,
                 regression: Optional[PolynomialRegression] = None):
        """
        Args:
            screen_points: Normalized screen targets in visiting order
            countdown: Ticks per point; sampling happens on the last one
            tick_interval: Seconds per tick for ``advance``
            regression: Solver used to fit the model
        """
        if countdown < 1:
            raise ValueError(f"countdown must be >= 1, got {countdown}")
        self.screen_points = list(screen_points)
        self.countdown_ticks = countdown
        self.tick_interval = tick_interval
        self.regression = regression or PolynomialRegression()

        self.state = CalibrationState.IDLE
        self.points: List[CalibrationPoint] = []
        self.current_index = -1
        self.countdown = 0

        self._model: Optional[CalibrationModel] = None
        self._latest_gaze: Optional[GazeVector] = None
        self._last_tick: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return self.state not in _RESTARTABLE

    @property
    def model(self) -> Optional[CalibrationModel]:
        """The last successfully fitted (or explicitly set) model."""
        return self._model

    def set_model(self, model: Optional[CalibrationModel]):
        """Replace the committed model."""
        self._model = model

    @property
    def current_point(self) -> Optional[CalibrationPoint]:
        if not self.is_active or self.current_index >= len(self.points):
            return None
        return self.points[self.current_index]

    def start(self) -> CalibrationState:
        """Begin a new session at the first point."""
        if self.is_active:
            raise RuntimeError(f"Calibration already running (state {self.state.value})")

        self.points = [
            CalibrationPoint(index=i, target=target)
            for i, target in enumerate(self.screen_points)
        ]
        self._latest_gaze = None
        self._last_tick = None
        logger.info("Calibration started with %d points", len(self.points))
        self._enter_point(0)
        return self.state

    def cancel(self) -> bool:
        """
        Abort a running session, discarding collected samples.

        Returns:
            True if a session was cancelled
        """
        if not self.is_active:
            return False
        logger.info("Calibration cancelled at point %d", self.current_index)
        self.points = []
        self.current_index = -1
        self.countdown = 0
        self.state = CalibrationState.CANCELLED
        return True

    def add_gaze(self, gaze: GazeVector) -> bool:
        """
        Offer a gaze sample to the session.

        The sample is kept only while the current point is sampling, but it
        is always remembered as the fallback for a point with no valid
        samples.

        Returns:
            True if the sample was appended to the current point
        """
        self._latest_gaze = gaze
        if self.state is not CalibrationState.SAMPLING:
            return False
        self.points[self.current_index].samples.append(gaze)
        return True

    def tick(self) -> CalibrationState:
        """Advance the countdown by one step."""
        if self.state not in (CalibrationState.AWAITING_POINT, CalibrationState.SAMPLING):
            return self.state

        if self.countdown <= 1:
            self._record_point()
        else:
            self.countdown -= 1
            if self.countdown <= 1:
                self.state = CalibrationState.SAMPLING
        return self.state

    def advance(self, timestamp: float) -> CalibrationState:
        """Tick once if ``tick_interval`` seconds passed since the last tick."""
        if not self.is_active:
            return self.state
        if self._last_tick is None:
            self._last_tick = timestamp
        elif timestamp - self._last_tick >= self.tick_interval:
            self._last_tick = timestamp
            self.tick()
        return self.state

    def _enter_point(self, index: int):
        self.current_index = index
        self.countdown = self.countdown_ticks
        self.state = CalibrationState.SAMPLING if self.countdown <= 1 else CalibrationState.AWAITING_POINT

    def _record_point(self):
        self.state = CalibrationState.AVERAGING
        point = self.points[self.current_index]
        point.average = self._average(point.samples)
        logger.debug(
            "Point %d: screen(%.2f, %.2f) -> gaze(%.4f, %.4f) from %d samples",
            point.index, point.target[0], point.target[1],
            point.average.yaw, point.average.pitch, len(point.samples),
        )

        if self.current_index + 1 < len(self.points):
            self._enter_point(self.current_index + 1)
        else:
            self._fit()

    def _average(self, samples: List[GazeVector]) -> GazeVector:
        valid = [s for s in samples if s.is_finite()]
        if not valid:
            fallback = self._latest_gaze or GazeVector()
            logger.debug("No valid samples for point %d, using latest gaze", self.current_index)
            return fallback
        return GazeVector(
            yaw=sum(s.yaw for s in valid) / len(valid),
            pitch=sum(s.pitch for s in valid) / len(valid),
        )

    def _fit(self):
        self.state = CalibrationState.FITTING
        inputs = [(p.average.yaw, p.average.pitch) for p in self.points]
        outputs = [p.target for p in self.points]

        try:
            model = self.regression.fit(inputs, outputs)
        except (SingularMatrixError, InsufficientCalibrationDataError) as e:
            logger.warning("Calibration failed: %s", e)
            self.state = CalibrationState.FAILED
            return

        self._model = model
        self.state = CalibrationState.DONE
        logger.info("Calibration complete")
