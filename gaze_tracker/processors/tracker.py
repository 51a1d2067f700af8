"""Per-session tracking orchestrator."""

from typing import Iterable, Iterator, Optional, Tuple, Union
import logging
import time

from ..calibration.regression import CalibrationModel
from ..calibration.session import CalibrationSession, CalibrationState
from ..core.config import TrackerConfig
from ..core.errors import MalformedFrameError
from ..core.landmarks import LandmarkFrame, LandmarkInput
from ..core.tracking_mode import TrackingMode
from ..core.types import TrackingOutputs
from ..estimators.blink import EyeBlinkAnalyzer
from ..estimators.iris import IrisOffsetTracker
from ..estimators.pose import PoseEstimator
from ..filters.filter_bank import FilterBank
from ..mappers.eye_position import EyePositionSmoother, measure_eye_position
from ..mappers.gaze_fusion import GazeFusion, eye_scale

logger = logging.getLogger(__name__)

# Length of the rolling FPS window in seconds
FPS_WINDOW = 1.0


class HeadTracker:
    """
    Owns every piece of mutable tracking state for one session and runs the
    per-frame pipeline:

        blink -> pose -> tare offset -> rotation filters -> iris filters
        -> eye angles -> gaze fusion -> eye position

    Frames are processed synchronously, one at a time. Nothing in the
    per-frame path raises: frames that are missing or malformed are treated
    as "no face", which holds the last pose and lets the eye position drift
    back to neutral.
    """

    def __init__(self,
                 config: Optional[TrackerConfig] = None,
                 mode: Union[TrackingMode, str] = TrackingMode.HEAD,
                 calibration: Optional[CalibrationSession] = None,
                 enabled: bool = True):
        """
        Args:
            config: Tuning parameters, defaults to ``TrackerConfig()``
            mode: Initial tracking mode
            calibration: Calibration session to drive from gaze output
            enabled: Whether frames are processed from the start
        """
        self.config = config or TrackerConfig()
        self.mode = TrackingMode(mode)
        self.calibration = calibration or CalibrationSession()

        self.pose_estimator = PoseEstimator()
        self.blink_analyzer = EyeBlinkAnalyzer(self.config.blink_threshold)
        self.iris_tracker = IrisOffsetTracker()
        self.filters = FilterBank(self.config)
        self.fusion = GazeFusion(self.config)
        self.eye_position = EyePositionSmoother(self.config)

        self.outputs = TrackingOutputs()
        self._enabled = enabled
        self._frame_index = 0
        self._fps_count = 0
        self._fps_window_start: Optional[float] = None

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    @property
    def is_tracking(self) -> bool:
        return self._enabled

    def enable(self):
        self._enabled = True

    def disable(self):
        """Stop processing frames; the last outputs are kept as they are."""
        self._enabled = False

    def set_mode(self, mode: Union[TrackingMode, str]):
        """Switch between head-only and head+iris gaze."""
        mode = TrackingMode(mode)
        if mode is not self.mode:
            logger.info("Tracking mode: %s -> %s", self.mode.value, mode.value)
        self.mode = mode

    def set_filter_parameters(self,
                              min_cutoff: Optional[float] = None,
                              beta: Optional[float] = None,
                              speed_gain: Optional[float] = None):
        """
        Retune the tracker; applies from the next frame on.

        Raises:
            ValueError: If a value is out of range (nothing is changed)
        """
        config = self.config.replace(min_cutoff=min_cutoff, beta=beta, speed_gain=speed_gain)
        self.filters.set_tuning(min_cutoff, beta)
        self._apply_config(config)

    def recenter(self):
        """Use the next frame's head pose as the new neutral pose."""
        self.fusion.request_recenter()

    def reset_position(self):
        """Snap the eye position back to neutral and recenter on the next frame."""
        self.outputs.eye_position = self.eye_position.reset()
        self.fusion.request_recenter()

    def reset(self):
        """Clear all filter state, the tare baseline and the outputs."""
        self.filters.reset()
        self.iris_tracker.reset()
        self.fusion.clear_offset()
        self.eye_position.reset()
        self.outputs = TrackingOutputs()
        self._frame_index = 0
        self._fps_count = 0
        self._fps_window_start = None

    def start_calibration(self) -> CalibrationState:
        return self.calibration.start()

    def tick_calibration(self) -> CalibrationState:
        """Advance the calibration countdown by one step, independent of time."""
        return self.calibration.tick()

    def cancel_calibration(self) -> bool:
        return self.calibration.cancel()

    @property
    def calibration_model(self) -> Optional[CalibrationModel]:
        return self.calibration.model

    @calibration_model.setter
    def calibration_model(self, model: Optional[CalibrationModel]):
        self.calibration.set_model(model)

    # ------------------------------------------------------------------
    # Frame processing
    # ------------------------------------------------------------------

    def process_frame(self,
                      landmarks: Optional[LandmarkInput],
                      timestamp: Optional[float] = None) -> TrackingOutputs:
        """
        Run the pipeline on one frame.

        Args:
            landmarks: (N, 3) normalized landmarks with N >= 478, or None if
                       no face was detected
            timestamp: Frame time in seconds, defaults to ``time.monotonic()``

        Returns:
            The tracker's current outputs (the same object on every call)
        """
        if not self._enabled:
            return self.outputs

        if timestamp is None:
            timestamp = time.monotonic()
        self._update_fps(timestamp)
        self._frame_index += 1
        self.outputs.frame_index = self._frame_index

        try:
            frame = self._validate(landmarks)
            raw_rotation = self.pose_estimator.estimate(frame) if frame is not None else None
        except MalformedFrameError as e:
            logger.debug("Dropping frame %d: %s", self._frame_index, e)
            frame = raw_rotation = None

        if frame is None or raw_rotation is None:
            self.outputs.eye_position = self.eye_position.decay()
            self.outputs.face_detected = False
            return self.outputs

        blink = self.blink_analyzer.analyze(frame)

        relative = self.fusion.apply_offset(raw_rotation)
        rotation = self.filters.filter_rotation(relative, timestamp)

        right, left = self.iris_tracker.update(frame, blink.is_blinking, self.filters)
        eye = self.fusion.eye_angles(right, left, eye_scale(frame))
        gaze = self.fusion.fuse(rotation, eye, self.mode)

        eye_position = self.eye_position.update(measure_eye_position(frame, self.config.speed_gain))

        self.outputs.rotation = rotation
        self.outputs.blink = blink
        self.outputs.iris = self.iris_tracker.average
        self.outputs.gaze = gaze
        self.outputs.eye_position = eye_position
        self.outputs.face_detected = True

        if self.calibration.is_active:
            self.calibration.add_gaze(gaze)
            self.calibration.advance(timestamp)

        return self.outputs

    def process_stream(self,
                       frames: Iterable[Tuple[float, Optional[LandmarkInput]]]) -> Iterator[TrackingOutputs]:
        """
        Process ``(timestamp, landmarks)`` pairs lazily.

        Yields a snapshot copy of the outputs per frame so earlier results
        are not overwritten by later frames.
        """
        for timestamp, landmarks in frames:
            outputs = self.process_frame(landmarks, timestamp)
            yield TrackingOutputs(**vars(outputs))

    @staticmethod
    def _validate(landmarks: Optional[LandmarkInput]) -> Optional[LandmarkFrame]:
        if landmarks is None:
            return None
        return LandmarkFrame.from_tensor(landmarks)

    def _update_fps(self, timestamp: float):
        if self._fps_window_start is None:
            self._fps_window_start = timestamp
        self._fps_count += 1
        if timestamp - self._fps_window_start >= FPS_WINDOW:
            self.outputs.fps = self._fps_count
            self._fps_count = 0
            self._fps_window_start = timestamp

    def _apply_config(self, config: TrackerConfig):
        self.config = config
        self.fusion.config = config
        self.eye_position.config = config
