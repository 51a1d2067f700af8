"""MediaPipe FaceLandmarker adapter producing 478-point landmark frames."""

import logging
from typing import Optional
from pathlib import Path
import numpy as np
import torch
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from ..core.base_detector import BaseDetector

logger = logging.getLogger(__name__)


class MediaPipeDetector(BaseDetector):
    """
    MediaPipe FaceLandmarker detector using the Tasks API.

    Provides 468 face landmarks + 10 iris landmarks (5 per eye) with 3D
    coordinates, which is the layout the tracking core expects:
    - x, y are normalized to [0, 1] relative to image dimensions
    - z represents depth on roughly the x scale (smaller = closer to camera)

    The ``face_landmarker.task`` model file must already exist locally.
    """

    def __init__(self,
                 model_path: str,
                 min_detection_confidence: float = 0.5,
                 min_tracking_confidence: float = 0.5,
                 fps: float = 30.0,
                 device: str = "cpu"):
        """
        Initialize MediaPipe FaceLandmarker in VIDEO running mode.

        Args:
            model_path: Path to the face_landmarker.task model
            min_detection_confidence: Minimum confidence for face detection
            min_tracking_confidence: Minimum confidence for landmark tracking
            fps: Frame rate used to derive detector timestamps
            device: Device for returned tensors
        """
        super().__init__(device)

        model_file = Path(model_path)
        if not model_file.exists():
            raise FileNotFoundError(f"MediaPipe model not found: {model_path}")

        self.frame_counter = 0
        self.frame_time_ms = 1000.0 / fps

        base_options = python.BaseOptions(model_asset_path=str(model_file))
        options = vision.FaceLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_faces=1,
            min_face_detection_confidence=min_detection_confidence,
            min_face_presence_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
            output_face_blendshapes=False,
            output_facial_transformation_matrixes=False
        )

        self.landmarker = vision.FaceLandmarker.create_from_options(options)
        logger.info("Loaded MediaPipe FaceLandmarker from %s", model_file)

    def detect(self, image: np.ndarray) -> Optional[torch.Tensor]:
        """
        Detect 478 3D facial landmarks in a single RGB image.

        Args:
            image: RGB image (H, W, 3), uint8

        Returns:
            (478, 3) landmarks tensor, or None if no complete face was found
        """
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(image))

        # VIDEO mode requires monotonically increasing timestamps
        timestamp_ms = int(self.frame_counter * self.frame_time_ms)
        self.frame_counter += 1

        result = self.landmarker.detect_for_video(mp_image, timestamp_ms)
        if not result.face_landmarks:
            return None

        face_landmarks = result.face_landmarks[0]
        landmarks = np.array(
            [[lm.x, lm.y, lm.z] for lm in face_landmarks],
            dtype=np.float32,
        )

        if landmarks.shape[0] < self.get_num_landmarks():
            logger.debug("Dropping face with %d landmarks (iris refinement missing?)", landmarks.shape[0])
            return None

        return self.postprocess_landmarks(landmarks)

    def set_fps(self, fps: float):
        """Set the frame rate for timestamp calculation."""
        self.frame_time_ms = 1000.0 / fps

    def reset_frame_counter(self):
        """Reset frame counter for a new stream."""
        self.frame_counter = 0

    def close(self):
        """Clean up MediaPipe resources."""
        if hasattr(self, 'landmarker'):
            self.landmarker.close()

    def __enter__(self) -> "MediaPipeDetector":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
