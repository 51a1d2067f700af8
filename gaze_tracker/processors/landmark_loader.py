"""Load recorded landmark sequences."""

from typing import Tuple, Iterator, Optional, Dict, Any, Union
from pathlib import Path
import logging
import torch

from .streaming_json_reader import StreamingJSONReader

logger = logging.getLogger(__name__)

LandmarkSample = Tuple[float, Optional[torch.Tensor]]


class LandmarkLoader:
    """Load recorded per-frame landmarks from JSON files."""

    @staticmethod
    def load_metadata(input_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Read recording metadata.

        Returns:
            Dict with fps, width, height and frame_count (None if unknown)

        Raises:
            ValueError: If fps is missing or not positive
        """
        with StreamingJSONReader(input_path) as reader:
            data = reader.get_metadata()

        fps = data.get('fps')
        if fps is None or float(fps) <= 0:
            raise ValueError(f"Recording {input_path} has no valid fps (got {fps})")

        frame_count = data.get('frame_count')
        return {
            'fps': float(fps),
            'width': int(data['width']) if data.get('width') is not None else None,
            'height': int(data['height']) if data.get('height') is not None else None,
            'frame_count': int(frame_count) if frame_count is not None else None,
        }

    @staticmethod
    def load_landmarks(input_path: Union[str, Path],
                       device: str = 'cpu') -> Tuple[Iterator[LandmarkSample], Dict[str, Any]]:
        """
        Load a landmark sequence from a JSON file using streaming.

        Frames with no face are stored as null and come back as None.

        Args:
            input_path: Input JSON file path
            device: Device to load tensors to

        Returns:
            Tuple of (iterator of (timestamp, landmarks) with timestamp =
            index / fps in seconds, metadata dict)
        """
        metadata = LandmarkLoader.load_metadata(input_path)
        logger.info(
            "Loading landmarks from %s (%s frames at %.1f fps)",
            input_path, metadata['frame_count'], metadata['fps'],
        )
        return LandmarkLoader._create_landmarks_iterator(Path(input_path), metadata['fps'], device), metadata

    @staticmethod
    def _create_landmarks_iterator(input_path: Path, fps: float, device: str) -> Iterator[LandmarkSample]:
        with StreamingJSONReader(input_path) as reader:
            for index, frame_landmarks in enumerate(reader.read_items()):
                timestamp = index / fps
                if frame_landmarks is None:
                    yield timestamp, None
                else:
                    yield timestamp, torch.tensor(frame_landmarks, dtype=torch.float64, device=device)
