"""Streaming JSON recorder for tracking outputs and landmarks."""

from typing import Dict, Any, Optional, TextIO, Union
import json
from pathlib import Path

import torch

from ..core.types import TrackingOutputs

# Wide enough for any realistic frame count so the back-patch never overruns
_FRAME_COUNT_WIDTH = 12


class OutputRecorder:
    """
    Writes a ``{"<metadata>": ..., "frame_count": N, "data": [...]}``
    envelope item by item.

    ``frame_count`` is written as a padded placeholder and patched in place
    on close, so arbitrarily long recordings never sit in memory.
    """

    def __init__(self, output_path: Union[str, Path], metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Args:
            output_path: Output file path
            metadata: Top-level keys written before the data array
        """
        self.output_path: Path = Path(output_path)
        self.file: Optional[TextIO] = None
        self.metadata: Dict[str, Any] = metadata or {}
        self.first_item: bool = True
        self.frame_count: int = 0
        self.frame_count_position: int = 0

    def __enter__(self) -> 'OutputRecorder':
        self.file = open(self.output_path, 'w', encoding='utf-8')
        self.file.write('{\n')

        for key, value in self.metadata.items():
            if key != 'frame_count':
                self.file.write(f'  {json.dumps(key)}: {json.dumps(value)},\n')

        self.file.write('  "frame_count": ')
        self.frame_count_position = self.file.tell()
        self.file.write(f'{"null":<{_FRAME_COUNT_WIDTH}},\n')

        self.file.write('  "data": [\n')
        return self

    def __exit__(self, exc_type: Optional[type], exc_val: Optional[Exception], exc_tb: Optional[Any]) -> None:
        if self.file:
            self.file.write('\n  ]\n}\n')
            self._update_frame_count()
            self.file.close()
            self.file = None

    def write_item(self, item: Any) -> None:
        """Write one JSON-serializable item (None becomes null)."""
        if self.file is None:
            raise RuntimeError("Recorder is not open")

        if not self.first_item:
            self.file.write(',\n')
        else:
            self.first_item = False

        self.file.write('    ' + json.dumps(item))
        self.frame_count += 1

    def write_outputs(self, outputs: TrackingOutputs) -> None:
        """Write one frame of tracking outputs."""
        self.write_item(outputs.to_dict())

    def write_landmarks(self, landmarks: Optional[torch.Tensor]) -> None:
        """Write one frame of raw landmarks, or null when no face was found."""
        self.write_item(None if landmarks is None else landmarks[:, :3].tolist())

    def _update_frame_count(self) -> None:
        end = self.file.tell()
        self.file.seek(self.frame_count_position)
        self.file.write(f'{self.frame_count:<{_FRAME_COUNT_WIDTH}}')
        self.file.seek(end)
