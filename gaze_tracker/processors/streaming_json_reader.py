"""Streaming JSON reader using ijson for token-based parsing."""

from typing import Iterator, Dict, Any, Optional, Union
import ijson
from pathlib import Path


class StreamingJSONReader:
    """
    Reads a ``{"<metadata>": ..., "data": [...]}`` envelope without loading
    the whole file.
    """

    def __init__(self, input_path: Union[str, Path]) -> None:
        """
        Args:
            input_path: Input file path
        """
        self.input_path: Path = Path(input_path)
        self.file: Optional[Any] = None

    def __enter__(self) -> 'StreamingJSONReader':
        self.file = open(self.input_path, 'rb')  # ijson wants bytes
        return self

    def __exit__(self, exc_type: Optional[type], exc_val: Optional[Exception], exc_tb: Optional[Any]) -> None:
        if self.file:
            self.file.close()
            self.file = None

    def read_items(self) -> Iterator[Any]:
        """Yield each element of the top-level ``data`` array, numbers as floats."""
        if self.file is None:
            raise RuntimeError("Reader is not open")
        self.file.seek(0)
        yield from ijson.items(self.file, 'data.item', use_float=True)

    def get_metadata(self) -> Dict[str, Any]:
        """
        Collect the scalar top-level keys preceding the ``data`` array.

        Null values are kept as None.
        """
        if self.file is None:
            raise RuntimeError("Reader is not open")
        self.file.seek(0)

        metadata: Dict[str, Any] = {}
        for prefix, event, value in ijson.parse(self.file, use_float=True):
            if prefix == 'data' and event == 'start_array':
                break
            if not prefix or '.' in prefix:
                continue
            if event in ('string', 'number', 'boolean', 'null'):
                metadata[prefix] = value
        return metadata
