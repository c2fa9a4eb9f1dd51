"""NDJSON file destination with buffered writes and size-based rotation."""

from __future__ import annotations

import os
import threading
from os import PathLike

from lumber.compactor import Verbosity
from lumber.model import CanonicalEvent
from lumber.outputs.base import Output, format_event

DEFAULT_BUF_SIZE = 64 * 1024
_MAX_ROTATED = 10


class FileOutput(Output):
    """Appends one JSON line per event to a file.

    When ``max_size`` is above zero, a write that would push the file past it
    first rotates the file to ``{path}.1``, shifting older copies up to
    ``{path}.10``.
    """

    def __init__(
        self,
        path: str | PathLike[str],
        verbosity: Verbosity,
        max_size: int = 0,
        buf_size: int = DEFAULT_BUF_SIZE,
    ) -> None:
        self.path = os.fspath(path)
        self.verbosity = verbosity
        self.max_size = max_size
        self.buf_size = buf_size
        self._lock = threading.Lock()
        self._closed = False
        self._open()

    def _open(self) -> None:
        self._file = open(self.path, "ab", buffering=self.buf_size)
        self._written = os.fstat(self._file.fileno()).st_size

    def write(self, event: CanonicalEvent) -> None:
        """Encode the event and append it as one line."""
        data = (format_event(event, self.verbosity).to_json() + "\n").encode("utf-8")
        with self._lock:
            if self.max_size > 0 and self._written + len(data) > self.max_size:
                self._rotate()
            self._file.write(data)
            self._written += len(data)

    def close(self) -> None:
        """Flush buffered data and close the file."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._file.close()

    def _rotate(self) -> None:
        self._file.close()
        for index in range(_MAX_ROTATED - 1, 0, -1):
            try:
                os.replace(f"{self.path}.{index}", f"{self.path}.{index + 1}")
            except OSError:
                pass  # that generation may not exist yet
        os.replace(self.path, f"{self.path}.1")
        self._open()