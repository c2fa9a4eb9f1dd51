"""JSON event destination on standard output."""

from __future__ import annotations

import sys
from typing import TextIO

from lumber.compactor import Verbosity
from lumber.model import CanonicalEvent
from lumber.outputs.base import Output, format_event


class StdoutOutput(Output):
    """Writes each event as JSON, one line each unless ``pretty`` is set."""

    def __init__(
        self, verbosity: Verbosity, pretty: bool = False, stream: TextIO | None = None
    ) -> None:
        self.verbosity = verbosity
        self.pretty = pretty
        self.stream = stream if stream is not None else sys.stdout

    def write(self, event: CanonicalEvent) -> None:
        """Encode the event and write it followed by a newline."""
        formatted = format_event(event, self.verbosity)
        self.stream.write(formatted.to_json(indent=2 if self.pretty else None) + "\n")
        self.stream.flush()

    def close(self) -> None:
        """Nothing to release; standard output stays open."""