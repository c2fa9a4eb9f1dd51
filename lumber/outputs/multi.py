"""Fan-out of events to several destinations."""

from __future__ import annotations

from lumber.model import CanonicalEvent
from lumber.outputs.base import Output


class MultiOutput(Output):
    """Delivers every event to each wrapped output in turn.

    A failing output does not stop delivery to the others; all failures are
    raised together as an ``ExceptionGroup`` afterwards.
    """

    def __init__(self, *outputs: Output) -> None:
        self.outputs = list(outputs)

    def write(self, event: CanonicalEvent) -> None:
        """Write the event to every output."""
        errors: list[Exception] = []
        for output in self.outputs:
            try:
                output.write(event)
            except Exception as exc:  # noqa: BLE001 - collected and re-raised
                errors.append(exc)
        if errors:
            raise ExceptionGroup("output write failed", errors)

    def close(self) -> None:
        """Close every output, collecting failures."""
        errors: list[Exception] = []
        for output in self.outputs:
            try:
                output.close()
            except Exception as exc:  # noqa: BLE001 - collected and re-raised
                errors.append(exc)
        if errors:
            raise ExceptionGroup("output close failed", errors)