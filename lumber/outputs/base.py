"""Common interface for event destinations and verbosity-based formatting."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace
from types import TracebackType

from lumber.compactor import Verbosity
from lumber.model import CanonicalEvent


class Output(ABC):
    """A destination for canonical events. Usable as a context manager."""

    @abstractmethod
    def write(self, event: CanonicalEvent) -> None:
        """Deliver one event; raise on failure."""

    @abstractmethod
    def close(self) -> None:
        """Flush and release resources."""

    def __enter__(self) -> Output:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def format_event(event: CanonicalEvent, verbosity: Verbosity) -> CanonicalEvent:
    """Return a copy with raw text and confidence cleared at MINIMAL verbosity."""
    if verbosity == Verbosity.MINIMAL:
        return replace(event, raw="", confidence=0.0)
    return event