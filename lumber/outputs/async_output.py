"""Output wrapper that decouples producers from a slow destination."""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable

from lumber.model import CanonicalEvent
from lumber.outputs.base import Output

DEFAULT_BUFFER_SIZE = 1024
DRAIN_TIMEOUT = 5.0

_log = logging.getLogger(__name__)
_STOP = object()


def _log_write_error(exc: Exception) -> None:
    _log.warning("async output write error", extra={"error": str(exc)})


class AsyncOutput(Output):
    """Buffers events in a queue drained by a background thread.

    By default ``write`` blocks while the buffer is full (backpressure); with
    ``drop_on_full`` the event is dropped instead. Failures of the wrapped
    output go to ``on_error`` rather than to the caller.
    """

    def __init__(
        self,
        inner: Output,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        on_error: Callable[[Exception], None] | None = None,
        drop_on_full: bool = False,
    ) -> None:
        if buffer_size < 0:
            raise ValueError("buffer_size must not be negative")
        self._inner = inner
        self._on_error = on_error or _log_write_error
        self._drop_on_full = drop_on_full
        self._queue: queue.Queue[object] = queue.Queue(maxsize=max(1, buffer_size))
        self._close_lock = threading.Lock()
        self._closed = False
        self._thread = threading.Thread(
            target=self._drain, name="lumber-async-drain", daemon=True
        )
        self._thread.start()

    def write(self, event: CanonicalEvent) -> None:
        """Queue the event, blocking or dropping it when the buffer is full."""
        if self._closed:
            raise RuntimeError("async output is closed")
        if not self._drop_on_full:
            self._queue.put(event)
            return
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            _log.warning(
                "async output buffer full, dropping event",
                extra={"type": event.type, "category": event.category},
            )

    def close(self) -> None:
        """Drain queued events (up to a timeout), then close the wrapped output.

        Only the first call has any effect.
        """
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        deadline = time.monotonic() + DRAIN_TIMEOUT
        try:
            self._queue.put(_STOP, timeout=DRAIN_TIMEOUT)
        except queue.Full:
            pass
        self._thread.join(max(0.0, deadline - time.monotonic()))
        if self._thread.is_alive():
            _log.warning("async output drain timed out")
        self._inner.close()

    def _drain(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            try:
                self._inner.write(item)  # type: ignore[arg-type]
            except Exception as exc:  # noqa: BLE001 - reported through the callback
                self._on_error(exc)