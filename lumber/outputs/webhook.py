"""Batched JSON POSTs of events to an HTTP endpoint."""

from __future__ import annotations

import logging
import threading
import time
import urllib.error
import urllib.request
from collections.abc import Callable, Mapping

from lumber.model import CanonicalEvent
from lumber.outputs.base import Output

DEFAULT_BATCH_SIZE = 50
DEFAULT_FLUSH_INTERVAL = 5.0
DEFAULT_TIMEOUT = 10.0
MAX_RETRIES = 3

_log = logging.getLogger(__name__)


class WebhookError(Exception):
    """Raised when a batch could not be delivered."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def _log_flush_error(exc: Exception) -> None:
    _log.warning("webhook flush error", extra={"error": str(exc)})


class WebhookOutput(Output):
    """POSTs events to ``url`` as a JSON array.

    Events are sent when ``batch_size`` accumulate or ``flush_interval``
    seconds after the first event of a batch. Server errors (5xx) are retried
    up to three times with exponential backoff starting at ``backoff`` seconds.
    Failures of timer-driven flushes go to ``on_error``.
    """

    def __init__(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        flush_interval: float = DEFAULT_FLUSH_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        on_error: Callable[[Exception], None] | None = None,
        backoff: float = 1.0,
    ) -> None:
        self.url = url
        self.headers = dict(headers or {})
        self.batch_size = batch_size
        self.flush_interval = flush_interval
        self.timeout = timeout
        self.backoff = backoff
        self._on_error = on_error or _log_flush_error
        self._lock = threading.Lock()
        self._pending: list[CanonicalEvent] = []
        self._timer: threading.Timer | None = None

    def write(self, event: CanonicalEvent) -> None:
        """Add the event to the batch, sending the batch once it is full."""
        with self._lock:
            self._pending.append(event)
            if len(self._pending) >= self.batch_size:
                self._flush_locked()
                return
            if len(self._pending) == 1:
                self._timer = threading.Timer(self.flush_interval, self._timer_flush)
                self._timer.daemon = True
                self._timer.start()

    def close(self) -> None:
        """Stop the timer and send any events still pending."""
        with self._lock:
            self._stop_timer()
            if self._pending:
                self._flush_locked()

    def _timer_flush(self) -> None:
        with self._lock:
            try:
                self._flush_locked()
            except Exception as exc:  # noqa: BLE001 - reported through the callback
                self._on_error(exc)

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _flush_locked(self) -> None:
        if not self._pending:
            return
        self._stop_timer()
        batch, self._pending = self._pending, []
        body = ("[" + ",".join(e.to_json() for e in batch) + "]").encode("utf-8")
        self._post_with_retry(body)

    def _post_once(self, body: bytes) -> int:
        request = urllib.request.Request(self.url, data=body, method="POST")
        request.add_header("Content-Type", "application/json")
        for name, value in self.headers.items():
            request.add_header(name, value)
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                response.read()
                return response.status
        except urllib.error.HTTPError as exc:
            try:
                exc.read()
            finally:
                exc.close()
            return exc.code
        except (urllib.error.URLError, OSError) as exc:
            raise WebhookError(f"webhook: {exc}") from exc

    def _post_with_retry(self, body: bytes) -> None:
        last_error: WebhookError | None = None
        for attempt in range(MAX_RETRIES + 1):
            if attempt:
                time.sleep(self.backoff * 2 ** (attempt - 1))
            status = self._post_once(body)
            if 200 <= status < 300:
                return
            last_error = WebhookError(f"webhook: HTTP {status}", status)
            if status < 500:
                raise last_error
        assert last_error is not None
        raise last_error