"""Process-wide logging configuration on stderr."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from typing import Any

_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
}

_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


def _level_name(levelno: int) -> str:
    return _LEVEL_NAMES.get(levelno) or logging.getLevelName(levelno)


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created).astimezone().isoformat(
        timespec="milliseconds"
    )


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED and not key.startswith("_")
    }


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "time": _timestamp(record),
            "level": _level_name(record.levelno),
            "msg": record.getMessage(),
            **_extras(record),
        }
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


def _quote(value: Any) -> str:
    text = str(value)
    if not text or any(c.isspace() or c in '="' or not c.isprintable() for c in text):
        return json.dumps(text, ensure_ascii=False)
    return text


class _TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        pairs = {
            "time": _timestamp(record),
            "level": _level_name(record.levelno),
            "msg": record.getMessage(),
            **_extras(record),
        }
        if record.exc_info:
            pairs["exc"] = self.formatException(record.exc_info)
        return " ".join(f"{key}={_quote(value)}" for key, value in pairs.items())


def init(output_is_stdout: bool, level: int) -> None:
    """Route all logging to stderr at ``level``.

    JSON lines are used when events go to stdout, so the two streams never
    mix formats; otherwise a key=value text form is used.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter() if output_is_stdout else _TextFormatter())
    handler.setLevel(level)
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


def parse_level(s: str) -> int:
    """Map 'debug', 'info', 'warn'/'warning' or 'error' to a level; default INFO."""
    match s.lower():
        case "debug":
            return logging.DEBUG
        case "warn" | "warning":
            return logging.WARNING
        case "error":
            return logging.ERROR
        case _:
            return logging.INFO