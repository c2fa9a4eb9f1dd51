"""Token-aware compaction of raw log text."""

from __future__ import annotations

import json
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class Verbosity(IntEnum):
    """How much detail is kept after compaction."""

    MINIMAL = 0
    STANDARD = 1
    FULL = 2


# High-cardinality fields removed from JSON logs below FULL verbosity.
DEFAULT_STRIP_FIELDS: tuple[str, ...] = (
    "trace_id",
    "span_id",
    "request_id",
    "x_request_id",
    "correlation_id",
    "dd.trace_id",
    "dd.span_id",
)

# verbosity -> (stack frames kept at the head, rune limit)
_LIMITS = {
    Verbosity.MINIMAL: (5, 200),
    Verbosity.STANDARD: (10, 2000),
}

_SUMMARY_RUNES = 120
_TAIL_FRAMES = 2

_FRAME_PATTERNS = (
    re.compile(r"\s+at ", re.ASCII),
    re.compile(r"\s+.+\.go:\d+", re.ASCII),
    re.compile(r"goroutine \d+", re.ASCII),
)

_HTML_SAFE = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)

_MISSING = object()


@dataclass
class Compactor:
    """Strips noisy fields and truncates log text according to verbosity."""

    verbosity: Verbosity
    strip_fields: Sequence[str] = DEFAULT_STRIP_FIELDS

    def compact(self, raw: str, event_type: str) -> tuple[str, str]:
        """Return the compacted text and a one-line summary of ``raw``."""
        result = raw
        if self.verbosity != Verbosity.FULL:
            result = strip_fields(result, self.strip_fields)
            max_frames, max_runes = _LIMITS[self.verbosity]
            trimmed = (
                truncate_stack_trace(result, max_frames) if event_type == "ERROR" else result
            )
            result = trimmed if trimmed != result else truncate(result, max_runes)
        return result, summarize(raw)


def truncate(s: str, max_runes: int) -> str:
    """Cut ``s`` after ``max_runes`` characters, appending '...' when cut."""
    if len(s) <= max_runes:
        return s
    return s[:max_runes] + "..."


def summarize(raw: str) -> str:
    """Return the first line, trimmed to 120 characters at a word boundary."""
    line = raw.split("\n", 1)[0].strip()
    if len(line) <= _SUMMARY_RUNES:
        return line
    cut = line[:_SUMMARY_RUNES]
    last_space = cut.rfind(" ")
    if last_space > 0:
        return line[:last_space] + "..."
    return cut + "..."


def _is_frame(line: str) -> bool:
    return any(pattern.match(line) for pattern in _FRAME_PATTERNS)


def truncate_stack_trace(raw: str, max_frames: int) -> str:
    """Keep the first ``max_frames`` and last two frames of a stack trace.

    Everything between the last kept head frame and the first kept tail frame
    is replaced by a single omission line. Text without enough frames is
    returned unchanged.
    """
    if max_frames < 1:
        raise ValueError("max_frames must be at least 1")
    lines = raw.split("\n")
    frames = [i for i, line in enumerate(lines) if _is_frame(line)]
    if len(frames) <= max_frames + _TAIL_FRAMES:
        return raw

    last_kept_first = frames[max_frames - 1]
    first_kept_last = frames[-_TAIL_FRAMES]
    omitted = len(frames) - max_frames - _TAIL_FRAMES
    kept = [
        *lines[: last_kept_first + 1],
        f"\t... ({omitted} frames omitted) ...",
        *lines[first_kept_last:],
    ]
    return "\n".join(kept)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def _json_numbers(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    if isinstance(value, dict):
        return {k: _json_numbers(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_numbers(v) for v in value]
    return value


def strip_fields(raw: str, fields: Sequence[str]) -> str:
    """Remove the given keys from a JSON-object log line.

    Non-JSON input, and JSON with none of the keys, is returned unchanged.
    The rewritten object has its keys sorted.
    """
    trimmed = raw.strip()
    if not trimmed.startswith("{"):
        return raw
    try:
        obj = json.loads(trimmed, parse_constant=_reject_constant)
    except ValueError:
        return raw
    if not isinstance(obj, dict):
        return raw

    changed = False
    for name in fields:
        if obj.pop(name, _MISSING) is not _MISSING:
            changed = True
    if not changed:
        return raw

    text = json.dumps(
        _json_numbers(obj), ensure_ascii=False, separators=(",", ":"), sort_keys=True
    )
    return text.translate(_HTML_SAFE)


def estimate_tokens(s: str) -> int:
    """Approximate a token count: whitespace-separated words times 1.3, rounded up."""
    if not s:
        return 0
    return math.ceil(len(s.split()) * 1.3)