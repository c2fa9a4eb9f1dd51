"""Core data types that flow through the classification pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# The zero timestamp, used when a log carries no time of its own.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_HTML_SAFE = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)


def _format_timestamp(ts: datetime) -> str:
    """Render a timestamp as RFC 3339 with trailing fractional zeros removed."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    text = (
        f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"
        f"T{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}"
    )
    if ts.microsecond:
        text += "." + f"{ts.microsecond:06d}".rstrip("0")
    offset = ts.utcoffset()
    total = int(offset.total_seconds()) if offset is not None else 0
    if total == 0:
        return text + "Z"
    sign = "+" if total > 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


def _json_number(value: float) -> float | int:
    if value.is_integer() and abs(value) < 1e21:
        return int(value)
    return value


@dataclass(frozen=True)
class CanonicalEvent:
    """A classified, normalised log event."""

    type: str = ""
    category: str = ""
    severity: str = ""
    timestamp: datetime = ZERO_TIME
    summary: str = ""
    confidence: float = 0.0
    raw: str = ""
    count: int = 0  # above zero when the event stands for several duplicates

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping; empty confidence, raw and count are omitted."""
        data: dict[str, Any] = {
            "type": self.type,
            "category": self.category,
            "severity": self.severity,
            "timestamp": _format_timestamp(self.timestamp),
            "summary": self.summary,
        }
        if self.confidence:
            data["confidence"] = _json_number(float(self.confidence))
        if self.raw:
            data["raw"] = self.raw
        if self.count:
            data["count"] = self.count
        return data

    def to_json(self, indent: int | None = None) -> str:
        """Encode the event as JSON, compact unless an indent is given."""
        if indent is None:
            text = json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))
        else:
            text = json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)
        return text.translate(_HTML_SAFE)


@dataclass(frozen=True)
class RawLog:
    """A log line as received from a connector, before classification."""

    timestamp: datetime = ZERO_TIME
    source: str = ""
    raw: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class TaxonomyNode:
    """A node of the taxonomy tree; leaves carry a description and severity."""

    name: str
    children: list[TaxonomyNode] = field(default_factory=list)
    desc: str = ""
    severity: str = ""


@dataclass(frozen=True)
class EmbeddedLabel:
    """A taxonomy leaf together with its pre-computed embedding vector."""

    path: str
    vector: tuple[float, ...] | list[float] = ()
    severity: str = ""