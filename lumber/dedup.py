"""Collapsing of repeated event types within a time window."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from lumber.model import CanonicalEvent


@dataclass
class _Group:
    event: CanonicalEvent
    first_ts: datetime
    latest_ts: datetime
    count: int = 1

    def collapsed(self) -> CanonicalEvent:
        if self.count == 1:
            return self.event
        span = format_duration(self.latest_ts - self.first_ts)
        return replace(
            self.event,
            count=self.count,
            summary=f"{self.event.summary} (x{self.count} in {span})",
        )


@dataclass(frozen=True)
class Deduplicator:
    """Merges events sharing type and category that fall within ``window``."""

    window: timedelta = timedelta(seconds=5)

    def deduplicate_batch(self, events: Iterable[CanonicalEvent]) -> list[CanonicalEvent]:
        """Collapse duplicates, keeping first-occurrence order.

        A merged event keeps the first event's fields, gets ``count`` set and
        its summary extended with the count and time span.
        """
        order: list[_Group] = []
        groups: dict[str, _Group] = {}

        for event in events:
            key = f"{event.type}.{event.category}"
            group = groups.get(key)
            if group is not None and event.timestamp - group.first_ts <= self.window:
                group.count += 1
                if event.timestamp > group.latest_ts:
                    group.latest_ts = event.timestamp
                continue

            group = _Group(event, event.timestamp, event.timestamp)
            groups[key] = group
            order.append(group)

        return [group.collapsed() for group in order]


def format_duration(d: timedelta) -> str:
    """Render a short human-readable duration such as '250ms', '12s' or '4m36s'."""
    if d < timedelta(seconds=1):
        return f"{d // timedelta(milliseconds=1)}ms"
    if d < timedelta(minutes=1):
        return f"{d.total_seconds():.0f}s"
    minutes = d // timedelta(minutes=1)
    seconds = (d // timedelta(seconds=1)) % 60
    if seconds == 0:
        return f"{minutes}m"
    return f"{minutes}m{seconds}s"