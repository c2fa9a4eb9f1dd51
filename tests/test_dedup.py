from datetime import datetime, timedelta, timezone

import pytest

from lumber.dedup import Deduplicator, format_duration
from lumber.model import CanonicalEvent

T0 = datetime(2026, 2, 19, 12, 0, 0, tzinfo=timezone.utc)


def event(typ, cat, offset=timedelta(0)):
    return CanonicalEvent(
        type=typ,
        category=cat,
        severity="error",
        timestamp=T0 + offset,
        summary=f"{typ}.{cat}",
    )


def seconds(n):
    return timedelta(seconds=n)


def test_deduplicate_batch_empty():
    assert Deduplicator(seconds(5)).deduplicate_batch([]) == []


def test_deduplicate_batch_no_duplicates():
    events = [
        event("ERROR", "connection_failure"),
        event("ERROR", "timeout", seconds(1)),
        event("REQUEST", "success", seconds(2)),
    ]
    result = Deduplicator(seconds(5)).deduplicate_batch(events)
    assert result == events
    assert all(e.count == 0 for e in result)


def test_deduplicate_batch_simple():
    events = [event("ERROR", "connection_failure", seconds(i)) for i in range(5)]
    result = Deduplicator(seconds(5)).deduplicate_batch(events)
    assert len(result) == 1
    assert result[0].count == 5


def test_deduplicate_batch_mixed():
    events = [
        event("ERROR", "connection_failure"),
        event("REQUEST", "success", timedelta(milliseconds=500)),
        event("ERROR", "connection_failure", seconds(1)),
        event("ERROR", "connection_failure", seconds(2)),
        event("REQUEST", "success", seconds(3)),
    ]
    result = Deduplicator(seconds(5)).deduplicate_batch(events)
    assert [(e.type, e.count) for e in result] == [("ERROR", 3), ("REQUEST", 2)]


def test_deduplicate_batch_window_expiry():
    events = [
        event("ERROR", "timeout"),
        event("ERROR", "timeout", seconds(2)),
        event("ERROR", "timeout", seconds(4)),
        event("ERROR", "timeout", seconds(10)),
        event("ERROR", "timeout", seconds(12)),
    ]
    result = Deduplicator(seconds(5)).deduplicate_batch(events)
    assert [e.count for e in result] == [3, 2]
    assert result[1].timestamp == T0 + seconds(10)


def test_deduplicate_batch_summary_format():
    events = []
    for i in range(47):
        events.append(
            CanonicalEvent(
                type="ERROR",
                category="connection_failure",
                timestamp=T0 + seconds(6 * i),
                summary="connection refused",
            )
        )
    result = Deduplicator(timedelta(minutes=10)).deduplicate_batch(events)
    assert len(result) == 1
    assert "(x47" in result[0].summary
    assert "connection refused" in result[0].summary
    assert result[0].summary == "connection refused (x47 in 4m36s)"


def test_deduplicate_batch_preserves_timestamp():
    events = [event("ERROR", "timeout", seconds(i)) for i in range(3)]
    result = Deduplicator(seconds(5)).deduplicate_batch(events)
    assert result[0].timestamp == T0


def test_deduplicate_does_not_mutate_input():
    events = [event("ERROR", "timeout", seconds(i)) for i in range(3)]
    Deduplicator(seconds(5)).deduplicate_batch(events)
    assert all(e.count == 0 and e.summary == "ERROR.timeout" for e in events)


def test_default_window_is_five_seconds():
    events = [event("ERROR", "timeout"), event("ERROR", "timeout", seconds(5))]
    assert [e.count for e in Deduplicator().deduplicate_batch(events)] == [2]
    events.append(event("ERROR", "timeout", seconds(6)))
    assert len(Deduplicator().deduplicate_batch(events)) == 2


@pytest.mark.parametrize(
    ("duration", "expected"),
    [
        (timedelta(milliseconds=500), "500ms"),
        (timedelta(0), "0ms"),
        (seconds(30), "30s"),
        (timedelta(minutes=2), "2m"),
        (seconds(276), "4m36s"),
    ],
)
def test_format_duration(duration, expected):
    assert format_duration(duration) == expected