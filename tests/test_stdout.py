import io
import json
from datetime import datetime, timezone

from lumber.compactor import Verbosity
from lumber.model import CanonicalEvent
from lumber.outputs.stdout import StdoutOutput


def make_event():
    return CanonicalEvent(
        type="ERROR",
        category="connection_failure",
        severity="error",
        timestamp=datetime(2026, 2, 19, 12, 0, 0, tzinfo=timezone.utc),
        summary="connection refused",
        confidence=0.91,
        raw='{"level":"error","msg":"connection refused"}',
    )


def test_output_compact_json(capsys):
    out = StdoutOutput(Verbosity.STANDARD, pretty=False)
    out.write(make_event())
    lines = capsys.readouterr().out.strip().split("\n")
    assert len(lines) == 1
    data = json.loads(lines[0])
    assert data["type"] == "ERROR"
    assert data["confidence"] == 0.91


def test_output_pretty_json():
    stream = io.StringIO()
    StdoutOutput(Verbosity.STANDARD, pretty=True, stream=stream).write(make_event())
    text = stream.getvalue()
    assert '  "type": "ERROR"' in text
    assert len(text.strip().split("\n")) >= 3
    assert json.loads(text)["category"] == "connection_failure"


def test_output_minimal_omits_fields():
    stream = io.StringIO()
    StdoutOutput(Verbosity.MINIMAL, stream=stream).write(make_event())
    data = json.loads(stream.getvalue())
    assert "raw" not in data
    assert "confidence" not in data
    assert data["type"] == "ERROR"


def test_multiple_events_are_separate_lines():
    stream = io.StringIO()
    with StdoutOutput(Verbosity.STANDARD, stream=stream) as out:
        out.write(make_event())
        out.write(make_event())
    lines = stream.getvalue().splitlines()
    assert [json.loads(line)["summary"] for line in lines] == [
        "connection refused",
        "connection refused",
    ]