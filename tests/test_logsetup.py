import json
import logging

import pytest

from lumber.logsetup import init, parse_level


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("debug", logging.DEBUG),
        ("DEBUG", logging.DEBUG),
        ("info", logging.INFO),
        ("INFO", logging.INFO),
        ("warn", logging.WARNING),
        ("warning", logging.WARNING),
        ("error", logging.ERROR),
        ("ERROR", logging.ERROR),
        ("unknown", logging.INFO),
        ("", logging.INFO),
    ],
)
def test_parse_level(text, expected):
    assert parse_level(text) == expected


def test_init_json(capsys):
    init(True, logging.INFO)
    logging.getLogger("lumber.test").info("test message", extra={"key": "value"})
    record = json.loads(capsys.readouterr().err.strip())
    assert record["msg"] == "test message"
    assert record["key"] == "value"
    assert record["level"] == "INFO"


def test_init_text(capsys):
    init(False, logging.INFO)
    logging.getLogger("lumber.test").info("test message", extra={"key": "value"})
    out = capsys.readouterr().err
    assert 'msg="test message"' in out
    assert "key=value" in out
    assert "level=INFO" in out


def test_init_text_uses_short_warning_name(capsys):
    init(False, logging.DEBUG)
    logging.getLogger("lumber.test").warning("careful")
    assert "level=WARN " in capsys.readouterr().err


def test_init_filters_below_level(capsys):
    init(True, parse_level("error"))
    logging.getLogger("lumber.test").warning("hidden")
    assert capsys.readouterr().err == ""


def test_init_replaces_previous_handlers(capsys):
    init(True, logging.INFO)
    init(True, logging.INFO)
    logging.getLogger("lumber.test").info("once")
    lines = capsys.readouterr().err.strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["msg"] == "once"