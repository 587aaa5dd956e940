"""Tests for log record scrubbing and JSONL formatting."""

import json
import logging

from zimage_bot.utils.logging import JsonlFormatter, LevelIconFilter, SensitiveDataFilter


def make_record(level=logging.INFO, msg="hello", **extra):
    record = logging.LogRecord("zimage_bot.test", level, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_sensitive_values_are_redacted():
    record = make_record(detail={"Authorization": "Bearer ms-secret", "nested": {"api_key": "k"}, "model": "z"})
    assert SensitiveDataFilter().filter(record)
    assert record.detail["Authorization"] == "[REDACTED]"
    assert record.detail["nested"]["api_key"] == "[REDACTED]"
    assert record.detail["model"] == "z"


def test_jsonl_formatter_emits_known_keys_only():
    record = make_record(subsys="draw", event="draw.complete", detail={"inline": False}, unrelated="x")
    payload = json.loads(JsonlFormatter().format(record))
    assert payload["subsys"] == "draw"
    assert payload["event"] == "draw.complete"
    assert payload["detail"] == {"inline": False}
    assert "unrelated" not in payload
    assert set(payload) <= set(JsonlFormatter.KEYS)


def test_jsonl_formatter_falls_back_to_message():
    payload = json.loads(JsonlFormatter().format(make_record(msg="plain message")))
    assert payload["detail"] == "plain message"


def test_level_icons():
    icon_filter = LevelIconFilter()
    for level, icon in ((logging.ERROR, "✖"), (logging.WARNING, "⚠"), (logging.INFO, "✔"), (logging.DEBUG, "ℹ")):
        record = make_record(level=level)
        icon_filter.filter(record)
        assert record.level_icon == icon
