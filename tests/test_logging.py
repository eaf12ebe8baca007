"""Tests for logging configuration."""

import json
import logging
import sys

from oneshare.app.core.logging import (
    ContextFilter,
    JSONFormatter,
    get_log_context,
    get_logger,
    get_logging_config,
)


def make_record(msg="Test message", **attrs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_basic_json_format(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["source"]["file"] == "test.py"
        assert data["source"]["line"] == 1

    def test_context_fields(self):
        record = make_record("Expired messages removed", deleted=3, reason="too_large")
        data = json.loads(JSONFormatter().format(record))

        assert data["deleted"] == 3
        assert data["reason"] == "too_large"
        assert "extra" not in data

    def test_unknown_attributes_go_to_extra(self):
        data = json.loads(JSONFormatter().format(make_record(batch=2)))
        assert data["extra"] == {"batch": 2}

    def test_exception_info(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))
        assert any("ValueError: boom" in line for line in data["exception"])


def test_context_filter_sets_defaults():
    record = make_record()
    assert ContextFilter().filter(record) is True
    assert record.reason is None
    assert record.deleted is None


def test_get_log_context_drops_none():
    assert get_log_context(reason="rate_limited", deleted=2, batch=None) == {
        "reason": "rate_limited",
        "deleted": 2,
    }


def test_logging_config_uses_json_when_requested(monkeypatch):
    from oneshare.app.core import logging as logging_module

    monkeypatch.setattr(logging_module.settings, "log_format", "json")
    config = get_logging_config()
    assert config["handlers"]["console"]["formatter"] == "json"
    assert "oneshare" in config["loggers"]


def test_get_logger_default_name():
    assert get_logger().name == "oneshare"
