"""Tests for the structured logging configuration."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from procstats.lib import logger as logger_module
from procstats.lib.logger import JsonFormatter, configure_logging, get_logger


def _record(msg: str, *args: object, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("procstats.test", logging.WARNING, __file__, 10, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_renders_core_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record("counter %s created", "hits")))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "procstats.test"
    assert payload["message"] == "counter hits created"
    assert "timestamp" in payload
    assert "lineno" not in payload


def test_json_formatter_merges_extra_fields() -> None:
    payload = json.loads(JsonFormatter().format(_record("created", parents=2, handle=object())))

    assert payload["parents"] == 2
    assert payload["handle"].startswith("<object object")


def test_json_formatter_includes_exception() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord("procstats.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))

    assert "RuntimeError: boom" in payload["exception"]


@pytest.fixture()
def pristine_root(monkeypatch: pytest.MonkeyPatch) -> logging.Logger:
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)
    if hasattr(root, "_structured_configured"):
        monkeypatch.delattr(root, "_structured_configured")
    yield root
    if hasattr(root, "_structured_configured"):
        del root._structured_configured  # type: ignore[attr-defined]


def test_configure_logging_is_idempotent(pristine_root: logging.Logger) -> None:
    configure_logging("debug")
    configure_logging()

    assert pristine_root.level == logging.DEBUG
    assert len(pristine_root.handlers) == 1
    assert isinstance(pristine_root.handlers[0].formatter, JsonFormatter)

    configure_logging(logging.WARNING)
    assert pristine_root.level == logging.WARNING
    assert len(pristine_root.handlers) == 1


def test_unknown_level_falls_back_to_info(pristine_root: logging.Logger) -> None:
    configure_logging("chatty")

    assert pristine_root.level == logging.INFO


def test_get_logger_configures_root(pristine_root: logging.Logger) -> None:
    log = get_logger("procstats.example")

    assert log.name == "procstats.example"
    assert getattr(pristine_root, "_structured_configured", False)
    assert logger_module._resolve_level(None) == logging.INFO
