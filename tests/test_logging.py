"""Tests for logging setup."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from repolang.core.logging import setup_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("repolang").setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_level_from_argument(self):
        setup_logging("debug")
        assert logging.getLogger("repolang").level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("REPOLANG_LOG_LEVEL", "error")
        setup_logging()
        assert logging.getLogger("repolang").level == logging.ERROR

    def test_json_renderer(self, monkeypatch, capsys):
        monkeypatch.setenv("REPOLANG_LOG_FORMAT", "json")
        setup_logging("INFO")
        structlog.get_logger("repolang.test").warning("test.event", answer=42)
        err = capsys.readouterr().err.strip().splitlines()[-1]
        record = json.loads(err)
        assert record["event"] == "test.event"
        assert record["answer"] == 42
        assert record["level"] == "warning"
        assert record["logger"] == "repolang.test"

    def test_console_output_on_stderr_without_colour_off_tty(self, monkeypatch, capsys):
        monkeypatch.delenv("REPOLANG_LOG_FORMAT", raising=False)
        setup_logging("INFO")
        structlog.get_logger("repolang.test").warning("test.plain", path="a.py")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "test.plain" in captured.err
        assert "\x1b[" not in captured.err
