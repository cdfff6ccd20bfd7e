"""
Test that sentiment_logging can be imported without circular import, and that level and
format from settings reach loggers created before configuration.
"""

from __future__ import annotations

import json

import pytest

from backend_sentiment.api_server.server import create_app
from backend_sentiment.config import Settings
from backend_sentiment.database import UnavailableStore
from backend_sentiment.sentiment_logging import configure_logging, get_logger

module_logger = get_logger("tests.module_level")


@pytest.fixture(autouse=True)
def default_logging():
    yield
    configure_logging()


def test_logging_import():
    """Import get_logger from sentiment_logging and use the logger."""
    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_json_line_fields(capsys):
    get_logger("tests.json").warning("sentiment_saved", id=12)
    line = json.loads(capsys.readouterr().out.strip())
    assert line["event_type"] == "sentiment_saved"
    assert line["id"] == 12
    assert line["level"] == "warning"
    assert line["logger"] == "tests.json"
    assert line["timestamp"].startswith("20")


def test_configured_level_filters_import_time_logger(capsys):
    configure_logging("ERROR", "json")
    module_logger.info("should_be_filtered")
    module_logger.error("should_be_shown")
    out = capsys.readouterr().out
    assert "should_be_filtered" not in out
    assert json.loads(out.strip())["event_type"] == "should_be_shown"


def test_create_app_applies_settings_log_level(capsys):
    create_app(Settings(log_level="WARNING"), store=UnavailableStore(configured=False))
    module_logger.info("quiet_info")
    module_logger.warning("loud_warning")
    out = capsys.readouterr().out
    assert "quiet_info" not in out
    assert "loud_warning" in out


def test_console_format(capsys):
    configure_logging("INFO", "console")
    get_logger("tests.console").info("console_event", key="value")
    out = capsys.readouterr().out
    assert "console_event" in out
    assert not out.lstrip().startswith("{")
