"""
Structured logging for the sentiment service.

Every line carries an ISO-8601 UTC timestamp, the level, the logger name and the event
name under event_type, plus keyword context:
    logger.info("sentiment_saved", id=12, predicted_class="positive")

Level and renderer come from Settings (LOG_LEVEL, LOG_FORMAT) and are applied by
configure_logging() once settings are loaded. Until then the defaults (INFO, json) hold.
Loggers resolve the configuration on every call, so reconfiguring affects loggers
created at import time too.

No backend_sentiment imports here: every other module imports this one.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog._config import BoundLoggerLazyProxy

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "json"


def _level_value(level: str) -> int:
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def _renderers(fmt: str) -> list[Any]:
    if fmt.strip().lower() == "json":
        return [structlog.processors.EventRenamer("event_type"), structlog.processors.JSONRenderer(default=str)]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def configure_logging(level: str = DEFAULT_LOG_LEVEL, fmt: str = DEFAULT_LOG_FORMAT) -> None:
    """(Re)configure structlog with the given level name and renderer (json or console)."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            *_renderers(fmt),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_value(level)),
        context_class=dict,
        # PrintLogger picks up the current sys.stdout each time a logger is built
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> Any:
    """
    Structured logger bound to logger=name.

        logger = get_logger(__name__)
        logger.warning("save_sentiment_failed", error="PostgreSQL not configured")

    JSON output: {"event_type": "save_sentiment_failed", "error": "...",
    "logger": "backend_sentiment.api_server.routes", "level": "warning", "timestamp": "..."}
    """
    # structlog.get_logger(name, logger=name) collides with wrap_logger's `logger` parameter;
    # build the same lazy proxy it would return, with logger=name as the initial value.
    return BoundLoggerLazyProxy(None, logger_factory_args=(name,), initial_values={"logger": name})
