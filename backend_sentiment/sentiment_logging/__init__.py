"""
Structured logging for Backend Sentiment.

JSON logs with timestamp, level, event_type and logger name.
Use get_logger() in every module; configure_logging() applies LOG_LEVEL and LOG_FORMAT.
"""

from backend_sentiment.sentiment_logging.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
