"""
Application-level exceptions.

Store operations convert these (and SQLAlchemy errors) into result objects at the
adapter boundary; the API layer maps what remains to JSON error responses.
"""

from __future__ import annotations


class SentimentBackendError(Exception):
    """Base class for all backend errors."""


class ValidationError(SentimentBackendError):
    """A record is missing required fields or carries an unusable value."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or []


class ClassifierUnavailableError(SentimentBackendError):
    """The external classification service could not be reached or timed out."""
