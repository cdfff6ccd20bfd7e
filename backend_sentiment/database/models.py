"""
SQLAlchemy model for persisted sentiment results, plus the plain result types the
store returns at its boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

DEFAULT_SOURCE = "web_analyzer"
PROBABILITY_LABELS = ("positive", "negative", "neutral")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso_utc(value: datetime | None) -> str | None:
    """ISO 8601 in UTC. SQLite hands back naive datetimes; those are stored as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class SentimentAnalysis(Base):
    """
    One classification result. id, created_at and updated_at are assigned by the store
    on insert; rows are never updated in place.
    """

    __tablename__ = "sentiment_analysis"

    id = Column(Integer, primary_key=True, autoincrement=True)
    text = Column(Text, nullable=False)
    predicted_class = Column(String(32), nullable=False, index=True)
    confidence = Column(Float, nullable=False)
    positive_prob = Column(Float, nullable=False)
    negative_prob = Column(Float, nullable=False)
    neutral_prob = Column(Float, nullable=False)
    source = Column(String(64), nullable=False, default=DEFAULT_SOURCE)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (Index("ix_sentiment_analysis_created_at", "created_at"),)

    def to_dict(self) -> dict[str, Any]:
        """Flat columns plus the probabilities regrouped under all_probabilities."""
        return {
            "id": self.id,
            "text": self.text,
            "predicted_class": self.predicted_class,
            "confidence": self.confidence,
            "positive_prob": self.positive_prob,
            "negative_prob": self.negative_prob,
            "neutral_prob": self.neutral_prob,
            "source": self.source,
            "created_at": iso_utc(self.created_at),
            "updated_at": iso_utc(self.updated_at),
            "all_probabilities": {
                "positive": self.positive_prob,
                "negative": self.negative_prob,
                "neutral": self.neutral_prob,
            },
        }


@dataclass
class StoreResult:
    """Outcome of a mutating store operation. Failures carry a message, never an exception."""

    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None
    message: str | None = None


@dataclass
class ClassCount:
    """Raw per-class group from the store: row count and mean confidence."""

    predicted_class: str
    count: int
    avg_confidence: float


@dataclass
class TableSummary:
    """Row count and newest created_at. healthy is False when the query itself failed."""

    total_entries: int = 0
    last_updated: datetime | None = None
    healthy: bool = True
