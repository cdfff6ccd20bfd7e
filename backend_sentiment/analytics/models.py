"""
Derived (never persisted) views over the sentiment_analysis table.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from backend_sentiment.database.models import iso_utc


@dataclass
class ClassStat:
    """Per predicted_class summary."""

    predicted_class: str
    count: int
    avg_confidence: float
    """Mean confidence, rounded to 4 decimals."""
    percentage: float
    """Share of all rows, rounded to 2 decimals."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ChartEntry:
    """Display projection of a ClassStat for the dashboard pie/bar chart."""

    name: str
    value: float
    count: int
    avg_confidence: float
    color: str

    def to_dict(self) -> dict[str, Any]:
        # Front-end contract uses camelCase for this one key
        return {
            "name": self.name,
            "value": self.value,
            "count": self.count,
            "avgConfidence": self.avg_confidence,
            "color": self.color,
        }


@dataclass
class DatabaseInfo:
    total_entries: int
    last_updated: datetime | None
    database_type: str
    connection_status: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_entries": self.total_entries,
            "last_updated": iso_utc(self.last_updated),
            "database_type": self.database_type,
            "connection_status": self.connection_status,
        }
