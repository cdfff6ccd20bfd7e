"""
Database layer: sentiment_analysis table, store adapter and its fallback variant.

open_store() returns a connected SQLAlchemyStore, or an UnavailableStore when
DATABASE_URL is unset or the database cannot be reached.
"""

from backend_sentiment.database.database import (
    SQLAlchemyStore,
    SentimentStore,
    UnavailableStore,
    missing_fields,
    open_store,
    validate_record,
)
from backend_sentiment.database.models import (
    ClassCount,
    SentimentAnalysis,
    StoreResult,
    TableSummary,
)

__all__ = [
    "SQLAlchemyStore",
    "SentimentStore",
    "UnavailableStore",
    "missing_fields",
    "open_store",
    "validate_record",
    "ClassCount",
    "SentimentAnalysis",
    "StoreResult",
    "TableSummary",
]
