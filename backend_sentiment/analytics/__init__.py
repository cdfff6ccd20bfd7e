"""
Aggregation layer: per-class statistics, chart projection and database info.

Pure derivation from store reads; never mutates the store.
"""

from backend_sentiment.analytics.aggregation import (
    SENTIMENT_COLORS,
    build_chart_data,
    get_chart_data,
    get_database_info,
    get_sentiment_stats,
    sentiment_color,
    summarize_classes,
)
from backend_sentiment.analytics.models import ChartEntry, ClassStat, DatabaseInfo

__all__ = [
    "SENTIMENT_COLORS",
    "build_chart_data",
    "get_chart_data",
    "get_database_info",
    "get_sentiment_stats",
    "sentiment_color",
    "summarize_classes",
    "ChartEntry",
    "ClassStat",
    "DatabaseInfo",
]
