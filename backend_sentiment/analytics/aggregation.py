"""
Statistics over stored sentiment results.

summarize_classes() and build_chart_data() are pure; the get_* helpers read from a
SentimentStore and are blocking (run them in a worker thread from async code).
An empty or unavailable store yields empty statistics.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from backend_sentiment.analytics.models import ChartEntry, ClassStat, DatabaseInfo
from backend_sentiment.database.database import STATUS_ERROR, SentimentStore
from backend_sentiment.database.models import ClassCount

SENTIMENT_COLORS = {
    "positive": "#22c55e",
    "negative": "#ef4444",
    "neutral": "#6b7280",
}
DEFAULT_COLOR = "#6b7280"


def _round_half_up(value: float, places: int) -> float:
    """Round like SQL ROUND(): halves away from zero, not to even."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def sentiment_color(label: str) -> str:
    return SENTIMENT_COLORS.get(label, DEFAULT_COLOR)


def _display_name(label: str) -> str:
    """First character upper-cased, rest unchanged."""
    return label[:1].upper() + label[1:]


def summarize_classes(groups: list[ClassCount]) -> list[ClassStat]:
    """
    Turn raw groups into stats with percentages of the grand total.
    Order: count descending; equal counts keep their incoming order.
    """
    total = sum(g.count for g in groups)
    if total == 0:
        return []
    stats = [
        ClassStat(
            predicted_class=g.predicted_class,
            count=g.count,
            avg_confidence=_round_half_up(g.avg_confidence, 4),
            percentage=_round_half_up(g.count * 100.0 / total, 2),
        )
        for g in groups
    ]
    # sorted() is stable, so ties keep the store's group order
    return sorted(stats, key=lambda s: s.count, reverse=True)


def build_chart_data(stats: list[ClassStat]) -> list[ChartEntry]:
    return [
        ChartEntry(
            name=_display_name(s.predicted_class),
            value=s.percentage,
            count=s.count,
            avg_confidence=s.avg_confidence,
            color=sentiment_color(s.predicted_class),
        )
        for s in stats
    ]


def get_sentiment_stats(store: SentimentStore) -> list[ClassStat]:
    return summarize_classes(store.class_breakdown())


def get_chart_data(store: SentimentStore) -> list[ChartEntry]:
    return build_chart_data(get_sentiment_stats(store))


def get_database_info(store: SentimentStore) -> DatabaseInfo:
    """Row count, newest created_at, type tag and the store's connection status."""
    summary = store.count_and_last_updated()
    status = store.connection_status if summary.healthy else STATUS_ERROR
    return DatabaseInfo(
        total_entries=summary.total_entries,
        last_updated=summary.last_updated,
        database_type=store.database_type,
        connection_status=status,
    )
