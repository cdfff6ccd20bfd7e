"""
Store adapter for sentiment results over a relational database (SQLAlchemy).

Two explicit variants behind one interface:

- SQLAlchemyStore: connected to PostgreSQL (or SQLite for local runs/tests) through a
  bounded connection pool.
- UnavailableStore: no DATABASE_URL, or the startup connection check failed. Every operation
  returns an empty/zero result or StoreResult(success=False); nothing raises.

Callers tell "empty because no data" from "empty because disconnected" via
store.connection_status. Data operations never raise: SQLAlchemy errors are caught at
this boundary, logged, and converted to empty results or failed StoreResults.
All methods are blocking; the API server runs them in a worker thread.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from sqlalchemy import create_engine, delete, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from backend_sentiment.core.exceptions import ValidationError
from backend_sentiment.database.models import (
    DEFAULT_SOURCE,
    PROBABILITY_LABELS,
    Base,
    ClassCount,
    SentimentAnalysis,
    StoreResult,
    TableSummary,
)
from backend_sentiment.sentiment_logging import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS = ("text", "predicted_class", "confidence", "all_probabilities")

# connection_status values
STATUS_CONNECTED = "connected"
STATUS_DISCONNECTED = "disconnected"
STATUS_FALLBACK = "fallback_mode"
STATUS_ERROR = "error"

NOT_CONFIGURED_MESSAGE = "PostgreSQL not configured"
CONNECTION_FAILED_MESSAGE = "PostgreSQL connection failed"

_DIALECT_LABELS = {
    "postgresql": "PostgreSQL",
    "sqlite": "SQLite",
    "mysql": "MySQL",
}


def _redact_url(url: str) -> str:
    """Host/path part of a database URL, without credentials or query."""
    return url.split("?")[0].split("@")[-1].split("//")[-1]


def missing_fields(payload: Mapping[str, Any]) -> list[str]:
    """
    Names of required insert fields that are absent or empty.
    confidence 0.0 is a valid value; None is missing.
    """
    missing = []
    for name in REQUIRED_FIELDS:
        value = payload.get(name)
        if value is None:
            missing.append(name)
        elif isinstance(value, str) and not value.strip():
            missing.append(name)
        elif name == "all_probabilities" and not value:
            missing.append(name)
    return missing


def validate_record(payload: Mapping[str, Any]) -> dict[str, Any]:
    """
    Check an insert payload and flatten it into column values.
    Raises ValidationError listing missing fields or describing the bad value.
    The probability triple is stored as given; it is not required to sum to 1.
    """
    missing = missing_fields(payload)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)

    probabilities = payload["all_probabilities"]
    if not isinstance(probabilities, Mapping):
        raise ValidationError("all_probabilities must be an object", fields=["all_probabilities"])
    absent = [label for label in PROBABILITY_LABELS if probabilities.get(label) is None]
    if absent:
        raise ValidationError(
            f"all_probabilities missing: {', '.join(absent)}",
            fields=["all_probabilities"],
        )

    try:
        confidence = float(payload["confidence"])
        probs = {label: float(probabilities[label]) for label in PROBABILITY_LABELS}
    except (TypeError, ValueError) as e:
        raise ValidationError(f"confidence and probabilities must be numeric: {e}") from e

    source = payload.get("source")
    return {
        "text": str(payload["text"]),
        "predicted_class": str(payload["predicted_class"]),
        "confidence": confidence,
        "positive_prob": probs["positive"],
        "negative_prob": probs["negative"],
        "neutral_prob": probs["neutral"],
        "source": str(source).strip() if source and str(source).strip() else DEFAULT_SOURCE,
    }


# -----------------------------------------------------------------------------
# Interface
# -----------------------------------------------------------------------------


class SentimentStore(ABC):
    """Persistence for SentimentAnalysis rows over a single table."""

    database_type: str = "PostgreSQL"

    @property
    @abstractmethod
    def connection_status(self) -> str:
        """connected | disconnected | fallback_mode."""
        ...

    @property
    def is_available(self) -> bool:
        return self.connection_status == STATUS_CONNECTED

    @abstractmethod
    def insert(self, payload: Mapping[str, Any]) -> StoreResult:
        """Validate and persist one record; data is the stored row with all_probabilities regrouped."""
        ...

    @abstractmethod
    def list_all(self) -> list[dict[str, Any]]:
        """All records, newest first."""
        ...

    @abstractmethod
    def list_recent(self, limit: int = 10) -> list[dict[str, Any]]:
        """At most limit records, newest first."""
        ...

    @abstractmethod
    def class_breakdown(self) -> list[ClassCount]:
        """Per predicted_class count and mean confidence, largest group first."""
        ...

    @abstractmethod
    def count_and_last_updated(self) -> TableSummary:
        """Total rows and max(created_at); zero and None when empty."""
        ...

    @abstractmethod
    def delete_all(self) -> StoreResult:
        """Remove every row. Idempotent."""
        ...

    def close(self) -> None:
        """Release pooled connections."""


# -----------------------------------------------------------------------------
# Fallback variant
# -----------------------------------------------------------------------------


class UnavailableStore(SentimentStore):
    """Store without a database. Reads are empty, writes fail with a message."""

    def __init__(self, *, configured: bool = False, reason: str | None = None) -> None:
        self._configured = configured
        self.reason = reason or (CONNECTION_FAILED_MESSAGE if configured else NOT_CONFIGURED_MESSAGE)
        self.database_type = "PostgreSQL" if configured else "PostgreSQL (Not Configured)"

    @property
    def connection_status(self) -> str:
        return STATUS_FALLBACK if self._configured else STATUS_DISCONNECTED

    def insert(self, payload: Mapping[str, Any]) -> StoreResult:
        return StoreResult(success=False, error=self.reason)

    def list_all(self) -> list[dict[str, Any]]:
        return []

    def list_recent(self, limit: int = 10) -> list[dict[str, Any]]:
        return []

    def class_breakdown(self) -> list[ClassCount]:
        return []

    def count_and_last_updated(self) -> TableSummary:
        return TableSummary()

    def delete_all(self) -> StoreResult:
        return StoreResult(success=False, error=self.reason)


# -----------------------------------------------------------------------------
# Connected variant
# -----------------------------------------------------------------------------


class SQLAlchemyStore(SentimentStore):
    """Connected store; one session per operation from a bounded pool."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
        )
        self.database_type = _DIALECT_LABELS.get(engine.dialect.name, engine.dialect.name)

    @property
    def connection_status(self) -> str:
        return STATUS_CONNECTED

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        """Context manager for a single session. Commits on success, rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ensure_schema(self) -> None:
        """Create the sentiment_analysis table and indexes if they do not exist."""
        Base.metadata.create_all(bind=self._engine)

    def ping(self) -> None:
        """Round-trip a trivial query. Raises OperationalError when unreachable."""
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def insert(self, payload: Mapping[str, Any]) -> StoreResult:
        try:
            values = validate_record(payload)
        except ValidationError as e:
            logger.info("sentiment_insert_rejected", error=str(e), fields=e.fields)
            return StoreResult(success=False, error=str(e))
        try:
            with self._session_scope() as session:
                row = SentimentAnalysis(**values)
                session.add(row)
                session.flush()
                data = row.to_dict()
            logger.info("sentiment_saved", id=data["id"], predicted_class=data["predicted_class"])
            return StoreResult(success=True, data=data)
        except SQLAlchemyError as e:
            logger.exception("sentiment_insert_failed", error=str(e))
            return StoreResult(success=False, error=str(e))

    def _newest_first(self, limit: int | None) -> list[dict[str, Any]]:
        stmt = select(SentimentAnalysis).order_by(
            SentimentAnalysis.created_at.desc(), SentimentAnalysis.id.desc()
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session_scope() as session:
            return [row.to_dict() for row in session.scalars(stmt)]

    def list_all(self) -> list[dict[str, Any]]:
        try:
            return self._newest_first(None)
        except SQLAlchemyError as e:
            logger.exception("sentiment_list_all_failed", error=str(e))
            return []

    def list_recent(self, limit: int = 10) -> list[dict[str, Any]]:
        try:
            return self._newest_first(max(int(limit), 0))
        except SQLAlchemyError as e:
            logger.exception("sentiment_list_recent_failed", limit=limit, error=str(e))
            return []

    def class_breakdown(self) -> list[ClassCount]:
        count = func.count(SentimentAnalysis.id).label("count")
        stmt = (
            select(
                SentimentAnalysis.predicted_class,
                count,
                func.avg(SentimentAnalysis.confidence).label("avg_confidence"),
            )
            .group_by(SentimentAnalysis.predicted_class)
            .order_by(count.desc(), SentimentAnalysis.predicted_class)
        )
        try:
            with self._session_scope() as session:
                rows = session.execute(stmt).all()
        except SQLAlchemyError as e:
            logger.exception("sentiment_breakdown_failed", error=str(e))
            return []
        return [
            ClassCount(
                predicted_class=r.predicted_class,
                count=int(r.count),
                avg_confidence=float(r.avg_confidence or 0.0),
            )
            for r in rows
        ]

    def count_and_last_updated(self) -> TableSummary:
        stmt = select(
            func.count(SentimentAnalysis.id),
            func.max(SentimentAnalysis.created_at),
        )
        try:
            with self._session_scope() as session:
                total, last_updated = session.execute(stmt).one()
        except SQLAlchemyError as e:
            logger.exception("sentiment_summary_failed", error=str(e))
            return TableSummary(healthy=False)
        return TableSummary(total_entries=int(total or 0), last_updated=last_updated)

    def delete_all(self) -> StoreResult:
        try:
            with self._session_scope() as session:
                deleted = session.execute(delete(SentimentAnalysis)).rowcount
            logger.info("sentiment_cleared", deleted=deleted)
            return StoreResult(success=True, message="All data cleared successfully")
        except SQLAlchemyError as e:
            logger.exception("sentiment_clear_failed", error=str(e))
            return StoreResult(success=False, error=str(e))

    def close(self) -> None:
        self._engine.dispose()
        logger.info("sentiment_store_closed")


# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------


def create_store_engine(
    url: str,
    *,
    production: bool = False,
    pool_size: int = 10,
    max_overflow: int = 10,
    pool_timeout_sec: float = 30.0,
    connect_timeout_sec: int = 5,
    pool_recycle_sec: int = 30,
) -> Engine:
    """
    Engine with a bounded pool. Requests beyond pool_size + max_overflow wait up to
    pool_timeout_sec for a free connection. SQLite gets SQLAlchemy's default pool.
    """
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False}, pool_pre_ping=True)
    connect_args: dict[str, Any] = {"connect_timeout": connect_timeout_sec}
    if production and url.startswith("postgresql"):
        connect_args["sslmode"] = "require"
    return create_engine(
        url,
        connect_args=connect_args,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout_sec,
        pool_recycle=pool_recycle_sec,
        pool_pre_ping=True,
    )


def open_store(url: str | None, **engine_options: Any) -> SentimentStore:
    """
    Open the store for url, creating the table if needed.

    Returns UnavailableStore when url is empty or the database cannot be reached.
    Any other failure (bad URL, missing driver, schema errors) propagates: it is a
    startup-time fatal error, not a degraded mode.
    """
    if not url:
        logger.warning("sentiment_store_not_configured", message="DATABASE_URL not set; persistence disabled")
        return UnavailableStore(configured=False)

    engine = create_store_engine(url, **engine_options)
    store = SQLAlchemyStore(engine)
    try:
        store.ping()
    except OperationalError as e:
        logger.error("sentiment_store_connection_failed", url=_redact_url(url), error=str(e))
        engine.dispose()
        return UnavailableStore(configured=True)

    store.ensure_schema()
    logger.info("sentiment_store_connected", url=_redact_url(url), database_type=store.database_type)
    return store
