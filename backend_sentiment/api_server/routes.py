"""
REST endpoints under /api.

Store and aggregation calls are blocking and run in the worker threadpool, so the
event loop keeps serving other requests. Mutations (save, clear) await a broadcast
of the new aggregate view before responding; subscriber delivery itself is detached.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend_sentiment.analytics import build_chart_data, get_chart_data, get_database_info, get_sentiment_stats
from backend_sentiment.api_server.broadcast import BroadcastHub, collect_dashboard
from backend_sentiment.api_server.dependencies import get_hub, get_store
from backend_sentiment.core.exceptions import ValidationError
from backend_sentiment.database import SentimentStore, validate_record
from backend_sentiment.sentiment_logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Sentiment"])


class SaveSentimentRequest(BaseModel):
    """POST /api/save-sentiment body. Presence of the first four fields is checked in the handler (400)."""

    text: str | None = Field(None, description="Classified input text")
    predicted_class: str | None = Field(None, description="positive | negative | neutral")
    confidence: float | None = Field(None, description="Confidence of the predicted class (0–1)")
    all_probabilities: dict[str, float] | None = Field(
        None, description="Probabilities keyed by positive, negative, neutral"
    )
    source: str | None = Field(None, max_length=64, description="Provenance tag; defaults to web_analyzer")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health(store: SentimentStore = Depends(get_store)) -> JSONResponse:
    """Liveness plus database info (total entries, type, connection status, last update)."""
    try:
        info = await run_in_threadpool(get_database_info, store)
    except Exception as e:
        logger.exception("health_check_failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={
                "status": "ERROR",
                "message": "Database connection failed",
                "error": str(e),
                "timestamp": _now_iso(),
            },
        )
    return JSONResponse(
        content={
            "status": "OK",
            "message": "Database API is running",
            "database": info.to_dict(),
            "timestamp": _now_iso(),
        }
    )


@router.post("/save-sentiment")
async def save_sentiment(
    body: SaveSentimentRequest,
    store: SentimentStore = Depends(get_store),
    hub: BroadcastHub = Depends(get_hub),
) -> JSONResponse:
    """
    Persist one classification result, then return it with fresh stats and chart data.
    Missing text/predicted_class/confidence/all_probabilities → 400, nothing written.
    """
    payload = body.model_dump(exclude_none=True)
    try:
        validate_record(payload)
    except ValidationError as e:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": str(e), "fields": e.fields},
        )

    result = await run_in_threadpool(store.insert, payload)
    if not result.success:
        logger.warning("save_sentiment_failed", error=result.error)
        return JSONResponse(status_code=500, content={"success": False, "error": result.error})

    stats = await run_in_threadpool(get_sentiment_stats, store)
    await hub.broadcast_update(store)

    return JSONResponse(
        content={
            "success": True,
            "message": "Sentiment analysis saved successfully",
            "data": result.data,
            "current_stats": [s.to_dict() for s in stats],
            "chart_data": [c.to_dict() for c in build_chart_data(stats)],
        }
    )


@router.get("/sentiment-data")
async def sentiment_data(
    limit: int | None = Query(None, ge=0, description="Return only the first N (newest) records"),
    store: SentimentStore = Depends(get_store),
) -> dict[str, Any]:
    """All records newest first; limit truncates the response, total is the full count."""
    try:
        records = await run_in_threadpool(store.list_all)
    except Exception as e:
        logger.exception("sentiment_data_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to retrieve sentiment data") from e
    data = records[:limit] if limit is not None else records
    return {"success": True, "data": data, "total": len(records)}


@router.get("/sentiment-stats")
async def sentiment_stats(store: SentimentStore = Depends(get_store)) -> dict[str, Any]:
    """Statistics, chart data, 5 most recent entries and database info."""
    try:
        dashboard = await collect_dashboard(store)
    except Exception as e:
        logger.exception("sentiment_stats_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to retrieve sentiment statistics") from e
    return {"success": True, **dashboard}


@router.get("/chart-data")
async def chart_data(store: SentimentStore = Depends(get_store)) -> dict[str, Any]:
    try:
        entries = await run_in_threadpool(get_chart_data, store)
    except Exception as e:
        logger.exception("chart_data_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to retrieve chart data") from e
    return {"success": True, "chart_data": [c.to_dict() for c in entries]}


@router.delete("/clear-data")
async def clear_data(
    store: SentimentStore = Depends(get_store),
    hub: BroadcastHub = Depends(get_hub),
) -> JSONResponse:
    """Delete every record and broadcast the now-empty view."""
    result = await run_in_threadpool(store.delete_all)
    if not result.success:
        logger.warning("clear_data_failed", error=result.error)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": result.error or "Failed to clear data"},
        )

    await hub.broadcast_update(store)
    return JSONResponse(content={"success": True, "message": "All sentiment data cleared successfully"})
