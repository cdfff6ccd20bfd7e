"""
Push channel: WebSocket subscribers receive the aggregate view after every mutation.

Delivery is best-effort and at-most-once. New subscribers get no backlog. A mutating
request awaits the recomputation in broadcast_update(); each subscriber send then runs
as its own detached task, so a slow or dead socket never holds up the request or the
other subscribers.
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import APIRouter, WebSocket
from fastapi.concurrency import run_in_threadpool

from backend_sentiment.analytics import build_chart_data, get_database_info, get_sentiment_stats
from backend_sentiment.database import SentimentStore
from backend_sentiment.sentiment_logging import get_logger

logger = get_logger(__name__)

DATA_UPDATED_EVENT = "data_updated"
RECENT_ENTRIES_LIMIT = 5

router = APIRouter(tags=["Live updates"])


async def collect_dashboard(store: SentimentStore) -> dict[str, Any]:
    """
    Statistics, chart data, 5 most recent entries and database info, read concurrently.
    Same payload for GET /api/sentiment-stats and the data_updated event.
    """
    stats, recent, info = await asyncio.gather(
        run_in_threadpool(get_sentiment_stats, store),
        run_in_threadpool(store.list_recent, RECENT_ENTRIES_LIMIT),
        run_in_threadpool(get_database_info, store),
    )
    return {
        "statistics": [s.to_dict() for s in stats],
        "chart_data": [c.to_dict() for c in build_chart_data(stats)],
        "recent_entries": recent,
        "database_info": info.to_dict(),
    }


class BroadcastHub:
    """Set of connected WebSocket subscribers with fire-and-forget fan-out."""

    def __init__(self) -> None:
        self._subscribers: set[WebSocket] = set()
        # Strong refs so pending send tasks are not garbage-collected mid-flight
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        # Only accepted sockets are subscribers; a send before accept would drop them
        self._subscribers.add(websocket)
        logger.info("ws_subscriber_connected", subscribers=self.subscriber_count)

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._subscribers:
            self._subscribers.discard(websocket)
            logger.info("ws_subscriber_disconnected", subscribers=self.subscriber_count)

    def publish(self, event: str, data: dict[str, Any]) -> int:
        """Schedule one send per subscriber and return immediately. Returns the fan-out size."""
        message = {"event": event, "data": data}
        targets = list(self._subscribers)
        for websocket in targets:
            task = asyncio.create_task(self._send(websocket, message))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return len(targets)

    async def _send(self, websocket: WebSocket, message: dict[str, Any]) -> None:
        try:
            await websocket.send_json(message)
        except Exception as e:
            # Closed or broken socket: drop it, no retry
            logger.info("ws_send_failed", error=str(e))
            self.disconnect(websocket)

    async def broadcast_update(self, store: SentimentStore) -> bool:
        """
        Recompute the aggregate view and publish it as data_updated.
        Failures are logged and swallowed; returns False when nothing was published.
        """
        try:
            payload = await collect_dashboard(store)
            sent = self.publish(DATA_UPDATED_EVENT, payload)
            logger.info(
                "broadcast_published",
                event_name=DATA_UPDATED_EVENT,
                subscribers=sent,
                total_entries=payload["database_info"]["total_entries"],
            )
        except Exception as e:
            logger.exception("broadcast_failed", error=str(e))
            return False
        return True

    async def drain(self) -> None:
        """Wait for in-flight sends (tests and shutdown)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        for websocket in list(self._subscribers):
            try:
                await websocket.close()
            except Exception as e:
                logger.debug("ws_close_failed", error=str(e))
        self._subscribers.clear()


@router.websocket("/ws")
async def updates_socket(websocket: WebSocket) -> None:
    """Subscribe to data_updated events. Incoming client messages are ignored."""
    hub: BroadcastHub = websocket.app.state.hub
    await hub.connect(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        hub.disconnect(websocket)
