"""
FastAPI server: sentiment results, statistics, live updates and classifier proxy.

create_app() wires routes, middleware and error handlers. The store, broadcast hub and
classifier proxy are explicit handles on app.state: pass them in (tests, main.py) or
let the lifespan open them from settings. On shutdown the hub, proxy client and
connection pool are closed.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from backend_sentiment import __version__
from backend_sentiment.api_server import broadcast, classifier_proxy, routes
from backend_sentiment.api_server.broadcast import BroadcastHub
from backend_sentiment.api_server.classifier_proxy import ClassifierProxy
from backend_sentiment.api_server.middleware import (
    install_cors,
    install_error_handlers,
    install_request_logging,
)
from backend_sentiment.config import Settings, get_settings
from backend_sentiment.database import SentimentStore, open_store
from backend_sentiment.sentiment_logging import configure_logging, get_logger

logger = get_logger(__name__)


def store_options(settings: Settings) -> dict[str, Any]:
    """Engine keyword arguments for open_store() from settings."""
    return {
        "production": settings.is_production,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout_sec": settings.db_pool_timeout_sec,
        "connect_timeout_sec": settings.db_connect_timeout_sec,
        "pool_recycle_sec": settings.db_pool_recycle_sec,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open missing handles on startup; close all of them on shutdown."""
    settings: Settings = app.state.settings
    if app.state.store is None:
        app.state.store = await run_in_threadpool(open_store, settings.database_url, **store_options(settings))
    if app.state.classifier is None:
        app.state.classifier = ClassifierProxy(
            settings.classifier_base_url,
            timeout_sec=settings.classifier_timeout_sec,
        )
    logger.info(
        "api_started",
        connection_status=app.state.store.connection_status,
        database_type=app.state.store.database_type,
        classifier=app.state.classifier.base_url,
    )

    yield

    await app.state.hub.close()
    await app.state.classifier.aclose()
    await run_in_threadpool(app.state.store.close)
    logger.info("api_stopped")


def create_app(
    settings: Settings | None = None,
    *,
    store: SentimentStore | None = None,
    classifier: ClassifierProxy | None = None,
    hub: BroadcastHub | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)
    app = FastAPI(
        title="Backend Sentiment API",
        description="Stored sentiment analysis results, statistics, live updates and classifier proxy.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.classifier = classifier
    app.state.hub = hub or BroadcastHub()

    install_request_logging(app)
    install_cors(app, settings)
    install_error_handlers(app)

    app.include_router(routes.router, prefix="/api")
    app.include_router(classifier_proxy.router, prefix="/api")
    app.include_router(broadcast.router)
    return app
