"""
FastAPI dependencies: the store, broadcast hub and classifier proxy live on app.state,
set by create_app() or the lifespan.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from backend_sentiment.api_server.broadcast import BroadcastHub
    from backend_sentiment.api_server.classifier_proxy import ClassifierProxy
    from backend_sentiment.database import SentimentStore


def get_store(request: Request) -> SentimentStore:
    return request.app.state.store


def get_hub(request: Request) -> BroadcastHub:
    return request.app.state.hub


def get_classifier(request: Request) -> ClassifierProxy:
    return request.app.state.classifier
