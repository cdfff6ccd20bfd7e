"""
Pytest fixtures for Backend Sentiment tests. Uses a temporary SQLite DB per test and a
mocked classifier transport, so no PostgreSQL or network access is needed.
"""

from __future__ import annotations

import pytest

from backend_sentiment.api_server.server import create_app
from backend_sentiment.config import Settings
from backend_sentiment.database import open_store
from tests.factories import CLASSIFIER_URL, make_classifier


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url=None,
        environment="development",
        cors_origins=("http://localhost:5173",),
        classifier_base_url=CLASSIFIER_URL,
        classifier_timeout_sec=2.0,
    )


@pytest.fixture
def store(tmp_path, monkeypatch):
    """Connected store on a fresh SQLite file. DATABASE_URL unset so nothing touches Postgres."""
    monkeypatch.delenv("DATABASE_URL", raising=False)
    s = open_store(f"sqlite:///{tmp_path / 'sentiment.db'}")
    yield s
    s.close()


@pytest.fixture
def app(settings, store):
    return create_app(settings, store=store, classifier=make_classifier())


@pytest.fixture
def client(app):
    """FastAPI TestClient; entering it runs the lifespan."""
    from fastapi.testclient import TestClient

    with TestClient(app) as c:
        yield c
