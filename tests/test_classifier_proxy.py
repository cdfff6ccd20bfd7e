"""
Classifier proxy: verbatim forwarding, status/body relay, and 500 on transport failure.
"""

from __future__ import annotations

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from backend_sentiment.api_server.classifier_proxy import CONNECTIVITY_ERROR
from backend_sentiment.api_server.server import create_app
from tests.factories import make_classifier


@pytest.fixture
def proxy_client(settings, store):
    """Build a client whose classifier upstream is the given handler."""
    clients = []

    def build(handler):
        app = create_app(settings, store=store, classifier=make_classifier(handler))
        c = TestClient(app)
        c.__enter__()
        clients.append(c)
        return c

    yield build
    for c in clients:
        c.__exit__(None, None, None)


def test_predict_relays_upstream_response(proxy_client):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = request.content
        return httpx.Response(200, json={"predicted_class": "positive", "confidence": 0.97})

    client = proxy_client(handler)
    body = json.dumps({"text": "great product", "extra": [1, 2]}).encode()
    r = client.post("/api/predict", content=body, headers={"Content-Type": "application/json"})
    assert r.status_code == 200
    assert r.json() == {"predicted_class": "positive", "confidence": 0.97}
    assert seen["path"] == "/predict"
    assert seen["body"] == body


def test_batch_predict_uses_batch_endpoint(proxy_client):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        return httpx.Response(200, json={"results": []})

    client = proxy_client(handler)
    r = client.post("/api/batch_predict", json={"texts": ["a", "b"]})
    assert r.status_code == 200
    assert r.json() == {"results": []}
    assert seen["path"] == "/batch_predict"


def test_upstream_error_status_is_relayed(proxy_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"detail": "text too long"})

    r = proxy_client(handler).post("/api/predict", json={"text": "x" * 10})
    assert r.status_code == 422
    assert r.json() == {"detail": "text too long"}


def test_unreachable_upstream_is_500(proxy_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    r = proxy_client(handler).post("/api/predict", json={"text": "hello"})
    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert body["error"] == CONNECTIVITY_ERROR
    assert "refused" not in r.text


def test_upstream_timeout_is_500(proxy_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    r = proxy_client(handler).post("/api/batch_predict", json={"texts": ["hello"]})
    assert r.status_code == 500
    assert r.json()["error"] == CONNECTIVITY_ERROR
    assert r.json()["message"] == "Classification service timed out"
