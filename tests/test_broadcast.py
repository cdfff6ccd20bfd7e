"""
Push channel: WebSocket subscribers get data_updated after save and clear; fan-out is
fire-and-forget and failures never reach the HTTP caller.
"""

from __future__ import annotations

import asyncio

from backend_sentiment.api_server import broadcast
from backend_sentiment.api_server.broadcast import DATA_UPDATED_EVENT, BroadcastHub
from tests.factories import GREAT_PRODUCT, make_record

PAYLOAD_KEYS = {"statistics", "chart_data", "recent_entries", "database_info"}


def test_save_broadcasts_aggregate(client):
    with client.websocket_connect("/ws") as ws:
        r = client.post("/api/save-sentiment", json=GREAT_PRODUCT)
        assert r.status_code == 200
        message = ws.receive_json()

    assert message["event"] == DATA_UPDATED_EVENT
    data = message["data"]
    assert set(data) == PAYLOAD_KEYS
    assert data["statistics"] == r.json()["current_stats"]
    assert data["chart_data"] == r.json()["chart_data"]
    assert data["database_info"]["total_entries"] == 1
    assert data["recent_entries"][0]["text"] == "great product"


def test_clear_broadcasts_empty_state(client):
    client.post("/api/save-sentiment", json=GREAT_PRODUCT)
    with client.websocket_connect("/ws") as ws:
        assert client.delete("/api/clear-data").status_code == 200
        message = ws.receive_json()

    assert message["event"] == DATA_UPDATED_EVENT
    assert message["data"]["database_info"]["total_entries"] == 0
    assert message["data"]["statistics"] == []
    assert message["data"]["recent_entries"] == []


def test_every_subscriber_receives_update(client):
    with client.websocket_connect("/ws") as first, client.websocket_connect("/ws") as second:
        client.post("/api/save-sentiment", json=make_record("nice", "positive"))
        assert first.receive_json()["data"]["database_info"]["total_entries"] == 1
        assert second.receive_json()["data"]["database_info"]["total_entries"] == 1


def test_subscriber_gets_only_later_updates(client):
    client.post("/api/save-sentiment", json=make_record("before", "negative"))
    with client.websocket_connect("/ws") as ws:
        client.post("/api/save-sentiment", json=make_record("after", "positive"))
        message = ws.receive_json()
    # First message seen is the update triggered after connecting
    assert message["data"]["database_info"]["total_entries"] == 2
    assert message["data"]["recent_entries"][0]["text"] == "after"


def test_broadcast_failure_does_not_fail_save(client, monkeypatch):
    async def broken(store):
        raise RuntimeError("stats query blew up")

    monkeypatch.setattr(broadcast, "collect_dashboard", broken)
    r = client.post("/api/save-sentiment", json=GREAT_PRODUCT)
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert client.delete("/api/clear-data").status_code == 200


class _BrokenSocket:
    async def accept(self) -> None:
        pass

    async def send_json(self, message) -> None:
        raise RuntimeError("socket closed")


class _SlowSocket:
    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.received = []

    async def accept(self) -> None:
        pass

    async def send_json(self, message) -> None:
        await self.release.wait()
        self.received.append(message)


def test_dead_subscriber_is_dropped():
    async def scenario() -> int:
        hub = BroadcastHub()
        await hub.connect(_BrokenSocket())
        assert hub.subscriber_count == 1
        hub.publish(DATA_UPDATED_EVENT, {"statistics": []})
        await hub.drain()
        return hub.subscriber_count

    assert asyncio.run(scenario()) == 0


def test_publish_does_not_wait_for_slow_subscriber():
    async def scenario() -> None:
        hub = BroadcastHub()
        slow = _SlowSocket()
        await hub.connect(slow)
        assert hub.publish(DATA_UPDATED_EVENT, {"n": 1}) == 1
        # publish returned while the send is still blocked
        assert slow.received == []
        slow.release.set()
        await hub.drain()
        assert slow.received == [{"event": DATA_UPDATED_EVENT, "data": {"n": 1}}]

    asyncio.run(scenario())


def test_broadcast_update_without_subscribers(store):
    async def scenario() -> bool:
        hub = BroadcastHub()
        return await hub.broadcast_update(store)

    assert asyncio.run(scenario()) is True


class _RecordingSocket:
    def __init__(self) -> None:
        self.received = []

    async def accept(self) -> None:
        pass

    async def send_json(self, message) -> None:
        self.received.append(message)


class _HandshakingSocket(_RecordingSocket):
    """accept() completes only once the client side of the handshake is released."""

    def __init__(self) -> None:
        super().__init__()
        self.handshake_done = asyncio.Event()

    async def accept(self) -> None:
        await self.handshake_done.wait()


def test_save_with_subscriber_returns_200(client):
    with client.websocket_connect("/ws") as ws:
        r = client.post("/api/save-sentiment", json=GREAT_PRODUCT)
        ws.receive_json()
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert client.get("/api/sentiment-data").json()["total"] == 1


def test_publish_failure_does_not_fail_save(app, client, monkeypatch):
    def broken_publish(event, data):
        raise RuntimeError("fan-out failed")

    monkeypatch.setattr(app.state.hub, "publish", broken_publish)
    assert client.post("/api/save-sentiment", json=GREAT_PRODUCT).status_code == 200
    assert client.delete("/api/clear-data").status_code == 200


def test_broadcast_update_reaches_subscriber(store):
    async def scenario() -> tuple[bool, list]:
        hub = BroadcastHub()
        socket = _RecordingSocket()
        await hub.connect(socket)
        store.insert(GREAT_PRODUCT)
        published = await hub.broadcast_update(store)
        await hub.drain()
        return published, socket.received

    published, received = asyncio.run(scenario())
    assert published is True
    assert len(received) == 1
    assert received[0]["event"] == DATA_UPDATED_EVENT
    assert received[0]["data"]["database_info"]["total_entries"] == 1


def test_publish_during_handshake_keeps_subscriber():
    async def scenario() -> tuple[int, list]:
        hub = BroadcastHub()
        socket = _HandshakingSocket()
        connecting = asyncio.create_task(hub.connect(socket))
        await asyncio.sleep(0)
        hub.publish(DATA_UPDATED_EVENT, {"n": 1})
        await hub.drain()
        socket.handshake_done.set()
        await connecting
        hub.publish(DATA_UPDATED_EVENT, {"n": 2})
        await hub.drain()
        return hub.subscriber_count, socket.received

    count, received = asyncio.run(scenario())
    assert count == 1
    assert received == [{"event": DATA_UPDATED_EVENT, "data": {"n": 2}}]
