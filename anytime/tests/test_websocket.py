import json
import asyncio

from anytime import state


class DummyPubSub:
    def __init__(self, data_text: str):
        self._data_text = data_text
        self.channels = []

    async def subscribe(self, channel: str):
        self.channels.append(channel)
        return True

    async def unsubscribe(self, _channel: str):
        return True

    async def close(self):
        return True

    async def aclose(self):
        return True

    async def listen(self):
        yield {"type": "subscribe", "data": 1}
        yield {"type": "message", "data": self._data_text}
        await asyncio.sleep(0)


def test_websocket_relays_event_updates(client, event_payload, monkeypatch):
    event = client.post("/api/events", json=event_payload).json()["event"]
    notice = {"type": "event_locked", "event_id": event["id"], "locked_at": None, "timestamp": "t"}
    pubsub = DummyPubSub(json.dumps(notice))
    monkeypatch.setattr(state.redis_client, "pubsub", lambda: pubsub)

    with client.websocket_connect(f"/ws/events/{event['id']}") as ws:
        received = json.loads(ws.receive_text())

    assert received == notice
    assert pubsub.channels == [f"event:{event['id']}"]


def test_websocket_closes_for_unknown_event(client):
    with client.websocket_connect("/ws/events/missing") as ws:
        message = ws.receive()
    assert message["type"] == "websocket.close"
    assert message["code"] == 4404


def test_websocket_closes_when_event_lookup_fails(client, fake_db, monkeypatch):
    async def broken_get_event(_event_id):
        raise OSError("database unreachable")

    monkeypatch.setattr(fake_db, "get_event", broken_get_event)

    with client.websocket_connect("/ws/events/any") as ws:
        message = ws.receive()
    assert message["type"] == "websocket.close"
    assert message["code"] == 1011
