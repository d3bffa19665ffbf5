import json

import pytest
import fakeredis.aioredis as fakeredis

from anytime.bus import EventBus
from anytime.producers.event_updates import (
    build_availability_updated,
    build_event_deleted,
    build_participant_joined,
    publish_event_update,
)


class TestEventBus:
    def test_event_channel(self):
        assert EventBus.event_channel("abc123") == "event:abc123"

    @pytest.mark.asyncio
    async def test_publish_reaches_subscribers(self):
        redis_client = fakeredis.FakeRedis(decode_responses=True)
        pubsub = redis_client.pubsub()
        await pubsub.subscribe("event:abc")
        await pubsub.get_message(timeout=1)

        await EventBus(redis_client).publish_update("abc", build_event_deleted("abc"))

        message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1)
        assert message is not None
        assert json.loads(message["data"])["type"] == "event_deleted"
        await pubsub.aclose()


class TestProducers:
    def test_participant_joined(self):
        notice = build_participant_joined(
            {"id": "p1", "event_id": "e1", "name": "Ana", "color": "#3b82f6"}
        )
        assert notice["type"] == "participant_joined"
        assert notice["participant_id"] == "p1"
        assert notice["event_id"] == "e1"

    def test_availability_updated(self):
        notice = build_availability_updated("e1", "p1", 4)
        assert notice["slots"] == 4
        assert "timestamp" in notice

    @pytest.mark.asyncio
    async def test_publish_without_bus_is_skipped(self):
        await publish_event_update(None, "e1", build_event_deleted("e1"))
