"""
Change-notice bus for events, backed by Redis pub/sub.
"""
import json
from typing import Final

import redis.asyncio as redis

from anytime.messages import EventUpdate

CHANNEL_EVENT_PREFIX: Final[str] = "event:"


class EventBus:
    def __init__(self, redis_client: redis.Redis):
        self.redis_client = redis_client

    @staticmethod
    def event_channel(event_id: str) -> str:
        return f"{CHANNEL_EVENT_PREFIX}{event_id}"

    async def publish_update(self, event_id: str, update: EventUpdate) -> int:
        return await self.redis_client.publish(self.event_channel(event_id), json.dumps(update))
