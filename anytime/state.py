from typing import Optional

import redis.asyncio as redis

from anytime.bus import EventBus

# Runtime resources set up by lifespan.setup_resources and cleared on shutdown
redis_client: Optional[redis.Redis] = None
event_bus: Optional[EventBus] = None
db_enabled: bool = False
