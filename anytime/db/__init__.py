"""Database package.

Repository functions are re-exported here so callers can write
``from anytime import db`` and ``await db.get_event(...)``.
"""

from anytime.db.availability import list_availability, replace_availability, upsert_availability
from anytime.db.core import close_pool, get_pool_stats, init_pool
from anytime.db.events import (
    count_events_since,
    create_event,
    delete_event,
    get_event,
    list_events_for_user,
    lock_event,
)
from anytime.db.participants import (
    count_participants,
    create_participant,
    get_participant,
    list_participants,
    participant_name_taken,
)

__all__ = [
    "close_pool",
    "count_events_since",
    "count_participants",
    "create_event",
    "create_participant",
    "delete_event",
    "get_event",
    "get_participant",
    "get_pool_stats",
    "init_pool",
    "list_availability",
    "list_events_for_user",
    "list_participants",
    "lock_event",
    "participant_name_taken",
    "replace_availability",
    "upsert_availability",
]
