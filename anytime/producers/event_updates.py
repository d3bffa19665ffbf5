import logging
from datetime import datetime, timezone
from typing import Any, Optional

from anytime.bus import EventBus
from anytime.messages import (
    AvailabilityUpdated,
    EventDeleted,
    EventLocked,
    EventUpdate,
    ParticipantJoined,
)

logger = logging.getLogger("anytime.producers")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_availability_updated(event_id: str, participant_id: str, slots: int) -> AvailabilityUpdated:
    return {
        "type": "availability_updated",
        "event_id": event_id,
        "participant_id": participant_id,
        "slots": slots,
        "timestamp": _now(),
    }


def build_participant_joined(participant: dict[str, Any]) -> ParticipantJoined:
    return {
        "type": "participant_joined",
        "event_id": participant["event_id"],
        "participant_id": participant["id"],
        "name": participant["name"],
        "color": participant["color"],
        "timestamp": _now(),
    }


def build_event_locked(event: dict[str, Any]) -> EventLocked:
    return {
        "type": "event_locked",
        "event_id": event["id"],
        "locked_at": event.get("locked_at"),
        "timestamp": _now(),
    }


def build_event_deleted(event_id: str) -> EventDeleted:
    return {"type": "event_deleted", "event_id": event_id, "timestamp": _now()}


async def publish_event_update(event_bus: Optional[EventBus], event_id: str, update: EventUpdate) -> None:
    """Fan a change notice out to live viewers of an event.

    The write it describes is already committed, so a Redis failure is
    logged and not raised.
    """
    if event_bus is None:
        return
    try:
        await event_bus.publish_update(event_id, update)
    except Exception as e:
        logger.warning("Failed to publish %s for event %s: %s", update["type"], event_id, e)
