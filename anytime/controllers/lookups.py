"""Lookups shared by the route handlers."""

import logging
import re
import uuid
from datetime import date
from typing import Any

from anytime import db
from anytime.errors import BadRequestError, ConflictError, NotFoundError

logger = logging.getLogger("anytime.lookups")

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")


def parse_date(value: str) -> date:
    """Strict YYYY-MM-DD. Raises ValueError otherwise."""
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise ValueError(f"Invalid date format: {value}")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Invalid date format: {value}")


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
        return True
    except ValueError:
        return False


async def require_event(event_id: str) -> dict[str, Any]:
    event = await db.get_event(event_id)
    if not event:
        logger.warning("Event not found: %s", event_id)
        raise NotFoundError(detail="Event not found", event_id=event_id)
    return event


def ensure_open(event: dict[str, Any]) -> None:
    if event["status"] != "open":
        raise ConflictError(detail="Event is locked", event_id=event["id"])


def ensure_slot_in_event(event: dict[str, Any], day: date, time_block: str) -> None:
    """Reject slots outside the event's date range or time-block set."""
    start = date.fromisoformat(event["start_date"])
    end = date.fromisoformat(event["end_date"])
    if not (start <= day <= end) or time_block not in event["time_blocks"]:
        logger.warning("Invalid slot %s %s for event %s", day, time_block, event["id"])
        raise BadRequestError(detail=f"Invalid slot: {day.isoformat()} {time_block}")
