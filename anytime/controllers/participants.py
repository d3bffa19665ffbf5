import logging
import random
from typing import Any, Optional

from fastapi import APIRouter
from psycopg import errors as pg_errors
from pydantic import BaseModel, model_validator

from anytime import db
from anytime.controllers.lookups import ensure_open, require_event
from anytime.dependencies import Limits, OptionalBus
from anytime.errors import BadRequestError
from anytime.limits import can_add_participant, server_participant_limit_message
from anytime.models.participants import ParticipantResponse, ParticipantsResponse
from anytime.producers.event_updates import build_participant_joined, publish_event_update

logger = logging.getLogger("anytime.participants")
router = APIRouter(prefix="/api/participants", tags=["participants"])

MAX_NAME_LENGTH = 100
PARTICIPANT_COLORS = ["#3b82f6", "#10b981", "#8b5cf6", "#f59e0b", "#ef4444", "#06b6d4"]
DUPLICATE_NAME_MESSAGE = "A participant with this name already exists in this event"


class JoinEventRequest(BaseModel):
    event_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None

    @model_validator(mode="after")
    def validate_join(self) -> "JoinEventRequest":
        name = (self.name or "").strip()
        if not self.event_id or not name:
            raise ValueError("Event ID and name are required")
        if len(name) > MAX_NAME_LENGTH:
            raise ValueError(f"Name must be less than {MAX_NAME_LENGTH} characters")
        self.name = name
        self.email = (self.email or "").strip() or None
        return self


def pick_color() -> str:
    return random.choice(PARTICIPANT_COLORS)


@router.get("", response_model=ParticipantsResponse)
async def list_participants(event_id: Optional[str] = None) -> dict[str, Any]:
    if not event_id:
        raise BadRequestError(detail="Event ID is required")
    logger.info("GET /api/participants event_id=%s", event_id)
    participants = await db.list_participants(event_id)
    return {"participants": participants}


@router.post("", status_code=201, response_model=ParticipantResponse)
async def join_event(req: JoinEventRequest, limits: Limits, bus: OptionalBus) -> dict[str, Any]:
    logger.info("POST /api/participants event_id=%s name=%s", req.event_id, req.name)
    event = await require_event(req.event_id)
    ensure_open(event)

    count = await db.count_participants(req.event_id)
    if not can_add_participant(count, limits.max_participants_per_event):
        logger.warning("Event %s is full (%d participants)", req.event_id, count)
        raise BadRequestError(detail=server_participant_limit_message(limits.max_participants_per_event))

    if await db.participant_name_taken(req.event_id, req.name):
        raise BadRequestError(detail=DUPLICATE_NAME_MESSAGE)

    try:
        participant = await db.create_participant(
            event_id=req.event_id,
            name=req.name,
            email=req.email,
            color=pick_color(),
            max_participants=limits.max_participants_per_event,
        )
    except pg_errors.UniqueViolation:
        # Lost a race with a concurrent join under the same name
        raise BadRequestError(detail=DUPLICATE_NAME_MESSAGE)
    if participant is None:
        # Filled up by a concurrent join since the count above
        logger.warning("Event %s filled up during join", req.event_id)
        raise BadRequestError(detail=server_participant_limit_message(limits.max_participants_per_event))

    logger.info("Participant %s joined event %s", participant["id"], req.event_id)
    await publish_event_update(bus, req.event_id, build_participant_joined(participant))
    return {"participant": participant}
