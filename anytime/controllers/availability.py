import logging
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Response
from pydantic import BaseModel, field_validator, model_validator

from anytime import db
from anytime.controllers.lookups import (
    TIME_RE,
    ensure_open,
    ensure_slot_in_event,
    is_uuid,
    parse_date,
    require_event,
)
from anytime.dependencies import OptionalBus
from anytime.errors import BadRequestError
from anytime.models.availability import AvailabilityResponse
from anytime.producers.event_updates import build_availability_updated, publish_event_update

logger = logging.getLogger("anytime.availability")
router = APIRouter(prefix="/api/availability", tags=["availability"])


class SlotInput(BaseModel):
    date: str
    time_block: str
    available: bool

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        parse_date(v)
        return v

    @field_validator("time_block")
    @classmethod
    def validate_time_block(cls, v: str) -> str:
        if not TIME_RE.match(v):
            raise ValueError(f"Invalid time block: {v}")
        return v


class SetAvailabilityRequest(BaseModel):
    """Either one slot (date, time_block, available) or a full
    replacement list in ``availability_data``."""

    participant_id: Optional[str] = None
    event_id: Optional[str] = None
    date: Optional[str] = None
    time_block: Optional[str] = None
    available: Optional[bool] = None
    availability_data: Optional[list[SlotInput]] = None

    @model_validator(mode="after")
    def validate_request(self) -> "SetAvailabilityRequest":
        if not self.participant_id or not self.event_id:
            raise ValueError("Missing required fields")
        if not is_uuid(self.participant_id):
            raise ValueError(f"Invalid participant_id: {self.participant_id}")
        if not self.is_single_slot and self.availability_data is None:
            raise ValueError("Missing availability data")
        if self.is_single_slot:
            parse_date(self.date)
            if not TIME_RE.match(self.time_block):
                raise ValueError(f"Invalid time block: {self.time_block}")
        return self

    @property
    def is_single_slot(self) -> bool:
        return bool(self.date) and self.time_block is not None and self.available is not None


@router.get("", response_model=AvailabilityResponse)
async def get_availability(event_id: Optional[str] = None) -> dict[str, Any]:
    if not event_id:
        raise BadRequestError(detail="Event ID is required")
    logger.info("GET /api/availability event_id=%s", event_id)
    availability = await db.list_availability(event_id)
    return {"availability": availability}


@router.post("", status_code=201, response_model=AvailabilityResponse)
async def set_availability(req: SetAvailabilityRequest, response: Response, bus: OptionalBus) -> dict[str, Any]:
    logger.info(
        "POST /api/availability event_id=%s participant_id=%s single=%s",
        req.event_id, req.participant_id, req.is_single_slot,
    )
    event = await require_event(req.event_id)
    ensure_open(event)

    participant = await db.get_participant(req.participant_id)
    if not participant or participant["event_id"] != req.event_id:
        logger.warning("Participant %s is not part of event %s", req.participant_id, req.event_id)
        raise BadRequestError(detail="Participant is not part of this event")

    if req.is_single_slot:
        day = parse_date(req.date)
        ensure_slot_in_event(event, day, req.time_block)
        row, inserted = await db.upsert_availability(
            participant_id=req.participant_id,
            event_id=req.event_id,
            day=day,
            time_block=req.time_block,
            available=req.available,
        )
        if not inserted:
            response.status_code = 200
        rows = [row]
    else:
        slots: list[tuple[date, str, bool]] = []
        for item in req.availability_data:
            day = parse_date(item.date)
            ensure_slot_in_event(event, day, item.time_block)
            slots.append((day, item.time_block, item.available))
        rows = await db.replace_availability(req.participant_id, req.event_id, slots)

    logger.info("Stored %d availability rows for participant %s", len(rows), req.participant_id)
    await publish_event_update(
        bus, req.event_id, build_availability_updated(req.event_id, req.participant_id, len(rows))
    )
    return {"availability": rows}
