import logging
from datetime import date
from typing import Any, Literal, Optional

from fastapi import APIRouter
from pydantic import BaseModel, field_validator, model_validator

from anytime import db
from anytime.aggregation import aggregate_availability, summarize_events
from anytime.controllers.lookups import TIME_RE, parse_date, require_event
from anytime.dependencies import CurrentUser, OptionalBus
from anytime.errors import ConflictError, ForbiddenError, NotFoundError
from anytime.models.analytics import AnalyticsResponse
from anytime.models.events import EventDetailResponse, EventListResponse, EventResponse
from anytime.producers.event_updates import (
    build_event_deleted,
    build_event_locked,
    publish_event_update,
)

logger = logging.getLogger("anytime.events")
router = APIRouter(prefix="/api/events", tags=["events"])

MAX_NAME_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000
ALL_DAY_TIME_BLOCKS = [f"{h:02d}:00" for h in range(24)]


def _one_year_before(day: date) -> date:
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        # Feb 29
        return day.replace(year=day.year - 1, day=28)


class CreateEventRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    time_blocks: Optional[list[str]] = None
    is_24_7: bool = False

    @field_validator("time_blocks")
    @classmethod
    def validate_time_blocks(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        for t in v:
            if not TIME_RE.match(t):
                raise ValueError(f"Invalid time block: {t}")
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def validate_event(self) -> "CreateEventRequest":
        name = (self.name or "").strip()
        if not name or not self.start_date or not self.end_date:
            raise ValueError("Missing required fields")
        if len(name) > MAX_NAME_LENGTH:
            raise ValueError(f"Event name must be less than {MAX_NAME_LENGTH} characters")
        description = (self.description or "").strip()
        if len(description) > MAX_DESCRIPTION_LENGTH:
            raise ValueError(f"Description must be less than {MAX_DESCRIPTION_LENGTH} characters")
        if not self.is_24_7 and not self.time_blocks:
            raise ValueError("Please select at least one time slot or enable 24/7 availability")
        start = parse_date(self.start_date)
        end = parse_date(self.end_date)
        if start > end:
            raise ValueError("End date must be after start date")
        if start < _one_year_before(date.today()):
            raise ValueError("Start date cannot be more than a year in the past")

        self.name = name
        self.description = description or None
        if self.is_24_7 and not self.time_blocks:
            self.time_blocks = list(ALL_DAY_TIME_BLOCKS)
        return self


class UpdateEventRequest(BaseModel):
    status: Literal["open", "locked"]


def _ensure_creator(event: dict[str, Any], user_id: str) -> None:
    if event.get("created_by") != user_id:
        logger.warning("User %s is not the creator of event %s", user_id, event["id"])
        raise ForbiddenError(detail="Only the event creator can change this event")


@router.get("", response_model=EventListResponse)
async def list_events(user: CurrentUser) -> dict[str, Any]:
    logger.info("GET /api/events user=%s", user.id)
    events = await db.list_events_for_user(user.id)
    return {"events": events, "stats": summarize_events(events)}


@router.post("", status_code=201, response_model=EventResponse)
async def create_event(req: CreateEventRequest, user: CurrentUser) -> dict[str, Any]:
    logger.info(
        "POST /api/events user=%s name=%s range=%s..%s time_blocks=%d is_24_7=%s",
        user.id, req.name, req.start_date, req.end_date, len(req.time_blocks or []), req.is_24_7,
    )
    event = await db.create_event(
        name=req.name,
        description=req.description,
        start_date=parse_date(req.start_date),
        end_date=parse_date(req.end_date),
        time_blocks=req.time_blocks or [],
        is_24_7=req.is_24_7,
        created_by=user.id,
    )
    logger.info("Created event id=%s", event["id"])
    return {"event": event}


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(event_id: str) -> dict[str, Any]:
    logger.info("GET /api/events/%s", event_id)
    event = await require_event(event_id)
    event["participants"] = await db.list_participants(event_id)
    event["availability"] = await db.list_availability(event_id)
    logger.info(
        "Returning event %s with %d participants, %d availability rows",
        event_id, len(event["participants"]), len(event["availability"]),
    )
    return {"event": event}


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(event_id: str, req: UpdateEventRequest, user: CurrentUser, bus: OptionalBus) -> dict[str, Any]:
    logger.info("PUT /api/events/%s status=%s user=%s", event_id, req.status, user.id)
    event = await require_event(event_id)
    _ensure_creator(event, user.id)

    if req.status == event["status"]:
        return {"event": event}
    if req.status == "open":
        raise ConflictError(detail="Locked events cannot be reopened", event_id=event_id)

    locked = await db.lock_event(event_id)
    if locked is None:
        # Locked or deleted between the read and the update
        current = await require_event(event_id)
        return {"event": current}
    logger.info("Locked event %s", event_id)
    await publish_event_update(bus, event_id, build_event_locked(locked))
    return {"event": locked}


@router.delete("/{event_id}")
async def delete_event(event_id: str, user: CurrentUser, bus: OptionalBus) -> dict[str, Any]:
    logger.info("DELETE /api/events/%s user=%s", event_id, user.id)
    event = await require_event(event_id)
    _ensure_creator(event, user.id)
    if not await db.delete_event(event_id):
        raise NotFoundError(detail="Event not found", event_id=event_id)
    logger.info("Deleted event %s", event_id)
    await publish_event_update(bus, event_id, build_event_deleted(event_id))
    return {"deleted": True, "id": event_id}


@router.get("/{event_id}/analytics", response_model=AnalyticsResponse)
async def event_analytics(event_id: str) -> dict[str, Any]:
    logger.info("GET /api/events/%s/analytics", event_id)
    event = await require_event(event_id)
    participants = await db.list_participants(event_id)
    availability = await db.list_availability(event_id)
    analytics = aggregate_availability(event, participants, availability)
    return {"analytics": analytics}
