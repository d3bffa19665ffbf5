from typing import Literal

from pydantic import BaseModel

from anytime.models.availability import Availability
from anytime.models.participants import Participant

EventStatus = Literal["open", "locked"]


class ParticipantRef(BaseModel):
    id: str
    name: str
    color: str


class AvailabilityRef(BaseModel):
    id: str
    available: bool


class Event(BaseModel):
    id: str
    name: str
    description: str | None = None
    start_date: str
    end_date: str
    time_blocks: list[str]
    is_24_7: bool = False
    status: EventStatus = "open"
    created_by: str | None = None
    created_at: str
    updated_at: str | None = None
    locked_at: str | None = None


class EventListItem(Event):
    participants: list[ParticipantRef] = []
    availability: list[AvailabilityRef] = []


class EventStats(BaseModel):
    active_events: int
    completed_events: int
    total_participants: int


class EventListResponse(BaseModel):
    events: list[EventListItem]
    stats: EventStats


class EventResponse(BaseModel):
    event: Event


class EventDetail(Event):
    participants: list[Participant] = []
    availability: list[Availability] = []


class EventDetailResponse(BaseModel):
    event: EventDetail
