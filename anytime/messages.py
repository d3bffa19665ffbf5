from typing import Literal, Optional, TypedDict, Union


class AvailabilityUpdated(TypedDict):
    type: Literal["availability_updated"]
    event_id: str
    participant_id: str
    slots: int
    timestamp: str


class ParticipantJoined(TypedDict):
    type: Literal["participant_joined"]
    event_id: str
    participant_id: str
    name: str
    color: str
    timestamp: str


class EventLocked(TypedDict):
    type: Literal["event_locked"]
    event_id: str
    locked_at: Optional[str]
    timestamp: str


class EventDeleted(TypedDict):
    type: Literal["event_deleted"]
    event_id: str
    timestamp: str


class PingMessage(TypedDict):
    type: Literal["ping"]


# Change notices a viewer of one event may receive; each means "re-fetch"
EventUpdate = Union[AvailabilityUpdated, ParticipantJoined, EventLocked, EventDeleted]
