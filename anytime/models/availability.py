from pydantic import BaseModel


class AvailabilityParticipant(BaseModel):
    name: str
    color: str


class Availability(BaseModel):
    id: str
    participant_id: str
    event_id: str
    date: str
    time_block: str
    available: bool
    created_at: str
    updated_at: str
    participants: AvailabilityParticipant | None = None


class AvailabilityResponse(BaseModel):
    availability: list[Availability]
