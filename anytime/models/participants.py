from pydantic import BaseModel


class Participant(BaseModel):
    id: str
    event_id: str | None = None
    name: str
    email: str | None = None
    color: str
    created_at: str


class ParticipantResponse(BaseModel):
    participant: Participant


class ParticipantsResponse(BaseModel):
    participants: list[Participant]
