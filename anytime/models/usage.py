from pydantic import BaseModel


class WeeklyUsageResponse(BaseModel):
    count: int
    start_of_week: str
    max_events: int
    can_create_event: bool
