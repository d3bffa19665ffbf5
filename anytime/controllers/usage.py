import logging
from datetime import UTC, datetime

from fastapi import APIRouter

from anytime import db
from anytime.dependencies import CurrentUser, Limits
from anytime.limits import can_create_event, start_of_week
from anytime.models.usage import WeeklyUsageResponse

logger = logging.getLogger("anytime.usage")
router = APIRouter(prefix="/api/usage", tags=["usage"])


@router.get("/events-this-week", response_model=WeeklyUsageResponse)
async def events_this_week(user: CurrentUser, limits: Limits) -> WeeklyUsageResponse:
    since = start_of_week(datetime.now(UTC), limits.tz)
    count = await db.count_events_since(user.id, since)
    logger.info("GET /api/usage/events-this-week user=%s count=%d since=%s", user.id, count, since.isoformat())
    return WeeklyUsageResponse(
        count=count,
        start_of_week=since.isoformat(),
        max_events=limits.max_events_per_week,
        can_create_event=can_create_event(count, limits.max_events_per_week),
    )
