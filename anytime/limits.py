"""Free-tier usage limits.

Weekly event creation and per-event participant ceilings. The weekly
ceiling is advisory: the API reports it and the client checks it before
creating an event. The participant ceiling is checked by the client and
again by the participant handler.
"""

from datetime import datetime, timedelta, tzinfo

MAX_EVENTS_PER_WEEK = 10
MAX_PARTICIPANTS_PER_EVENT = 7
PRO_MAX_PARTICIPANTS_PER_EVENT = 50


def start_of_week(now: datetime, tz: tzinfo | None = None) -> datetime:
    """Most recent Monday 00:00 at or before ``now``.

    ``now`` is first converted to ``tz`` when given, so the week boundary is
    the local Monday midnight of that timezone.
    """
    if tz is not None:
        now = now.astimezone(tz) if now.tzinfo else now.replace(tzinfo=tz)
    monday = now - timedelta(days=now.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def can_create_event(events_this_week: int, max_events: int = MAX_EVENTS_PER_WEEK) -> bool:
    return events_this_week < max_events


def can_add_participant(participant_count: int, max_participants: int = MAX_PARTICIPANTS_PER_EVENT) -> bool:
    return participant_count < max_participants


def participant_limit_message(max_participants: int = MAX_PARTICIPANTS_PER_EVENT) -> str:
    """Shown by the join form when an event is full."""
    return (
        f"This event has reached the maximum of {max_participants} participants. "
        f"Upgrade to Pro for up to {PRO_MAX_PARTICIPANTS_PER_EVENT} participants per event."
    )


def server_participant_limit_message(max_participants: int = MAX_PARTICIPANTS_PER_EVENT) -> str:
    return (
        f"Event has reached maximum participants ({max_participants}). "
        "Upgrade to Pro for more participants."
    )


def event_limit_message(max_events: int = MAX_EVENTS_PER_WEEK) -> str:
    return f"You've reached your limit of {max_events} events per week on the free plan."
