"""Availability aggregation.

Folds an event's availability records into a per-(date, time block) grid
and ranks the best matching slots. The computation is pure and cheap for
realistic event sizes (tens of participants by tens of slots), so callers
recompute it from storage on every read instead of maintaining it.
"""

from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from typing import Any

from anytime.models.analytics import (
    AvailabilityAnalytics,
    BestMatch,
    SlotParticipant,
    SlotSummary,
)

BEST_MATCH_LIMIT = 3

# (threshold on count / max_count, level), checked top down
_HEAT_LEVELS = ((0.8, 5), (0.6, 4), (0.4, 3), (0.2, 2))


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def enumerate_dates(start: date | str, end: date | str) -> list[date]:
    """Every calendar date from start to end, inclusive. Empty if end < start."""
    current = _as_date(start)
    last = _as_date(end)
    dates = []
    while current <= last:
        dates.append(current)
        current += timedelta(days=1)
    return dates


def percentage(count: int, total_participants: int) -> float:
    """Share of participants available, 0 when there are no participants."""
    if total_participants <= 0:
        return 0.0
    return count / total_participants * 100


def heat_level(count: int, max_count: int) -> int:
    if count <= 0 or max_count <= 0:
        return 0
    intensity = count / max_count
    for threshold, level in _HEAT_LEVELS:
        if intensity >= threshold:
            return level
    return 1


def _get(record: Any, key: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(key, default)
    return getattr(record, key, default)


def aggregate_availability(
    event: Any,
    participants: Iterable[Any],
    availability: Iterable[Any],
    limit: int = BEST_MATCH_LIMIT,
) -> AvailabilityAnalytics:
    """Count available participants per slot and rank the top slots.

    ``event`` needs ``start_date``, ``end_date`` and ``time_blocks``;
    participants need ``id``/``name``/``color``; availability records need
    ``participant_id``, ``date``, ``time_block`` and ``available``. Dicts and
    attribute objects are both accepted.

    Records outside the event's grid are ignored. A record whose participant
    is unknown still counts but contributes no participant entry. Best
    matches exclude empty slots and are ordered by count, ties kept in grid
    order (date ascending, then the event's time-block order).
    """
    participants = list(participants)
    by_id = {str(_get(p, "id")): p for p in participants}
    total = len(participants)

    time_blocks = list(dict.fromkeys(_get(event, "time_blocks") or []))
    dates = [d.isoformat() for d in enumerate_dates(_get(event, "start_date"), _get(event, "end_date"))]

    grid: dict[str, dict[str, SlotSummary]] = {
        d: {t: SlotSummary(date=d, time_block=t) for t in time_blocks} for d in dates
    }

    for record in availability:
        if not _get(record, "available"):
            continue
        day = str(_get(record, "date"))[:10]
        slot = grid.get(day, {}).get(_get(record, "time_block"))
        if slot is None:
            continue
        slot.count += 1
        participant = by_id.get(str(_get(record, "participant_id")))
        if participant is not None:
            slot.participants.append(
                SlotParticipant(
                    id=str(_get(participant, "id")),
                    name=_get(participant, "name"),
                    color=_get(participant, "color"),
                )
            )

    ordered = [grid[d][t] for d in dates for t in time_blocks]
    max_count = max((s.count for s in ordered), default=0)
    for s in ordered:
        s.level = heat_level(s.count, max_count)

    ranked = sorted((s for s in ordered if s.count > 0), key=lambda s: s.count, reverse=True)
    best_matches = [
        BestMatch(
            date=s.date,
            time_block=s.time_block,
            count=s.count,
            participants=list(s.participants),
            percentage=round(percentage(s.count, total), 1),
        )
        for s in ranked[:limit]
    ]

    return AvailabilityAnalytics(
        event_id=_get(event, "id"),
        total_participants=total,
        dates=dates,
        time_blocks=time_blocks,
        grid=grid,
        best_matches=best_matches,
        max_count=max_count,
    )


def summarize_events(events: Iterable[Any]) -> dict[str, int]:
    """Dashboard counters: open events, locked events, participants across all."""
    active = completed = total_participants = 0
    for event in events:
        status = _get(event, "status")
        if status == "open":
            active += 1
        elif status == "locked":
            completed += 1
        total_participants += len(_get(event, "participants") or [])
    return {
        "active_events": active,
        "completed_events": completed,
        "total_participants": total_participants,
    }
