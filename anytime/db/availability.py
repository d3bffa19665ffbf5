"""Availability repository.

One row per (participant, event, date, time block), guarded by a unique
constraint. Single-slot writes are one ``INSERT ... ON CONFLICT`` so two
concurrent toggles on the same slot cannot both insert.
"""

from datetime import UTC, date, datetime
from typing import Any

from anytime.db.core import _get_connection

_AVAILABILITY_COLUMNS = "id, participant_id, event_id, date, time_block, available, created_at, updated_at"


def _availability_from_row(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "participant_id": str(row[1]),
        "event_id": row[2],
        "date": row[3].isoformat(),
        "time_block": row[4],
        "available": row[5],
        "created_at": row[6].astimezone(UTC).isoformat(),
        "updated_at": row[7].astimezone(UTC).isoformat(),
    }


async def list_availability(event_id: str) -> list[dict[str, Any]]:
    """All rows for an event, each with its participant's name and color nested, by date then time block."""
    async with _get_connection() as conn:
        rows = await conn.execute(
            """SELECT a.id, a.participant_id, a.event_id, a.date, a.time_block, a.available,
                      a.created_at, a.updated_at, p.name, p.color
               FROM availability a
               JOIN participants p ON p.id = a.participant_id
               WHERE a.event_id = %s
               ORDER BY a.date, a.time_block""",
            (event_id,),
        )
        result = []
        async for row in rows:
            record = _availability_from_row(row[:8])
            record["participants"] = {"name": row[8], "color": row[9]}
            result.append(record)
        return result


async def upsert_availability(
    participant_id: str,
    event_id: str,
    day: date,
    time_block: str,
    available: bool,
) -> tuple[dict[str, Any], bool]:
    """Set one slot. Returns the row and whether it was newly inserted."""
    now = datetime.now(UTC)
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"""INSERT INTO availability (participant_id, event_id, date, time_block, available, created_at, updated_at)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (participant_id, event_id, date, time_block)
                    DO UPDATE SET available = EXCLUDED.available, updated_at = EXCLUDED.updated_at
                    RETURNING {_AVAILABILITY_COLUMNS}, (xmax = 0) AS inserted""",
                (participant_id, event_id, day, time_block, available, now, now),
            )
        ).fetchone()
        return _availability_from_row(row[:8]), bool(row[8])


async def replace_availability(
    participant_id: str,
    event_id: str,
    slots: list[tuple[date, str, bool]],
) -> list[dict[str, Any]]:
    """Replace a participant's whole availability for an event in one transaction."""
    now = datetime.now(UTC)
    async with _get_connection() as conn:
        async with conn.transaction():
            await conn.execute(
                "DELETE FROM availability WHERE participant_id = %s AND event_id = %s",
                (participant_id, event_id),
            )
            result = []
            for day, time_block, available in slots:
                row = await (
                    await conn.execute(
                        f"""INSERT INTO availability (participant_id, event_id, date, time_block, available, created_at, updated_at)
                            VALUES (%s, %s, %s, %s, %s, %s, %s)
                            ON CONFLICT (participant_id, event_id, date, time_block)
                            DO UPDATE SET available = EXCLUDED.available, updated_at = EXCLUDED.updated_at
                            RETURNING {_AVAILABILITY_COLUMNS}""",
                        (participant_id, event_id, day, time_block, available, now, now),
                    )
                ).fetchone()
                result.append(_availability_from_row(row))
            return result
