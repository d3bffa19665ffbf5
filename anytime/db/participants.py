"""Participants repository."""

from datetime import UTC, datetime
from typing import Any

from anytime.db.core import _get_connection

PARTICIPANT_LIST_LIMIT = 100

_PARTICIPANT_COLUMNS = "id, event_id, name, email, color, created_at"


def _participant_from_row(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "event_id": row[1],
        "name": row[2],
        "email": row[3],
        "color": row[4],
        "created_at": row[5].astimezone(UTC).isoformat(),
    }


async def list_participants(event_id: str, limit: int = PARTICIPANT_LIST_LIMIT) -> list[dict[str, Any]]:
    async with _get_connection() as conn:
        rows = await conn.execute(
            f"SELECT {_PARTICIPANT_COLUMNS} FROM participants WHERE event_id = %s ORDER BY created_at ASC LIMIT %s",
            (event_id, limit),
        )
        return [_participant_from_row(row) async for row in rows]


async def get_participant(participant_id: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"SELECT {_PARTICIPANT_COLUMNS} FROM participants WHERE id = %s",
                (participant_id,),
            )
        ).fetchone()
        return _participant_from_row(row) if row else None


async def count_participants(event_id: str) -> int:
    async with _get_connection() as conn:
        row = await (
            await conn.execute("SELECT COUNT(*) FROM participants WHERE event_id = %s", (event_id,))
        ).fetchone()
        return int(row[0]) if row else 0


async def participant_name_taken(event_id: str, name: str) -> bool:
    """Case-insensitive name check within one event."""
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                "SELECT 1 FROM participants WHERE event_id = %s AND lower(name) = lower(%s) LIMIT 1",
                (event_id, name),
            )
        ).fetchone()
        return row is not None


async def create_participant(
    event_id: str,
    name: str,
    color: str,
    email: str | None = None,
    max_participants: int | None = None,
) -> dict[str, Any] | None:
    """Insert a participant. Returns None if the event already holds ``max_participants``.

    The event row is locked for the count and insert, so concurrent joins
    to one event cannot overshoot the ceiling.
    """
    now = datetime.now(UTC)
    async with _get_connection() as conn:
        async with conn.transaction():
            if max_participants is not None:
                await conn.execute("SELECT id FROM events WHERE id = %s FOR UPDATE", (event_id,))
                count = await (
                    await conn.execute("SELECT COUNT(*) FROM participants WHERE event_id = %s", (event_id,))
                ).fetchone()
                if count and int(count[0]) >= max_participants:
                    return None
            row = await (
                await conn.execute(
                    f"""INSERT INTO participants (event_id, name, email, color, created_at)
                        VALUES (%s, %s, %s, %s, %s)
                        RETURNING {_PARTICIPANT_COLUMNS}""",
                    (event_id, name, email, color, now),
                )
            ).fetchone()
            return _participant_from_row(row)
