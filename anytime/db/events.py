"""Events repository."""

import secrets
import string
from datetime import UTC, date, datetime
from typing import Any

from psycopg import errors as pg_errors
from psycopg.types.json import Jsonb

from anytime.db.core import _get_connection

EVENT_LIST_LIMIT = 50

_EVENT_COLUMNS = (
    "id, name, description, start_date, end_date, time_blocks, is_24_7, status, "
    "created_by, created_at, updated_at, locked_at"
)


def _generate_event_id(length: int = 10) -> str:
    chars = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(chars) for _ in range(length))


def _iso(value: datetime | None) -> str | None:
    return value.astimezone(UTC).isoformat() if value else None


def _event_from_row(row: tuple) -> dict[str, Any]:
    return {
        "id": row[0],
        "name": row[1],
        "description": row[2],
        "start_date": row[3].isoformat(),
        "end_date": row[4].isoformat(),
        "time_blocks": row[5] or [],
        "is_24_7": row[6],
        "status": row[7],
        "created_by": row[8],
        "created_at": _iso(row[9]),
        "updated_at": _iso(row[10]),
        "locked_at": _iso(row[11]),
    }


async def create_event(
    name: str,
    start_date: date,
    end_date: date,
    time_blocks: list[str],
    created_by: str,
    description: str | None = None,
    is_24_7: bool = False,
) -> dict[str, Any]:
    now = datetime.now(UTC)
    async with _get_connection() as conn:
        for _ in range(10):
            event_id = _generate_event_id()
            try:
                row = await (
                    await conn.execute(
                        f"""INSERT INTO events (id, name, description, start_date, end_date, time_blocks,
                                               is_24_7, status, created_by, created_at, updated_at)
                            VALUES (%s, %s, %s, %s, %s, %s, %s, 'open', %s, %s, %s)
                            RETURNING {_EVENT_COLUMNS}""",
                        (
                            event_id,
                            name,
                            description,
                            start_date,
                            end_date,
                            Jsonb(time_blocks),
                            is_24_7,
                            created_by,
                            now,
                            now,
                        ),
                    )
                ).fetchone()
                return _event_from_row(row)
            except pg_errors.UniqueViolation:
                continue
        raise RuntimeError("Failed to generate unique event ID")


async def get_event(event_id: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = %s", (event_id,))
        ).fetchone()
        if not row:
            return None
        return _event_from_row(row)


async def list_events_for_user(user_id: str, limit: int = EVENT_LIST_LIMIT) -> list[dict[str, Any]]:
    """The user's newest events, each with its participants and availability flags."""
    async with _get_connection() as conn:
        rows = await conn.execute(
            f"SELECT {_EVENT_COLUMNS} FROM events WHERE created_by = %s ORDER BY created_at DESC LIMIT %s",
            (user_id, limit),
        )
        events = [_event_from_row(row) async for row in rows]
        if not events:
            return []

        by_id = {e["id"]: e for e in events}
        for e in events:
            e["participants"] = []
            e["availability"] = []
        ids = list(by_id)

        rows = await conn.execute(
            "SELECT event_id, id, name, color FROM participants WHERE event_id = ANY(%s) ORDER BY created_at",
            (ids,),
        )
        async for event_id, pid, name, color in rows:
            by_id[event_id]["participants"].append({"id": str(pid), "name": name, "color": color})

        rows = await conn.execute(
            "SELECT event_id, id, available FROM availability WHERE event_id = ANY(%s)",
            (ids,),
        )
        async for event_id, aid, available in rows:
            by_id[event_id]["availability"].append({"id": str(aid), "available": available})

        return events


async def lock_event(event_id: str) -> dict[str, Any] | None:
    """Move an open event to locked. Returns the row, or None if nothing matched."""
    now = datetime.now(UTC)
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"""UPDATE events SET status = 'locked', locked_at = %s, updated_at = %s
                    WHERE id = %s AND status = 'open'
                    RETURNING {_EVENT_COLUMNS}""",
                (now, now, event_id),
            )
        ).fetchone()
        return _event_from_row(row) if row else None


async def delete_event(event_id: str) -> bool:
    async with _get_connection() as conn:
        row = await (
            await conn.execute("DELETE FROM events WHERE id = %s RETURNING id", (event_id,))
        ).fetchone()
        return row is not None


async def count_events_since(user_id: str, since: datetime) -> int:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                "SELECT COUNT(*) FROM events WHERE created_by = %s AND created_at >= %s",
                (user_id, since),
            )
        ).fetchone()
        return int(row[0]) if row else 0
