import os
import sys
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import uuid
from datetime import UTC, date, datetime

import pytest
from fastapi.testclient import TestClient
import fakeredis.aioredis as fakeredis

import anytime.lifespan as lifespan
import anytime.main as main
from anytime.auth import AuthUser
from anytime.config import clear_settings_cache
from anytime.dependencies import get_current_user

TEST_USER_ID = "user-1"


class _AwaitableRedis:
    def __init__(self, client):
        self._client = client

    def __await__(self):
        async def _coro():
            return self._client

        return _coro().__await__()


def _now() -> str:
    return datetime.now(UTC).isoformat()


class FakeDB:
    """In-memory stand-in for the ``anytime.db`` repository functions."""

    def __init__(self):
        self.events: dict[str, dict] = {}
        self.participants: dict[str, dict] = {}
        self.availability: dict[tuple, dict] = {}
        self._seq = 0

    async def create_event(self, name, start_date, end_date, time_blocks, created_by, description=None, is_24_7=False):
        self._seq += 1
        event_id = f"evt{self._seq:07d}"
        now = _now()
        self.events[event_id] = {
            "id": event_id,
            "name": name,
            "description": description,
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
            "time_blocks": list(time_blocks),
            "is_24_7": is_24_7,
            "status": "open",
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
            "locked_at": None,
        }
        return dict(self.events[event_id])

    async def get_event(self, event_id):
        event = self.events.get(event_id)
        return dict(event) if event else None

    async def list_events_for_user(self, user_id, limit=50):
        events = [dict(e) for e in self.events.values() if e["created_by"] == user_id]
        events.sort(key=lambda e: e["created_at"], reverse=True)
        for e in events:
            e["participants"] = [
                {"id": p["id"], "name": p["name"], "color": p["color"]}
                for p in self.participants.values()
                if p["event_id"] == e["id"]
            ]
            e["availability"] = [
                {"id": a["id"], "available": a["available"]}
                for a in self.availability.values()
                if a["event_id"] == e["id"]
            ]
        return events[:limit]

    async def lock_event(self, event_id):
        event = self.events.get(event_id)
        if not event or event["status"] != "open":
            return None
        now = _now()
        event.update(status="locked", locked_at=now, updated_at=now)
        return dict(event)

    async def delete_event(self, event_id):
        if self.events.pop(event_id, None) is None:
            return False
        self.participants = {k: p for k, p in self.participants.items() if p["event_id"] != event_id}
        self.availability = {k: a for k, a in self.availability.items() if a["event_id"] != event_id}
        return True

    async def count_events_since(self, user_id, since):
        return sum(
            1
            for e in self.events.values()
            if e["created_by"] == user_id and datetime.fromisoformat(e["created_at"]) >= since
        )

    async def list_participants(self, event_id, limit=100):
        rows = [dict(p) for p in self.participants.values() if p["event_id"] == event_id]
        return rows[:limit]

    async def get_participant(self, participant_id):
        p = self.participants.get(participant_id)
        return dict(p) if p else None

    async def count_participants(self, event_id):
        return sum(1 for p in self.participants.values() if p["event_id"] == event_id)

    async def participant_name_taken(self, event_id, name):
        return any(
            p["event_id"] == event_id and p["name"].lower() == name.lower()
            for p in self.participants.values()
        )

    async def create_participant(self, event_id, name, color, email=None, max_participants=None):
        if max_participants is not None and await self.count_participants(event_id) >= max_participants:
            return None
        participant_id = str(uuid.uuid4())
        self.participants[participant_id] = {
            "id": participant_id,
            "event_id": event_id,
            "name": name,
            "email": email,
            "color": color,
            "created_at": _now(),
        }
        return dict(self.participants[participant_id])

    def _row(self, participant_id, event_id, day, time_block, available, existing=None):
        now = _now()
        return {
            "id": existing["id"] if existing else str(uuid.uuid4()),
            "participant_id": participant_id,
            "event_id": event_id,
            "date": day.isoformat() if isinstance(day, date) else day,
            "time_block": time_block,
            "available": available,
            "created_at": existing["created_at"] if existing else now,
            "updated_at": now,
        }

    async def list_availability(self, event_id):
        rows = []
        for a in self.availability.values():
            if a["event_id"] != event_id:
                continue
            p = self.participants[a["participant_id"]]
            rows.append({**a, "participants": {"name": p["name"], "color": p["color"]}})
        rows.sort(key=lambda r: (r["date"], r["time_block"]))
        return rows

    async def upsert_availability(self, participant_id, event_id, day, time_block, available):
        key = (participant_id, event_id, day.isoformat(), time_block)
        existing = self.availability.get(key)
        row = self._row(participant_id, event_id, day, time_block, available, existing)
        self.availability[key] = row
        return dict(row), existing is None

    async def replace_availability(self, participant_id, event_id, slots):
        self.availability = {
            k: a
            for k, a in self.availability.items()
            if not (a["participant_id"] == participant_id and a["event_id"] == event_id)
        }
        result = []
        for day, time_block, available in slots:
            row = self._row(participant_id, event_id, day, time_block, available)
            self.availability[(participant_id, event_id, day.isoformat(), time_block)] = row
            result.append(dict(row))
        return result


@pytest.fixture
def fake_db(monkeypatch):
    fake = FakeDB()
    for module in ("events", "participants", "availability", "usage", "lookups", "ws_events"):
        monkeypatch.setattr(f"anytime.controllers.{module}.db", fake)
    return fake


@pytest.fixture
def current_user():
    """Mutable signed-in user; tests switch identity by assigning ``.id``."""
    user = AuthUser(id=TEST_USER_ID, email="owner@example.com")
    main.app.dependency_overrides[get_current_user] = lambda: user
    yield user
    main.app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
def client(monkeypatch, fake_db, current_user):
    def fake_redis_constructor(*_args, **_kwargs):
        fake = fakeredis.FakeRedis(decode_responses=True)
        return _AwaitableRedis(fake)

    monkeypatch.setenv("ENABLE_DB", "0")
    monkeypatch.setenv("ENABLE_REALTIME", "1")
    clear_settings_cache()
    monkeypatch.setattr(lifespan.redis, "Redis", fake_redis_constructor)

    with TestClient(main.app) as c:
        yield c
    clear_settings_cache()


@pytest.fixture
def event_payload():
    today = date.today()
    return {
        "name": "Team sync",
        "description": "Weekly planning",
        "start_date": today.isoformat(),
        "end_date": date.fromordinal(today.toordinal() + 2).isoformat(),
        "time_blocks": ["09:00", "10:00", "14:00"],
        "is_24_7": False,
    }
