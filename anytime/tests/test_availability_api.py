import uuid
from datetime import date, timedelta

import pytest


@pytest.fixture
def event(client, event_payload):
    return client.post("/api/events", json=event_payload).json()["event"]


@pytest.fixture
def participant(client, event):
    return client.post("/api/participants", json={"event_id": event["id"], "name": "Ana"}).json()["participant"]


def _slot(event, participant, **overrides):
    body = {
        "participant_id": participant["id"],
        "event_id": event["id"],
        "date": event["start_date"],
        "time_block": "10:00",
        "available": True,
    }
    body.update(overrides)
    return body


class TestSingleSlot:
    def test_insert_then_update(self, client, event, participant):
        first = client.post("/api/availability", json=_slot(event, participant))
        assert first.status_code == 201
        assert first.json()["availability"][0]["available"] is True

        second = client.post("/api/availability", json=_slot(event, participant, available=False))
        assert second.status_code == 200
        assert second.json()["availability"][0]["id"] == first.json()["availability"][0]["id"]

        rows = client.get("/api/availability", params={"event_id": event["id"]}).json()["availability"]
        assert len(rows) == 1
        assert rows[0]["available"] is False

    def test_missing_ids(self, client, event, participant):
        body = _slot(event, participant)
        del body["participant_id"]
        resp = client.post("/api/availability", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Missing required fields"

    def test_missing_slot_and_data(self, client, event, participant):
        resp = client.post(
            "/api/availability",
            json={"participant_id": participant["id"], "event_id": event["id"]},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Missing availability data"

    def test_slot_outside_event_dates(self, client, event, participant):
        day = (date.fromisoformat(event["end_date"]) + timedelta(days=1)).isoformat()
        resp = client.post("/api/availability", json=_slot(event, participant, date=day))
        assert resp.status_code == 400
        assert resp.json()["error"] == f"Invalid slot: {day} 10:00"

    def test_slot_outside_event_blocks(self, client, event, participant):
        resp = client.post("/api/availability", json=_slot(event, participant, time_block="23:00"))
        assert resp.status_code == 400
        assert resp.json()["error"] == f"Invalid slot: {event['start_date']} 23:00"

    def test_participant_id_must_be_uuid(self, client, event, participant):
        resp = client.post("/api/availability", json=_slot(event, participant, participant_id="not-a-uuid"))
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid participant_id: not-a-uuid"

    def test_participant_from_another_event(self, client, event, participant):
        resp = client.post("/api/availability", json=_slot(event, participant, participant_id=str(uuid.uuid4())))
        assert resp.status_code == 400
        assert resp.json()["error"] == "Participant is not part of this event"

    def test_locked_event_rejects_writes(self, client, event, participant):
        client.put(f"/api/events/{event['id']}", json={"status": "locked"})
        resp = client.post("/api/availability", json=_slot(event, participant))
        assert resp.status_code == 409


class TestBulkReplace:
    def test_replaces_everything(self, client, event, participant):
        client.post("/api/availability", json=_slot(event, participant, time_block="09:00"))

        body = {
            "participant_id": participant["id"],
            "event_id": event["id"],
            "availability_data": [
                {"date": event["start_date"], "time_block": "10:00", "available": True},
                {"date": event["end_date"], "time_block": "14:00", "available": True},
            ],
        }
        resp = client.post("/api/availability", json=body)

        assert resp.status_code == 201
        assert len(resp.json()["availability"]) == 2
        rows = client.get("/api/availability", params={"event_id": event["id"]}).json()["availability"]
        assert [(r["date"], r["time_block"]) for r in rows] == [
            (event["start_date"], "10:00"),
            (event["end_date"], "14:00"),
        ]

    def test_empty_list_clears(self, client, event, participant):
        client.post("/api/availability", json=_slot(event, participant))
        body = {"participant_id": participant["id"], "event_id": event["id"], "availability_data": []}
        assert client.post("/api/availability", json=body).status_code == 201
        assert client.get("/api/availability", params={"event_id": event["id"]}).json()["availability"] == []


class TestGetAvailability:
    def test_requires_event_id(self, client):
        resp = client.get("/api/availability")
        assert resp.status_code == 400
        assert resp.json()["error"] == "Event ID is required"

    def test_rows_nest_participant_name_and_color(self, client, event, participant):
        client.post("/api/availability", json=_slot(event, participant))
        row = client.get("/api/availability", params={"event_id": event["id"]}).json()["availability"][0]
        assert row["participants"] == {"name": "Ana", "color": participant["color"]}
        assert "participant_name" not in row
