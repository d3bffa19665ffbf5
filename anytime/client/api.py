"""Async HTTP client for the Anytime API.

Mirrors what the web pages do: every call goes to ``/api`` with JSON, the
server's ``{"error": ...}`` body becomes an ``AnytimeClientError``, and the
free-tier ceilings are checked locally before a write is attempted.
"""

import logging
from datetime import date
from typing import Any, Iterable, Optional

import httpx

from anytime.client.errors import AnytimeClientError, RequestTimeoutError, UsageLimitError
from anytime.limits import (
    MAX_EVENTS_PER_WEEK,
    MAX_PARTICIPANTS_PER_EVENT,
    can_add_participant,
    event_limit_message,
    participant_limit_message,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 15.0
LIST_EVENTS_TIMEOUT_SEC = 12.0


def _iso(value: date | str) -> str:
    return value.isoformat() if isinstance(value, date) else value


class AnytimeClient:
    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        max_participants: int = MAX_PARTICIPANTS_PER_EVENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.max_participants = max_participants
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        if not self.access_token:
            return {}
        return {"Authorization": f"Bearer {self.access_token}"}

    async def _request(
        self,
        method: str,
        path: str,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=timeout or self.timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.TimeoutException:
                logger.warning("%s %s timed out", method, path)
                raise RequestTimeoutError("Request timed out")
            except httpx.HTTPError as e:
                raise AnytimeClientError(f"Network error: {e}")

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.is_error:
            message = payload.get("error") if isinstance(payload, dict) else None
            logger.error("%s %s failed: %d %s", method, path, response.status_code, message)
            raise AnytimeClientError(message or f"HTTP {response.status_code}", response.status_code)
        return payload

    async def list_events(self) -> dict[str, Any]:
        """The signed-in user's events and dashboard stats."""
        return await self._request("GET", "/api/events", timeout=LIST_EVENTS_TIMEOUT_SEC)

    async def events_this_week(self) -> dict[str, Any]:
        return await self._request("GET", "/api/usage/events-this-week")

    async def create_event(
        self,
        name: str,
        start_date: date | str,
        end_date: date | str,
        time_blocks: Optional[list[str]] = None,
        description: Optional[str] = None,
        is_24_7: bool = False,
    ) -> dict[str, Any]:
        """Create an event after checking the weekly ceiling.

        Raises:
            UsageLimitError: If the user already created their weekly quota.
        """
        usage = await self.events_this_week()
        if not usage.get("can_create_event", True):
            raise UsageLimitError(event_limit_message(usage.get("max_events", MAX_EVENTS_PER_WEEK)))

        body = {
            "name": name,
            "description": description,
            "start_date": _iso(start_date),
            "end_date": _iso(end_date),
            "time_blocks": sorted(time_blocks or []),
            "is_24_7": is_24_7,
        }
        return (await self._request("POST", "/api/events", json=body))["event"]

    async def get_event(self, event_id: str) -> dict[str, Any]:
        return (await self._request("GET", f"/api/events/{event_id}"))["event"]

    async def lock_event(self, event_id: str) -> dict[str, Any]:
        return (await self._request("PUT", f"/api/events/{event_id}", json={"status": "locked"}))["event"]

    async def delete_event(self, event_id: str) -> None:
        await self._request("DELETE", f"/api/events/{event_id}")

    async def event_analytics(self, event_id: str) -> dict[str, Any]:
        return (await self._request("GET", f"/api/events/{event_id}/analytics"))["analytics"]

    async def list_participants(self, event_id: str) -> list[dict[str, Any]]:
        return (await self._request("GET", "/api/participants", params={"event_id": event_id}))["participants"]

    async def join_event(
        self,
        event_id: str,
        name: str,
        current_participant_count: Optional[int] = None,
        email: Optional[str] = None,
    ) -> dict[str, Any]:
        """Add a participant to an event.

        When the caller does not know the current head count it is fetched
        first. A full event raises ``UsageLimitError`` without posting.
        """
        if current_participant_count is None:
            current_participant_count = len(await self.list_participants(event_id))
        if not can_add_participant(current_participant_count, self.max_participants):
            raise UsageLimitError(participant_limit_message(self.max_participants))

        body = {"event_id": event_id, "name": name.strip(), "email": email}
        return (await self._request("POST", "/api/participants", json=body))["participant"]

    async def get_availability(self, event_id: str) -> list[dict[str, Any]]:
        return (await self._request("GET", "/api/availability", params={"event_id": event_id}))["availability"]

    async def set_availability(
        self,
        participant_id: str,
        event_id: str,
        day: date | str,
        time_block: str,
        available: bool,
    ) -> list[dict[str, Any]]:
        body = {
            "participant_id": participant_id,
            "event_id": event_id,
            "date": _iso(day),
            "time_block": time_block,
            "available": available,
        }
        return (await self._request("POST", "/api/availability", json=body))["availability"]

    async def replace_availability(
        self,
        participant_id: str,
        event_id: str,
        slots: Iterable[tuple[date | str, str, bool]],
    ) -> list[dict[str, Any]]:
        body = {
            "participant_id": participant_id,
            "event_id": event_id,
            "availability_data": [
                {"date": _iso(d), "time_block": t, "available": a} for d, t, a in slots
            ],
        }
        return (await self._request("POST", "/api/availability", json=body))["availability"]
