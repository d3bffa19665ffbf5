import logging
from datetime import date
from typing import Any

from anytime.client.api import AnytimeClient

logger = logging.getLogger(__name__)


class AvailabilityEditor:
    """One participant's view of the availability grid.

    Toggles are applied locally first and rolled back if the write fails,
    so the grid never waits on the network.
    """

    def __init__(self, client: AnytimeClient, event_id: str, participant_id: str):
        self.client = client
        self.event_id = event_id
        self.participant_id = participant_id
        self.records: list[dict[str, Any]] = []
        self.slots: dict[tuple[str, str], bool] = {}

    def is_available(self, day: date | str, time_block: str) -> bool:
        return self.slots.get((str(day), time_block), False)

    async def refresh(self) -> None:
        self.records = await self.client.get_availability(self.event_id)
        self.slots = {
            (r["date"], r["time_block"]): bool(r["available"])
            for r in self.records
            if r["participant_id"] == self.participant_id
        }

    async def toggle(self, day: date | str, time_block: str) -> bool:
        key = (str(day), time_block)
        had_value = key in self.slots
        previous = self.slots.get(key, False)
        self.slots[key] = not previous
        try:
            await self.client.set_availability(
                self.participant_id, self.event_id, key[0], time_block, not previous
            )
        except Exception:
            logger.warning("Reverting %s %s for participant %s", key[0], time_block, self.participant_id)
            if had_value:
                self.slots[key] = previous
            else:
                del self.slots[key]
            raise
        await self.refresh()
        return self.is_available(*key)
