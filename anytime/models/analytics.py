"""Typed result of the availability aggregation.

Every view (heatmap grid, best-match list, dashboard preview) renders one
of these instead of recomputing counts on its own.
"""

from pydantic import BaseModel, Field


class SlotParticipant(BaseModel):
    id: str
    name: str
    color: str | None = None


class SlotSummary(BaseModel):
    date: str
    time_block: str
    count: int = 0
    participants: list[SlotParticipant] = Field(default_factory=list)
    level: int = Field(default=0, ge=0, le=5, description="Heat level relative to the busiest slot")


class BestMatch(BaseModel):
    date: str
    time_block: str
    count: int
    participants: list[SlotParticipant]
    percentage: float = Field(description="Share of all participants available, 0-100, one decimal")


class AvailabilityAnalytics(BaseModel):
    event_id: str | None = None
    total_participants: int
    dates: list[str]
    time_blocks: list[str]
    grid: dict[str, dict[str, SlotSummary]]
    best_matches: list[BestMatch]
    max_count: int = 0

    def slot(self, date: str, time_block: str) -> SlotSummary | None:
        return self.grid.get(date, {}).get(time_block)

    def slots(self) -> list[SlotSummary]:
        """All slots in grid order: date ascending, then time-block order."""
        return [self.grid[d][t] for d in self.dates for t in self.time_blocks if t in self.grid.get(d, {})]


class AnalyticsResponse(BaseModel):
    analytics: AvailabilityAnalytics
