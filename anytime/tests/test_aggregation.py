from datetime import date

import pytest

from anytime.aggregation import (
    aggregate_availability,
    enumerate_dates,
    heat_level,
    percentage,
    summarize_events,
)


def _event(start="2024-01-01", end="2024-01-01", blocks=("10:00", "14:00")):
    return {"id": "evt", "start_date": start, "end_date": end, "time_blocks": list(blocks)}


def _participants(n):
    return [{"id": f"p{i}", "name": f"P{i}", "color": "#3b82f6"} for i in range(1, n + 1)]


def _mark(participant_id, day, block, available=True):
    return {"participant_id": participant_id, "date": day, "time_block": block, "available": available}


class TestHelpers:
    def test_enumerate_dates_inclusive(self):
        assert enumerate_dates("2024-01-30", "2024-02-02") == [
            date(2024, 1, 30),
            date(2024, 1, 31),
            date(2024, 2, 1),
            date(2024, 2, 2),
        ]

    def test_enumerate_dates_reversed_is_empty(self):
        assert enumerate_dates("2024-01-02", "2024-01-01") == []

    @pytest.mark.parametrize("count", [0, 1, 5])
    def test_percentage_without_participants(self, count):
        assert percentage(count, 0) == 0

    @pytest.mark.parametrize(
        "count,max_count,level",
        [(0, 5, 0), (5, 5, 5), (4, 5, 5), (3, 5, 4), (2, 5, 3), (1, 5, 2), (1, 6, 1), (0, 0, 0)],
    )
    def test_heat_level(self, count, max_count, level):
        assert heat_level(count, max_count) == level


class TestAggregateAvailability:
    def test_worked_example(self):
        records = [
            _mark("p1", "2024-01-01", "10:00"),
            _mark("p2", "2024-01-01", "10:00"),
            _mark("p3", "2024-01-01", "14:00"),
        ]

        result = aggregate_availability(_event(), _participants(3), records)

        assert result.slot("2024-01-01", "10:00").count == 2
        assert result.slot("2024-01-01", "14:00").count == 1
        best = result.best_matches[0]
        assert (best.date, best.time_block, best.count) == ("2024-01-01", "10:00", 2)
        assert best.percentage == 66.7
        assert [p.id for p in best.participants] == ["p1", "p2"]
        assert result.max_count == 2

    def test_grid_covers_every_slot(self):
        result = aggregate_availability(
            _event("2024-03-01", "2024-03-04", ("09:00", "12:00", "15:00")), _participants(2), []
        )
        slots = list(result.slots())
        assert len(slots) == 4 * 3
        assert all(s.count == 0 and s.level == 0 for s in slots)
        assert result.best_matches == []

    def test_reversed_range_gives_empty_grid(self):
        result = aggregate_availability(_event("2024-01-05", "2024-01-01"), _participants(1), [])
        assert result.dates == []
        assert list(result.slots()) == []

    def test_unavailable_and_out_of_grid_records_ignored(self):
        records = [
            _mark("p1", "2024-01-01", "10:00", available=False),
            _mark("p1", "2024-01-02", "10:00"),
            _mark("p1", "2024-01-01", "11:00"),
        ]
        result = aggregate_availability(_event(), _participants(1), records)
        assert result.max_count == 0

    def test_unknown_participant_counts_without_entry(self):
        result = aggregate_availability(_event(), _participants(1), [_mark("ghost", "2024-01-01", "10:00")])
        slot = result.slot("2024-01-01", "10:00")
        assert slot.count == 1
        assert slot.participants == []

    def test_best_matches_limited_and_ordered(self):
        blocks = ("08:00", "09:00", "10:00", "11:00", "12:00")
        records = []
        for i, block in enumerate(blocks):
            for p in range(1, i + 2):
                records.append(_mark(f"p{p}", "2024-01-01", block))

        result = aggregate_availability(_event(blocks=blocks), _participants(5), records)

        counts = [m.count for m in result.best_matches]
        assert len(counts) == 3
        assert counts == sorted(counts, reverse=True)
        assert counts == [5, 4, 3]

    def test_ties_keep_grid_order(self):
        event = _event("2024-01-01", "2024-01-02", ("14:00", "10:00"))
        records = [
            _mark("p1", "2024-01-02", "10:00"),
            _mark("p1", "2024-01-01", "10:00"),
            _mark("p1", "2024-01-01", "14:00"),
        ]
        result = aggregate_availability(event, _participants(1), records)
        assert [(m.date, m.time_block) for m in result.best_matches] == [
            ("2024-01-01", "14:00"),
            ("2024-01-01", "10:00"),
            ("2024-01-02", "10:00"),
        ]

    def test_zero_participants_percentage(self):
        result = aggregate_availability(_event(), [], [_mark("ghost", "2024-01-01", "10:00")])
        assert result.best_matches[0].percentage == 0


class TestSummarizeEvents:
    def test_counts(self):
        events = [
            {"status": "open", "participants": [{}, {}]},
            {"status": "locked", "participants": [{}]},
            {"status": "open", "participants": []},
        ]
        assert summarize_events(events) == {
            "active_events": 2,
            "completed_events": 1,
            "total_participants": 3,
        }

    def test_empty(self):
        assert summarize_events([]) == {"active_events": 0, "completed_events": 0, "total_participants": 0}
