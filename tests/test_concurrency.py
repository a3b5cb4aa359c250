from __future__ import annotations

import pytest

from backend.domain.models import ObservationRecord
from backend.services.concurrency_service import calculate_concurrency_stats


def _obs(
    room: str,
    *,
    occupied: bool,
    time_slot: str = "10:00",
    week: int | None = 1,
    day: int | None = 1,
    room_type: str = "Meeting Room",
) -> ObservationRecord:
    return ObservationRecord(
        id=f"{room}-{week}-{day}-{time_slot}",
        date="",
        time_slot=time_slot,
        floor="L1",
        is_occupied=occupied,
        room_name=room,
        room_type=room_type,
        attendee_count=2 if occupied else 0,
        week=week,
        day=day,
    )


def test_two_of_three_rooms_occupied() -> None:
    stats = calculate_concurrency_stats(
        [
            _obs("A", occupied=True),
            _obs("B", occupied=True),
            _obs("C", occupied=False),
        ]
    )

    (point,) = stats.timeline
    assert point.occupied == 2
    assert point.total == 3
    assert point.pct == pytest.approx(66.6667, rel=1e-4)
    assert point.is_peak is True
    assert point.label == "W1 D1 10:00"
    assert stats.max_pct == pytest.approx(point.pct)
    assert stats.unique_rooms_count == 3


def test_timeline_is_chronological() -> None:
    stats = calculate_concurrency_stats(
        [
            _obs("A", occupied=True, week=2, day=1, time_slot="09:00"),
            _obs("A", occupied=False, week=1, day=2, time_slot="09:00"),
            _obs("A", occupied=True, week=1, day=1, time_slot="14:00"),
            _obs("A", occupied=True, week=1, day=1, time_slot="09:00"),
        ]
    )

    assert [point.label for point in stats.timeline] == [
        "W1 D1 09:00",
        "W1 D1 14:00",
        "W1 D2 09:00",
        "W2 D1 09:00",
    ]


def test_missing_week_and_day_default_to_first() -> None:
    stats = calculate_concurrency_stats([_obs("A", occupied=True, week=None, day=None)])

    assert stats.timeline[0].label == "W1 D1 10:00"


def test_average_and_every_peak_are_reported() -> None:
    stats = calculate_concurrency_stats(
        [
            _obs("A", occupied=True, time_slot="09:00"),
            _obs("B", occupied=False, time_slot="09:00"),
            _obs("A", occupied=True, time_slot="10:00"),
            _obs("B", occupied=True, time_slot="10:00"),
            _obs("A", occupied=True, time_slot="11:00"),
            _obs("B", occupied=True, time_slot="11:00"),
        ]
    )

    assert [point.pct for point in stats.timeline] == pytest.approx([50.0, 100.0, 100.0])
    assert [point.is_peak for point in stats.timeline] == [False, True, True]
    assert stats.avg_pct == pytest.approx(250.0 / 3)
    assert stats.max_pct == pytest.approx(100.0)


def test_room_type_filter_restricts_rooms() -> None:
    records = [
        _obs("A", occupied=True),
        _obs("F", occupied=False, room_type="Focus Room"),
    ]

    scoped = calculate_concurrency_stats(records, room_type_filter="Meeting Room")
    everything = calculate_concurrency_stats(records, room_type_filter="All Rooms")

    assert scoped.timeline[0].pct == pytest.approx(100.0)
    assert scoped.unique_rooms_count == 1
    assert everything.timeline[0].pct == pytest.approx(50.0)


def test_points_without_time_are_skipped() -> None:
    stats = calculate_concurrency_stats([_obs("A", occupied=True, time_slot="")])

    assert stats.timeline == []
    assert stats.avg_pct == 0.0
    assert stats.max_pct == 0.0
    assert stats.unique_rooms_count == 1
