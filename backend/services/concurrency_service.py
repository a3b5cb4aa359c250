"""Share of rooms in simultaneous use across observed time points."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

import numpy as np

from backend.domain.models import ConcurrencyMetric, ConcurrencyStats, ObservationRecord
from backend.domain.parsing import minutes_of_day
from backend.utils.logger import get_logger


logger = get_logger(__name__)

ALL_ROOMS = "All Rooms"


@dataclass
class _TimepointAccumulator:
    week: int
    day: int
    time_slot: str
    observed_rooms: set[str] = field(default_factory=set)
    occupied_rooms: set[str] = field(default_factory=set)

    @property
    def sort_key(self) -> float:
        return self.week * 100000 + self.day * 2000 + minutes_of_day(self.time_slot)


def calculate_concurrency_stats(
    records: Iterable[ObservationRecord],
    room_type_filter: Optional[str] = None,
) -> ConcurrencyStats:
    """Build the chronological concurrency timeline.

    The denominator at each point is the number of rooms observed at that
    point, not the study's full room inventory.
    """
    scoped = (
        list(records)
        if room_type_filter in (None, "", ALL_ROOMS)
        else [record for record in records if record.room_type == room_type_filter]
    )

    timepoints: dict[tuple[int, int, str], _TimepointAccumulator] = {}
    unique_rooms: set[str] = set()
    for record in scoped:
        if record.room_name:
            unique_rooms.add(record.room_name)
        if not record.time_slot:
            continue

        week = record.week or 1
        day = record.day or 1
        time_slot = record.time_slot.strip()
        key = (week, day, time_slot)
        entry = timepoints.get(key)
        if entry is None:
            entry = _TimepointAccumulator(week=week, day=day, time_slot=time_slot)
            timepoints[key] = entry

        room = record.room_name or "Unknown"
        entry.observed_rooms.add(room)
        if record.is_occupied:
            entry.occupied_rooms.add(room)

    ordered = sorted(timepoints.values(), key=lambda item: item.sort_key)
    percentages = [
        (len(item.occupied_rooms) / len(item.observed_rooms)) * 100 if item.observed_rooms else 0.0
        for item in ordered
    ]
    avg_pct = float(np.mean(percentages)) if percentages else 0.0
    max_pct = float(np.max(percentages)) if percentages else 0.0

    timeline = [
        ConcurrencyMetric(
            week=item.week,
            day=item.day,
            time_slot=item.time_slot,
            label=f"W{item.week} D{item.day} {item.time_slot}",
            occupied=len(item.occupied_rooms),
            total=len(item.observed_rooms),
            pct=pct,
            is_peak=pct == max_pct,
        )
        for item, pct in zip(ordered, percentages)
    ]

    logger.info(
        "Concurrency computed | room_type=%s | timepoints=%s | avg_pct=%.2f | max_pct=%.2f",
        room_type_filter or ALL_ROOMS,
        len(timeline),
        avg_pct,
        max_pct,
    )
    return ConcurrencyStats(
        timeline=timeline,
        avg_pct=avg_pct,
        max_pct=max_pct,
        unique_rooms_count=len(unique_rooms),
    )
