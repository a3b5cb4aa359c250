"""Desk-sweep occupancy profiles."""

from __future__ import annotations

from collections.abc import Sequence

from backend.domain.models import (
    STUDY_WORKSTATION,
    FloorRate,
    ObservationRecord,
    TimeRate,
    UtilizationMetrics,
)
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def _group_rates(pairs: list[tuple[str, bool]]) -> dict[str, float]:
    observed: dict[str, int] = {}
    occupied: dict[str, int] = {}
    for key, is_occupied in pairs:
        observed[key] = observed.get(key, 0) + 1
        if is_occupied:
            occupied[key] = occupied.get(key, 0) + 1
    return {key: occupied.get(key, 0) / total * 100 for key, total in observed.items()}


def calculate_workstation_metrics(records: Sequence[ObservationRecord]) -> UtilizationMetrics:
    total = len(records)
    occupied = sum(1 for record in records if record.is_occupied)
    avg_occupancy = (occupied / total) * 100 if total > 0 else 0.0

    time_rates = _group_rates([(record.time_slot, record.is_occupied) for record in records])
    occupancy_by_time = [TimeRate(time=slot, rate=rate) for slot, rate in sorted(time_rates.items())]
    peak_occupancy = max([0.0, *time_rates.values()])

    floor_rates = _group_rates([(record.floor, record.is_occupied) for record in records])
    occupancy_by_floor = [FloorRate(floor=floor, rate=rate) for floor, rate in floor_rates.items()]

    logger.info(
        "Workstation metrics computed | records=%s | avg_occupancy=%.2f | peak=%.2f",
        total,
        avg_occupancy,
        peak_occupancy,
    )
    return UtilizationMetrics(
        study_type=STUDY_WORKSTATION,
        total_observations=total,
        overall_utilization=avg_occupancy,
        avg_occupancy=avg_occupancy,
        peak_occupancy=peak_occupancy,
        occupancy_by_time=occupancy_by_time,
        occupancy_by_floor=occupancy_by_floor,
    )
