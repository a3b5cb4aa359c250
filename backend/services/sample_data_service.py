"""Deterministic synthetic study data for demos and smoke checks."""

from __future__ import annotations

import random
from typing import Any, Optional

from backend.domain.constraints import validate_study_type
from backend.domain.models import STUDY_WORKSTATION
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)

SAMPLE_FLOORS = ("L10", "L11", "L12")
SAMPLE_TIME_SLOTS = ("09:00", "10:00", "11:00", "13:00", "14:00", "15:00", "16:00")
SAMPLE_DEPARTMENTS = ("Sales", "IT", "HR", "Finance", "Product")
SAMPLE_ROOMS = (
    ("Focus 01", "Focus Room"),
    ("Meet 01", "Meeting Room"),
    ("Meet 02", "Meeting Room"),
    ("Boardroom", "Boardroom"),
)

WORKSTATION_HEADERS = ["Level", "Department", "Date", "Time", "Status"]
MEETING_HEADERS = ["Level", "Room", "Type", "Week", "Day", "Time", "Status", "Occupancy"]


def generate_sample_rows(
    study_type: str,
    settings: Optional[Settings] = None,
) -> list[list[Any]]:
    """Raw header + data rows shaped like a real survey export.

    Meeting rows are written one per attendee, the way headcount logs are
    usually captured, so event reconstruction has real work to do.
    """
    validate_study_type(study_type)
    resolved = settings or get_settings()
    rng = random.Random(resolved.sample_random_seed)

    if study_type == STUDY_WORKSTATION:
        rows: list[list[Any]] = [list(WORKSTATION_HEADERS)]
        for _ in range(resolved.sample_workstation_records):
            rows.append(
                [
                    rng.choice(SAMPLE_FLOORS),
                    rng.choice(SAMPLE_DEPARTMENTS),
                    "2024-01-01",
                    rng.choice(SAMPLE_TIME_SLOTS),
                    "Occupied" if rng.random() > 0.4 else "Vacant",
                ]
            )
    else:
        rows = [list(MEETING_HEADERS)]
        for _ in range(resolved.sample_meeting_slots):
            room_name, room_type = rng.choice(SAMPLE_ROOMS)
            time_slot = rng.choice(SAMPLE_TIME_SLOTS)
            floor = rng.choice(SAMPLE_FLOORS)
            day = rng.randint(1, 5)
            if rng.random() <= 0.3:
                rows.append([floor, room_name, room_type, 1, day, time_slot, "Vacant", 0])
                continue
            for _ in range(rng.randint(1, 8)):
                rows.append([floor, room_name, room_type, 1, day, time_slot, "Occupied", 1])

    logger.info(
        "Sample data generated | study_type=%s | rows=%s | seed=%s",
        study_type,
        len(rows) - 1,
        resolved.sample_random_seed,
    )
    return rows
