"""Raw row matrix -> normalized observation records."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Iterable, Optional

from backend.domain.constraints import (
    validate_field_mapping,
    validate_raw_rows,
    validate_study_type,
)
from backend.domain.models import (
    STUDY_MEETING,
    STUDY_WORKSTATION,
    FieldMapping,
    ObservationRecord,
    RecordFilter,
)
from backend.domain.parsing import cell_text, parse_int, parse_status
from backend.utils.logger import get_logger


logger = get_logger(__name__)

UNKNOWN_FLOOR = "Unknown"
UNKNOWN_DATE = "Unknown Date"
UNKNOWN_TIME = "Unknown Time"
UNASSIGNED_DEPARTMENT = "Unassigned"
DEFAULT_ROOM_TYPE = "Meeting Room"

HEADER_ECHO_TOKENS = frozenset(
    {
        "level",
        "floor",
        "department",
        "room",
        "type",
        "capacity",
        "status",
        "occupancy",
        "week",
        "day",
        "time",
    }
)


def is_blank_row(row: Optional[Sequence[Any]]) -> bool:
    return not row


def is_header_echo(floor: str) -> bool:
    """Repeated header rows pasted between data blocks."""
    return floor.lower().strip() in HEADER_ECHO_TOKENS


def has_no_signal(floor: str, date: str, time_slot: str) -> bool:
    return floor == UNKNOWN_FLOOR and not time_slot and not date


def resolve_attendee_count(is_occupied: bool, raw_count: Any) -> int:
    """Occupied rows without a usable count stand for a single attendee."""
    if not is_occupied:
        return 0
    parsed = parse_int(raw_count)
    if parsed is not None and parsed > 0:
        return parsed
    return 1


def normalize_records(
    rows: Sequence[Sequence[Any]],
    mapping: FieldMapping,
    study_type: str,
) -> list[ObservationRecord]:
    """Convert data rows (row 0 is the header) into observation records.

    Always a full pass: callers replace any previous record list with the
    result rather than patching it.
    """
    validate_raw_rows(rows)
    validate_study_type(study_type)
    validate_field_mapping(mapping)

    floor_idx = mapping.floor
    date_idx = mapping.date
    time_idx = mapping.time_slot
    week_idx = mapping.week
    day_idx = mapping.day
    status_idx = mapping.is_occupied
    department_idx = mapping.department
    room_idx = mapping.room_name
    type_idx = mapping.room_type
    count_idx = mapping.attendee_count

    records: list[ObservationRecord] = []
    skipped = 0
    for row_index in range(1, len(rows)):
        row = rows[row_index]
        if is_blank_row(row):
            skipped += 1
            continue

        def cell(index: Optional[int]) -> Any:
            if index is None or index >= len(row):
                return None
            return row[index]

        date = cell_text(cell(date_idx))
        time_slot = cell_text(cell(time_idx))
        floor = cell_text(cell(floor_idx)).strip() or UNKNOWN_FLOOR
        week = parse_int(cell(week_idx)) or None
        day = parse_int(cell(day_idx)) or None

        if is_header_echo(floor) or has_no_signal(floor, date, time_slot):
            skipped += 1
            continue

        is_occupied = parse_status(cell(status_idx))

        if study_type == STUDY_WORKSTATION:
            records.append(
                ObservationRecord(
                    id=f"obs-{row_index}",
                    date=date or UNKNOWN_DATE,
                    time_slot=time_slot or UNKNOWN_TIME,
                    floor=floor,
                    is_occupied=is_occupied,
                    department=cell_text(cell(department_idx)) or UNASSIGNED_DEPARTMENT,
                    week=week,
                    day=day,
                )
            )
            continue

        if not (time_slot or day or week or floor != UNKNOWN_FLOOR):
            skipped += 1
            continue

        records.append(
            ObservationRecord(
                id=f"mtg-{row_index}",
                date=date,
                time_slot=time_slot or UNKNOWN_TIME,
                floor=floor,
                is_occupied=is_occupied,
                room_name=cell_text(cell(room_idx)) or f"Room {row_index}",
                room_type=cell_text(cell(type_idx)) or DEFAULT_ROOM_TYPE,
                attendee_count=resolve_attendee_count(is_occupied, cell(count_idx)),
                week=week,
                day=day,
            )
        )

    logger.info(
        "Normalization completed | study_type=%s | rows=%s | records=%s | skipped=%s",
        study_type,
        max(len(rows) - 1, 0),
        len(records),
        skipped,
    )
    return records


def _excluded(selected: frozenset, value: Any) -> bool:
    return bool(selected) and value is not None and value not in selected


def filter_records(
    records: Iterable[ObservationRecord],
    record_filter: RecordFilter,
    study_type: str,
) -> list[ObservationRecord]:
    """Keep records matching every non-empty filter dimension.

    Records missing an optional attribute are not excluded by that dimension.
    """
    kept: list[ObservationRecord] = []
    for record in records:
        if record_filter.floors and record.floor not in record_filter.floors:
            continue
        if record_filter.time_slots and record.time_slot not in record_filter.time_slots:
            continue
        if study_type == STUDY_MEETING:
            if _excluded(record_filter.rooms, record.room_name or None):
                continue
            if _excluded(record_filter.room_types, record.room_type or None):
                continue
            if _excluded(record_filter.weeks, record.week):
                continue
            if _excluded(record_filter.days, record.day):
                continue
        else:
            if _excluded(record_filter.departments, record.department or None):
                continue
            if _excluded(record_filter.dates, record.date or None):
                continue
        kept.append(record)
    return kept
