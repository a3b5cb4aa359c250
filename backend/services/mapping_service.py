"""Header-keyword column detection and mapping review."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Optional

from backend.domain.constraints import validate_study_type
from backend.domain.models import STUDY_WORKSTATION, FieldMapping
from backend.domain.parsing import (
    is_blank,
    is_recognized_status,
    looks_like_status,
    looks_like_time,
)
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class FieldSpec:
    key: str
    label: str
    required: bool


WORKSTATION_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("floor", "Level / Floor", True),
    FieldSpec("department", "Department (Team)", False),
    FieldSpec("date", "Date", True),
    FieldSpec("time_slot", "Time Slot", True),
    FieldSpec("is_occupied", "Status (Occupied?)", True),
)

MEETING_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("floor", "Level / Floor", True),
    FieldSpec("room_name", "Room Name", True),
    FieldSpec("room_type", "Space Type", True),
    FieldSpec("capacity", "Capacity (Marker)", False),
    FieldSpec("week", "Week", False),
    FieldSpec("day", "Day", True),
    FieldSpec("time_slot", "Time Slot", True),
    FieldSpec("is_occupied", "Status", True),
    FieldSpec("attendee_count", "Occupancy (Count)", False),
)

_COMMON_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("date", ("date", "timestamp")),
    ("time_slot", ("time", "slot", "hour", "start", "period")),
    ("floor", ("floor", "level", "zone", "lvl")),
    ("week", ("week", "wk")),
    ("day", ("day",)),
)

_WORKSTATION_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("is_occupied", ("occup", "status", "state", "vacan", "activity")),
    ("department", ("dept", "department", "team", "group", "cost center")),
)

# Meeting logs often reuse a "Department" column to carry the room name.
_MEETING_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("room_name", ("room", "name", "id", "department", "dept")),
    ("room_type", ("type", "category", "kind")),
    ("capacity", ("cap", "seat", "pax")),
    ("is_occupied", ("status", "state")),
    ("attendee_count", ("occupancy", "actual", "pax", "people", "count")),
)


@dataclass(frozen=True)
class MappingValidationReport:
    is_valid: bool
    missing_fields: list[str]
    warnings: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "missing_fields": list(self.missing_fields),
            "warnings": list(self.warnings),
        }


def fields_for(study_type: str) -> tuple[FieldSpec, ...]:
    validate_study_type(study_type)
    return WORKSTATION_FIELDS if study_type == STUDY_WORKSTATION else MEETING_FIELDS


def _find_column(headers: list[str], keywords: tuple[str, ...]) -> Optional[int]:
    for index, header in enumerate(headers):
        if any(keyword in header for keyword in keywords):
            return index
    return None


def auto_map_columns(headers: Sequence[Any], study_type: str) -> FieldMapping:
    """Guess column indexes from header text; unmatched fields stay unmapped."""
    validate_study_type(study_type)
    normalized = ["" if header is None else str(header).lower().strip() for header in headers]
    specific = _WORKSTATION_KEYWORDS if study_type == STUDY_WORKSTATION else _MEETING_KEYWORDS

    found: dict[str, int] = {}
    for key, keywords in _COMMON_KEYWORDS + specific:
        index = _find_column(normalized, keywords)
        if index is not None:
            found[key] = index
    return FieldMapping.from_dict(found)


def _cell(row: Optional[Sequence[Any]], index: int) -> Any:
    if not row or index >= len(row):
        return None
    return row[index]


def count_unrecognized_statuses(rows: Sequence[Any], mapping: FieldMapping) -> int:
    """Data rows whose status cell is filled but matches no known encoding."""
    index = mapping.is_occupied
    if index is None:
        return 0
    count = 0
    for row in rows[1:]:
        value = _cell(row, index)
        if is_blank(value):
            continue
        if not is_recognized_status(value):
            count += 1
    return count


class ColumnMappingService:
    """Suggests and reviews field mappings; never blocks processing."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def auto_map(self, headers: Sequence[Any], study_type: str) -> FieldMapping:
        mapping = auto_map_columns(headers, study_type)
        logger.info(
            "Auto-mapped columns | study_type=%s | mapped=%s | headers=%s",
            study_type,
            len(mapping.to_dict()),
            len(headers),
        )
        return mapping

    def validate(
        self,
        rows: Sequence[Any],
        mapping: FieldMapping,
        study_type: str,
    ) -> MappingValidationReport:
        mapped = mapping.to_dict()
        missing = [
            field_spec.label
            for field_spec in fields_for(study_type)
            if field_spec.required and field_spec.key not in mapped
        ]

        warnings: list[str] = []
        sample_rows = list(rows[1 : 1 + self._settings.validation_sample_rows])

        if sample_rows and mapping.is_occupied is not None:
            if not any(looks_like_status(_cell(row, mapping.is_occupied)) for row in sample_rows):
                warnings.append(
                    "Status column values don't look standard (e.g. 'Occupied', '1', 'Yes')."
                )

        if sample_rows and mapping.time_slot is not None:
            if not any(looks_like_time(_cell(row, mapping.time_slot)) for row in sample_rows):
                warnings.append("Time column doesn't appear to contain time formats.")

        unrecognized = count_unrecognized_statuses(rows, mapping)
        if unrecognized:
            warnings.append(
                f"{unrecognized} status value(s) were not recognized and will count as vacant."
            )
            logger.warning(
                "Unrecognized occupancy status values | study_type=%s | count=%s",
                study_type,
                unrecognized,
            )

        return MappingValidationReport(
            is_valid=not missing,
            missing_fields=missing,
            warnings=warnings,
        )
