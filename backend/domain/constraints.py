"""Structural validation for study inputs.

Only structurally invalid inputs raise. Data-quality problems inside well
formed rows are recovered by the pipeline stages instead.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from backend.domain.models import STUDY_TYPES, FieldMapping


class InvalidInputStructureError(ValueError):
    """Raised when study input is not shaped like rows of cells."""


def validate_study_type(study_type: str) -> None:
    if study_type not in STUDY_TYPES:
        raise InvalidInputStructureError(
            f"study_type must be one of {', '.join(STUDY_TYPES)}, got {study_type!r}"
        )


def validate_raw_rows(rows: Any) -> None:
    if isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence):
        raise InvalidInputStructureError("rows must be a sequence of row sequences")
    for index, row in enumerate(rows):
        if row is None:
            continue
        if isinstance(row, (str, bytes, Mapping)) or not isinstance(row, Sequence):
            raise InvalidInputStructureError(f"row {index} is not a sequence of cells")


def validate_field_mapping(mapping: FieldMapping) -> None:
    for key, index in mapping.to_dict().items():
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidInputStructureError(f"mapping[{key!r}] must be an integer column index")
        if index < 0:
            raise InvalidInputStructureError(f"mapping[{key!r}] must be >= 0")


def validate_user_capacities(capacities: Mapping[str, Any]) -> None:
    for key, capacity in capacities.items():
        if "::" not in key:
            raise InvalidInputStructureError(
                f"capacity key {key!r} must follow '<location>::<roomName>'"
            )
        if isinstance(capacity, bool) or not isinstance(capacity, (int, float)):
            raise InvalidInputStructureError(f"capacity for {key!r} must be numeric")
        if isinstance(capacity, float) and not capacity.is_integer():
            raise InvalidInputStructureError(f"capacity for {key!r} must be a whole headcount")
        if capacity < 0:
            raise InvalidInputStructureError(f"capacity for {key!r} must be >= 0")
