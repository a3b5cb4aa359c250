"""Tests for structural input validation.

Only structural problems raise; everything else is recovered downstream.
"""

from __future__ import annotations

import pytest

from backend.domain.constraints import (
    InvalidInputStructureError,
    validate_field_mapping,
    validate_raw_rows,
    validate_study_type,
    validate_user_capacities,
)
from backend.domain.models import FieldMapping


# --- rows ---

def test_valid_rows_pass() -> None:
    validate_raw_rows([["Level", "Status"], ["L1", "Occupied"], [], None])


def test_rows_as_string_raises() -> None:
    with pytest.raises(InvalidInputStructureError):
        validate_raw_rows("Level,Status")


def test_row_as_string_raises() -> None:
    with pytest.raises(InvalidInputStructureError):
        validate_raw_rows([["Level"], "L1"])


def test_row_as_mapping_raises() -> None:
    with pytest.raises(InvalidInputStructureError):
        validate_raw_rows([["Level"], {"Level": "L1"}])


def test_invalid_input_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        validate_raw_rows(42)


# --- study type ---

def test_unknown_study_type_raises() -> None:
    with pytest.raises(InvalidInputStructureError):
        validate_study_type("parking")


# --- mapping ---

def test_negative_column_index_raises() -> None:
    with pytest.raises(InvalidInputStructureError):
        validate_field_mapping(FieldMapping(floor=-1))


def test_empty_mapping_passes() -> None:
    """Unmapped fields are never fatal."""
    validate_field_mapping(FieldMapping())


# --- capacities ---

def test_capacity_key_without_separator_raises() -> None:
    with pytest.raises(InvalidInputStructureError):
        validate_user_capacities({"Meet 01": 10})


def test_negative_capacity_raises() -> None:
    with pytest.raises(InvalidInputStructureError):
        validate_user_capacities({"L1::Meet 01": -2})


def test_zero_capacity_passes() -> None:
    validate_user_capacities({"L1::Meet 01": 0})


def test_fractional_capacity_raises() -> None:
    with pytest.raises(InvalidInputStructureError):
        validate_user_capacities({"L1::Meet 01": 2.5})
