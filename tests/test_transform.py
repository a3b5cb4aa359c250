from __future__ import annotations

import pytest

from backend.domain.constraints import InvalidInputStructureError
from backend.domain.models import FieldMapping, RecordFilter
from backend.services.transform_service import filter_records, normalize_records


MEETING_MAPPING = FieldMapping(
    floor=0,
    room_name=1,
    room_type=2,
    week=3,
    day=4,
    time_slot=5,
    is_occupied=6,
    attendee_count=7,
)
WORKSTATION_MAPPING = FieldMapping(floor=0, department=1, date=2, time_slot=3, is_occupied=4)


def _meeting_rows(*data_rows: list) -> list[list]:
    return [["Level", "Room", "Type", "Week", "Day", "Time", "Status", "Occupancy"], *data_rows]


def test_meeting_attendee_count_resolution() -> None:
    rows = _meeting_rows(
        ["L1", "Meet 01", "Meeting Room", 1, 1, "09:00", "Occupied", "3"],
        ["L1", "Meet 01", "Meeting Room", 1, 1, "10:00", "Occupied", None],
        ["L1", "Meet 01", "Meeting Room", 1, 1, "11:00", "Vacant", 5],
        ["L1", "Meet 01", "Meeting Room", 1, 1, "12:00", "yes", 0],
    )

    records = normalize_records(rows, MEETING_MAPPING, "meeting")

    assert [record.attendee_count for record in records] == [3, 1, 0, 1]
    assert [record.is_occupied for record in records] == [True, True, False, True]
    assert [record.id for record in records] == ["mtg-1", "mtg-2", "mtg-3", "mtg-4"]


def test_header_echo_and_blank_rows_are_skipped() -> None:
    rows = _meeting_rows(
        ["L1", "Meet 01", "Meeting Room", 1, 1, "09:00", "Occupied", 2],
        ["Level", "Room", "Type", "Week", "Day", "Time", "Status", "Occupancy"],
        [],
        None,
        [None, None, None, None, None, None, None, None],
        [" floor ", "Meet 01", "Meeting Room", 1, 1, "10:00", "Occupied", 2],
        ["L2", "Meet 02", "Meeting Room", 1, 1, "09:00", "Vacant", None],
    )

    records = normalize_records(rows, MEETING_MAPPING, "meeting")

    assert [record.id for record in records] == ["mtg-1", "mtg-7"]


def test_meeting_defaults_for_missing_cells() -> None:
    rows = _meeting_rows(["L1", None, None, None, 2, None, "Occupied"])

    (record,) = normalize_records(rows, MEETING_MAPPING, "meeting")

    assert record.room_name == "Room 1"
    assert record.room_type == "Meeting Room"
    assert record.time_slot == "Unknown Time"
    assert record.week is None
    assert record.day == 2
    assert record.attendee_count == 1


def test_workstation_records_and_defaults() -> None:
    rows = [
        ["Level", "Department", "Date", "Time", "Status"],
        ["L10", "Sales", "2024-01-01", "09:00", "Occupied"],
        ["L10", None, None, 0.375, "Unoccupied"],
        [None, None, None, None, "Occupied"],
    ]

    records = normalize_records(rows, WORKSTATION_MAPPING, "workstation")

    assert len(records) == 2
    first, second = records
    assert first.id == "obs-1"
    assert first.department == "Sales"
    assert first.is_occupied is True
    assert second.department == "Unassigned"
    assert second.date == "Unknown Date"
    assert second.time_slot == "0.375"
    assert second.is_occupied is False


def test_unmapped_fields_do_not_raise() -> None:
    rows = [["Level", "Status"], ["L1", "Occupied"]]

    records = normalize_records(rows, FieldMapping(floor=0, is_occupied=1), "workstation")

    assert len(records) == 1
    assert records[0].time_slot == "Unknown Time"


def test_mapping_beyond_row_width_reads_as_blank() -> None:
    rows = [["Level", "Status"], ["L1", "Occupied"]]

    records = normalize_records(rows, FieldMapping(floor=0, is_occupied=1, date=9), "workstation")

    assert records[0].date == "Unknown Date"


def test_empty_input_yields_no_records() -> None:
    assert normalize_records([["Level"]], FieldMapping(floor=0), "meeting") == []
    assert normalize_records([], FieldMapping(), "workstation") == []


def test_renormalizing_is_idempotent() -> None:
    rows = _meeting_rows(
        ["L1", "Meet 01", "Meeting Room", 1, 1, "09:00", "Occupied", 2],
        ["L1", "Meet 02", "Focus Room", 1, 2, "10:00", "Vacant", None],
    )

    assert normalize_records(rows, MEETING_MAPPING, "meeting") == normalize_records(
        rows, MEETING_MAPPING, "meeting"
    )


def test_structurally_invalid_rows_raise() -> None:
    with pytest.raises(InvalidInputStructureError):
        normalize_records("not rows", MEETING_MAPPING, "meeting")


def test_filter_records_by_room_type_and_day() -> None:
    rows = _meeting_rows(
        ["L1", "Meet 01", "Meeting Room", 1, 1, "09:00", "Occupied", 2],
        ["L1", "Focus 01", "Focus Room", 1, 1, "09:00", "Occupied", 1],
        ["L1", "Meet 01", "Meeting Room", 1, 2, "09:00", "Occupied", 2],
    )
    records = normalize_records(rows, MEETING_MAPPING, "meeting")

    kept = filter_records(
        records,
        RecordFilter(room_types=frozenset({"Meeting Room"}), days=frozenset({1})),
        "meeting",
    )

    assert [record.id for record in kept] == ["mtg-1"]
    assert filter_records(records, RecordFilter(), "meeting") == records
