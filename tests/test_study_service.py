from __future__ import annotations

import pytest

from backend.domain.constraints import InvalidInputStructureError
from backend.services.study_service import StudyNotLoadedError, UtilizationStudyService


MEETING_ROWS = [
    ["Level", "Room", "Type", "Week", "Day", "Time", "Status", "Occupancy"],
    ["L1", "Meet 01", "Meeting Room", 1, 1, "09:00", "Occupied", 1],
    ["L1", "Meet 01", "Meeting Room", 1, 1, "09:00", "Occupied", 1],
    ["L1", "Meet 01", "Meeting Room", 1, 1, "09:00", "Vacant", 0],
    ["L1", "Meet 01", "Meeting Room", 1, 2, "09:00", "Occupied", 5],
]


def _loaded_service() -> UtilizationStudyService:
    service = UtilizationStudyService()
    service.load_study(rows=MEETING_ROWS, study_type="meeting")
    return service


def test_event_row_ids_resolve_to_their_records() -> None:
    service = _loaded_service()

    (room,) = service.get_metrics().room_metrics
    (two_person,) = [item for item in room.size_breakdown if item.size == 2]
    (event,) = two_person.events

    records = service.get_records(event.raw_row_ids)

    assert [record.id for record in records] == ["mtg-1", "mtg-2", "mtg-3"]
    assert [record.is_occupied for record in records] == [True, True, False]


def test_unknown_ids_resolve_to_nothing() -> None:
    assert _loaded_service().get_records(["mtg-99"]) == []


def test_metrics_read_records_from_a_single_snapshot(monkeypatch) -> None:
    service = _loaded_service()

    def _reload_workstation(*args, **kwargs):
        service.load_study(rows=[["Level", "Status"], ["L1", "Occupied"]], study_type="workstation")
        return []

    monkeypatch.setattr(service, "get_records", _reload_workstation)

    metrics = service.get_metrics()

    assert metrics.study_type == "meeting"
    assert metrics.total_rooms == 1


def test_capacities_are_whole_headcounts() -> None:
    service = _loaded_service()

    with pytest.raises(InvalidInputStructureError):
        service.update_capacities({"L1::Meet 01": 2.5})

    assert service.update_capacities({"L1::Meet 01": 10.0}) == {"L1::Meet 01": 10}
    (room,) = service.get_metrics().room_metrics
    assert room.capacity == 10
    assert isinstance(room.capacity, int)


def test_operations_before_loading_raise() -> None:
    service = UtilizationStudyService()

    with pytest.raises(StudyNotLoadedError):
        service.get_records(["mtg-1"])
    with pytest.raises(StudyNotLoadedError):
        service.get_metrics()
