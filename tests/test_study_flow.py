from __future__ import annotations

from dataclasses import replace
from io import BytesIO

import pandas as pd
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from backend.controllers.study_controller import router as study_router
from backend.services.mapping_service import ColumnMappingService
from backend.services.study_service import UtilizationStudyService
from backend.utils.config import get_settings


MEETING_ROWS = [
    ["Level", "Room", "Type", "Week", "Day", "Time", "Status", "Occupancy"],
    ["L1", "Meet 01", "Meeting Room", 1, 1, "09:00", "Occupied", 4],
    ["L1", "Meet 01", "Meeting Room", 1, 2, "09:00", "Occupied", 4],
    ["L1", "Meet 01", "Meeting Room", 1, 3, "09:00", "Occupied", 4],
    ["L1", "Meet 01", "Meeting Room", 1, 4, "09:00", "Occupied", 8],
    ["L1", "Meet 01", "Meeting Room", 1, 5, "09:00", "Occupied", 8],
    ["L1", "Focus 01", "Focus Room", 1, 1, "09:00", "Vacant", 0],
]


def _build_test_app() -> FastAPI:
    get_settings.cache_clear()
    settings = replace(get_settings(), sample_meeting_slots=60, sample_workstation_records=50)
    mapping_service = ColumnMappingService(settings=settings)
    study_service = UtilizationStudyService(mapping_service=mapping_service, settings=settings)

    app = FastAPI()
    app.include_router(study_router)
    app.state.mapping_service = mapping_service
    app.state.study_service = study_service
    return app


@pytest.fixture
def client() -> TestClient:
    return TestClient(_build_test_app())


def test_results_require_a_loaded_study(client) -> None:
    assert client.get("/study/metrics").status_code == 409
    assert client.put("/study/capacities", json={"capacities": {"L1::Meet 01": 10}}).status_code == 409


def test_automap_endpoint(client) -> None:
    response = client.post(
        "/automap",
        json={"headers": ["Level", "Department", "Type", "Day", "Time", "Status"], "study_type": "meeting"},
    )

    assert response.status_code == 200
    assert response.json()["mapping"]["room_name"] == 1


def test_meeting_study_end_to_end(client) -> None:
    loaded = client.post("/study", json={"rows": MEETING_ROWS, "study_type": "meeting"})
    assert loaded.status_code == 200
    summary = loaded.json()
    assert summary["record_count"] == 6
    assert summary["headers"][0] == "Level"
    assert summary["validation"]["is_valid"] is True

    unclassified = client.get("/study/metrics").json()
    assert unclassified["room_metrics"][0]["classification"] == "Unclassified"

    capacities = client.put("/study/capacities", json={"capacities": {"L1::Meet 01": 10}})
    assert capacities.status_code == 200
    assert capacities.json()["capacities"] == {"L1::Meet 01": 10}

    metrics = client.get("/study/metrics").json()
    meet = next(room for room in metrics["room_metrics"] if room["room_name"] == "Meet 01")
    assert meet["classification"] == "Mixed Pattern / Review Required"
    assert meet["analysis"]["avg_occ_rounded"] == 6
    assert meet["top_meeting_size"] == "3-4p (60%)"
    assert metrics["total_rooms"] == 2

    concurrency = client.get("/study/concurrency", params={"room_type": "Meeting Room"}).json()
    assert [point["pct"] for point in concurrency["timeline"]] == [100.0] * 5

    filtered = client.put("/study/filter", json={"room_types": ["Focus Room"]})
    assert filtered.json() == {"record_count": 1}
    assert client.get("/study/metrics").json()["total_rooms"] == 1


def test_records_resolve_by_id_regardless_of_filter(client) -> None:
    assert client.get("/study/records").status_code == 409

    client.post("/study", json={"rows": MEETING_ROWS, "study_type": "meeting"})
    client.put("/study/filter", json={"room_types": ["Focus Room"]})

    filtered = client.get("/study/records")
    by_id = client.get("/study/records", params=[("ids", "mtg-1"), ("ids", "mtg-4")])

    assert filtered.status_code == 200
    assert [record["id"] for record in filtered.json()] == ["mtg-6"]
    assert by_id.status_code == 200
    records = by_id.json()
    assert [record["id"] for record in records] == ["mtg-1", "mtg-4"]
    assert records[1]["attendee_count"] == 8
    assert records[1]["room_name"] == "Meet 01"


def test_remapping_renormalizes_rows(client) -> None:
    client.post("/study", json={"rows": MEETING_ROWS, "study_type": "meeting"})

    response = client.put(
        "/study/mapping",
        json={"mapping": {"floor": 0, "room_name": 1, "time_slot": 5, "is_occupied": 6}},
    )

    assert response.status_code == 200
    assert response.json()["validation"]["missing_fields"] == ["Space Type", "Day"]
    options = client.get("/study/filters").json()
    assert options["room_types"] == ["Meeting Room"]
    assert options["days"] == []


def test_unknown_mapping_field_is_rejected(client) -> None:
    response = client.post(
        "/study",
        json={"rows": MEETING_ROWS, "study_type": "meeting", "mapping": {"seats": 2}},
    )

    assert response.status_code == 422


def test_exports(client) -> None:
    client.post("/study/sample", json={"study_type": "meeting"})

    workbook = client.get("/study/export")
    assert workbook.status_code == 200
    assert workbook.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    sheets = pd.read_excel(BytesIO(workbook.content), sheet_name=None)
    assert list(sheets) == ["Raw Data", "Room Performance"]

    csv_response = client.get("/study/export/concurrency")
    assert csv_response.status_code == 200
    assert csv_response.text.startswith("Time,Occupied Rooms,Total Rooms,Concurrency %")


def test_drilldown_for_unknown_room_is_404(client) -> None:
    client.post("/study", json={"rows": MEETING_ROWS, "study_type": "meeting"})

    missing = client.get("/study/export/drilldown", params={"floor": "L9", "room_name": "Nope"})
    found = client.get(
        "/study/export/drilldown",
        params={"floor": "L1", "room_name": "Meet 01", "size": 8},
    )

    assert missing.status_code == 404
    assert found.status_code == 200
    events = pd.read_excel(BytesIO(found.content), sheet_name="Events")
    assert list(events["Day"]) == [4, 5]


def test_workstation_sample_metrics(client) -> None:
    summary = client.post("/study/sample", json={"study_type": "workstation"}).json()

    assert summary["record_count"] == 50
    metrics = client.get("/study/metrics").json()
    assert metrics["study_type"] == "workstation"
    assert 0.0 <= metrics["avg_occupancy"] <= 100.0
    assert len(metrics["occupancy_by_floor"]) <= 3
