from __future__ import annotations

import logging

from backend.domain.models import FieldMapping
from backend.services.mapping_service import ColumnMappingService
from backend.utils.logger import get_logger


def test_loggers_are_named_per_module() -> None:
    assert get_logger("backend.services.study_service").name == "backend.services.study_service"


def test_unrecognized_statuses_are_logged_as_warning(caplog) -> None:
    rows = [["Level", "Status"], ["L1", "maybe"], ["L1", "Occupied"]]

    with caplog.at_level(logging.WARNING, logger="backend.services.mapping_service"):
        ColumnMappingService().validate(rows, FieldMapping(floor=0, is_occupied=1), "workstation")

    assert any(
        "Unrecognized occupancy status values" in record.getMessage()
        and "count=1" in record.getMessage()
        for record in caplog.records
    )
