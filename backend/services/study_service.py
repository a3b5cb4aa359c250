"""Study workflow orchestration: load -> map -> filter -> analyze -> export."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from threading import RLock
from typing import Any, Optional

from backend.domain.constraints import (
    validate_field_mapping,
    validate_raw_rows,
    validate_study_type,
    validate_user_capacities,
)
from backend.domain.models import (
    STUDY_MEETING,
    STUDY_WORKSTATION,
    ConcurrencyStats,
    FieldMapping,
    MeetingEvent,
    ObservationRecord,
    RecordFilter,
    UtilizationMetrics,
)
from backend.repository.data_repository import StudyRepository
from backend.services.concurrency_service import calculate_concurrency_stats
from backend.services.export_service import (
    build_analysis_workbook,
    build_concurrency_csv,
    build_drilldown_workbook,
)
from backend.services.mapping_service import ColumnMappingService, MappingValidationReport
from backend.services.meeting_service import calculate_meeting_metrics
from backend.services.sample_data_service import generate_sample_rows
from backend.services.transform_service import filter_records, normalize_records
from backend.services.workstation_service import calculate_workstation_metrics
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class StudyError(Exception):
    """Base exception for study workflow failures."""


class StudyNotLoadedError(StudyError):
    """Raised when an operation needs a study before one is loaded."""


class RoomNotFoundError(StudyError):
    """Raised when a drill-down targets a room absent from the results."""


@dataclass(frozen=True)
class StudySnapshot:
    study_type: str
    rows: list[list[Any]]
    mapping: FieldMapping
    records: list[ObservationRecord]


class UtilizationStudyService:
    """Holds one study and recomputes results from its raw rows on demand.

    Every mapping change re-normalizes the full row matrix; records are
    never patched in place.
    """

    def __init__(
        self,
        mapping_service: Optional[ColumnMappingService] = None,
        repository: Optional[StudyRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._mapping_service = mapping_service or ColumnMappingService(self._settings)
        self._repository = repository or StudyRepository(self._settings)
        self._lock = RLock()
        self._snapshot: StudySnapshot | None = None
        self._capacities: dict[str, int] = {}
        self._filter = RecordFilter()

    def _require_snapshot(self) -> StudySnapshot:
        with self._lock:
            if self._snapshot is None:
                raise StudyNotLoadedError("No study loaded. Upload rows or load a sample first.")
            return self._snapshot

    def _summary(self, snapshot: StudySnapshot) -> dict[str, Any]:
        report = self._mapping_service.validate(snapshot.rows, snapshot.mapping, snapshot.study_type)
        header_row = snapshot.rows[0] if snapshot.rows else []
        return {
            "study_type": snapshot.study_type,
            "headers": ["" if cell is None else str(cell) for cell in header_row],
            "mapping": snapshot.mapping.to_dict(),
            "record_count": len(snapshot.records),
            "validation": report.to_dict(),
        }

    def load_study(
        self,
        *,
        rows: Sequence[Sequence[Any]],
        study_type: str,
        mapping: FieldMapping | None = None,
    ) -> dict[str, Any]:
        validate_raw_rows(rows)
        validate_study_type(study_type)
        raw_rows = [list(row) if row is not None else [] for row in rows]
        headers = raw_rows[0] if raw_rows else []
        effective_mapping = mapping or self._mapping_service.auto_map(headers, study_type)
        records = normalize_records(raw_rows, effective_mapping, study_type)

        snapshot = StudySnapshot(
            study_type=study_type,
            rows=raw_rows,
            mapping=effective_mapping,
            records=records,
        )
        with self._lock:
            self._snapshot = snapshot
            self._capacities = {}
            self._filter = RecordFilter()
        logger.info(
            "Study loaded | study_type=%s | rows=%s | records=%s",
            study_type,
            len(raw_rows),
            len(records),
        )
        return self._summary(snapshot)

    def load_study_file(
        self,
        path: str | Path,
        *,
        study_type: str,
        mapping: FieldMapping | None = None,
    ) -> dict[str, Any]:
        rows = self._repository.load_rows(path)
        return self.load_study(rows=rows, study_type=study_type, mapping=mapping)

    def load_sample_study(self, *, study_type: str) -> dict[str, Any]:
        rows = generate_sample_rows(study_type, self._settings)
        return self.load_study(rows=rows, study_type=study_type)

    def update_mapping(self, mapping: FieldMapping) -> dict[str, Any]:
        validate_field_mapping(mapping)
        with self._lock:
            current = self._require_snapshot()
            records = normalize_records(current.rows, mapping, current.study_type)
            self._snapshot = StudySnapshot(
                study_type=current.study_type,
                rows=current.rows,
                mapping=mapping,
                records=records,
            )
            return self._summary(self._snapshot)

    def update_capacities(self, capacities: Mapping[str, int]) -> dict[str, int]:
        validate_user_capacities(capacities)
        with self._lock:
            self._require_snapshot()
            self._capacities.update({key: int(value) for key, value in capacities.items()})
            return dict(self._capacities)

    def update_filter(self, record_filter: RecordFilter) -> int:
        with self._lock:
            snapshot = self._require_snapshot()
            self._filter = record_filter
            return len(filter_records(snapshot.records, record_filter, snapshot.study_type))

    def get_validation_report(self) -> MappingValidationReport:
        snapshot = self._require_snapshot()
        return self._mapping_service.validate(snapshot.rows, snapshot.mapping, snapshot.study_type)

    def get_records(self, ids: Optional[Iterable[str]] = None) -> list[ObservationRecord]:
        """Filtered records, or the records behind specific ids.

        Id lookups ignore the active filter so an event's ``raw_row_ids``
        always resolve back to the rows it was built from.
        """
        with self._lock:
            snapshot = self._require_snapshot()
            if ids is not None:
                wanted = set(ids)
                return [record for record in snapshot.records if record.id in wanted]
            return filter_records(snapshot.records, self._filter, snapshot.study_type)

    def get_filter_options(self) -> dict[str, list[Any]]:
        snapshot = self._require_snapshot()
        records = snapshot.records
        return {
            "floors": sorted({record.floor for record in records}),
            "time_slots": sorted({record.time_slot for record in records}),
            "rooms": sorted({record.room_name for record in records if record.room_name}),
            "room_types": sorted({record.room_type for record in records if record.room_type}),
            "weeks": sorted({record.week for record in records if record.week is not None}),
            "days": sorted({record.day for record in records if record.day is not None}),
            "departments": sorted({record.department for record in records if record.department}),
            "dates": sorted({record.date for record in records if record.date}),
        }

    def get_metrics(self) -> UtilizationMetrics:
        with self._lock:
            snapshot = self._require_snapshot()
            capacities = dict(self._capacities)
            records = filter_records(snapshot.records, self._filter, snapshot.study_type)
        if snapshot.study_type == STUDY_WORKSTATION:
            return calculate_workstation_metrics(records)
        return calculate_meeting_metrics(records, capacities)

    def get_concurrency(self, room_type: str | None = None) -> ConcurrencyStats:
        return calculate_concurrency_stats(self.get_records(), room_type)

    def export_workbook(self) -> bytes:
        with self._lock:
            records = self.get_records()
            metrics = self.get_metrics()
        return build_analysis_workbook(records, metrics)

    def export_concurrency_csv(self, room_type: str | None = None) -> str:
        return build_concurrency_csv(self.get_concurrency(room_type))

    def get_drilldown_events(
        self,
        *,
        floor: str,
        room_name: str,
        size: int | None = None,
    ) -> list[MeetingEvent]:
        with self._lock:
            snapshot = self._require_snapshot()
            if snapshot.study_type != STUDY_MEETING:
                raise RoomNotFoundError("Drill-down is only available for meeting studies")
            metrics = self.get_metrics()
        for room in metrics.room_metrics:
            if room.floor != floor or room.room_name != room_name:
                continue
            events: list[MeetingEvent] = []
            for breakdown in room.size_breakdown:
                if size is None or breakdown.size == size:
                    events.extend(breakdown.events)
            return events
        raise RoomNotFoundError(f"room {floor}::{room_name} not found")

    def export_drilldown(
        self,
        *,
        floor: str,
        room_name: str,
        size: int | None = None,
    ) -> bytes:
        events = self.get_drilldown_events(floor=floor, room_name=room_name, size=size)
        return build_drilldown_workbook(events)
