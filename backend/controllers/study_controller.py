"""Controller layer for utilization study endpoints."""

from __future__ import annotations

from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from pydantic import BaseModel, Field, field_validator

from backend.controllers.dependencies import get_mapping_service, get_study_service
from backend.domain.constraints import InvalidInputStructureError
from backend.domain.models import (
    ConcurrencyStats,
    FieldMapping,
    ObservationRecord,
    RecordFilter,
    UtilizationMetrics,
)
from backend.repository.data_repository import StudyFileError
from backend.services.mapping_service import ColumnMappingService
from backend.services.study_service import (
    RoomNotFoundError,
    StudyNotLoadedError,
    UtilizationStudyService,
)
from backend.utils.config import get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(tags=["study"])

StudyType = Literal["workstation", "meeting"]
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _validate_mapping_keys(value: Optional[dict[str, int]]) -> Optional[dict[str, int]]:
    if value is None:
        return None
    known = FieldMapping.__dataclass_fields__
    for key, index in value.items():
        if key not in known:
            raise ValueError(f"unknown mapping field {key!r}")
        if index < 0:
            raise ValueError(f"mapping[{key!r}] must be >= 0")
    return value


class AutoMapRequest(BaseModel):
    headers: list[Optional[str]]
    study_type: StudyType


class AutoMapResponse(BaseModel):
    mapping: dict[str, int]


class LoadStudyRequest(BaseModel):
    """Raw grid: row 0 holds headers, later rows hold cell values."""

    rows: list[Optional[list[Any]]] = Field(min_length=1)
    study_type: StudyType
    mapping: Optional[dict[str, int]] = None

    @field_validator("mapping")
    @classmethod
    def validate_mapping(cls, value: Optional[dict[str, int]]) -> Optional[dict[str, int]]:
        return _validate_mapping_keys(value)


class LoadStudyFileRequest(BaseModel):
    """Server-side CSV or Excel file; the first sheet is read."""

    path: str = Field(min_length=1)
    study_type: StudyType
    mapping: Optional[dict[str, int]] = None

    @field_validator("mapping")
    @classmethod
    def validate_mapping(cls, value: Optional[dict[str, int]]) -> Optional[dict[str, int]]:
        return _validate_mapping_keys(value)


class SampleStudyRequest(BaseModel):
    study_type: StudyType


class UpdateMappingRequest(BaseModel):
    mapping: dict[str, int]

    @field_validator("mapping")
    @classmethod
    def validate_mapping(cls, value: dict[str, int]) -> dict[str, int]:
        return _validate_mapping_keys(value) or {}


class UpdateCapacitiesRequest(BaseModel):
    capacities: dict[str, int]

    @field_validator("capacities")
    @classmethod
    def validate_capacities(cls, value: dict[str, int]) -> dict[str, int]:
        for key, capacity in value.items():
            if "::" not in key:
                raise ValueError("capacity keys must follow '<location>::<roomName>'")
            if capacity < 0:
                raise ValueError("capacity values must be >= 0")
        return value


class UpdateCapacitiesResponse(BaseModel):
    capacities: dict[str, int]


class UpdateFilterRequest(BaseModel):
    floors: list[str] = Field(default_factory=list)
    time_slots: list[str] = Field(default_factory=list)
    rooms: list[str] = Field(default_factory=list)
    room_types: list[str] = Field(default_factory=list)
    weeks: list[int] = Field(default_factory=list)
    days: list[int] = Field(default_factory=list)
    departments: list[str] = Field(default_factory=list)
    dates: list[str] = Field(default_factory=list)

    def to_record_filter(self) -> RecordFilter:
        return RecordFilter(
            floors=frozenset(self.floors),
            time_slots=frozenset(self.time_slots),
            rooms=frozenset(self.rooms),
            room_types=frozenset(self.room_types),
            weeks=frozenset(self.weeks),
            days=frozenset(self.days),
            departments=frozenset(self.departments),
            dates=frozenset(self.dates),
        )


class UpdateFilterResponse(BaseModel):
    record_count: int = Field(ge=0)


class ValidationResponse(BaseModel):
    is_valid: bool
    missing_fields: list[str]
    warnings: list[str]


class StudySummaryResponse(BaseModel):
    study_type: StudyType
    headers: list[str]
    mapping: dict[str, int]
    record_count: int = Field(ge=0)
    validation: ValidationResponse


class FilterOptionsResponse(BaseModel):
    floors: list[str]
    time_slots: list[str]
    rooms: list[str]
    room_types: list[str]
    weeks: list[int]
    days: list[int]
    departments: list[str]
    dates: list[str]


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _conflict(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


def _internal_error(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@router.post("/automap", response_model=AutoMapResponse, status_code=status.HTTP_200_OK)
async def automap(
    payload: AutoMapRequest,
    mapping_service: ColumnMappingService = Depends(get_mapping_service),
) -> AutoMapResponse:
    mapping = mapping_service.auto_map(payload.headers, payload.study_type)
    return AutoMapResponse(mapping=mapping.to_dict())


@router.post("/study", response_model=StudySummaryResponse, status_code=status.HTTP_200_OK)
async def load_study(
    payload: LoadStudyRequest,
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> StudySummaryResponse:
    try:
        mapping = FieldMapping.from_dict(payload.mapping) if payload.mapping is not None else None
        result = study_service.load_study(
            rows=payload.rows,
            study_type=payload.study_type,
            mapping=mapping,
        )
        return StudySummaryResponse(**result)
    except InvalidInputStructureError as exc:
        raise _bad_request(exc) from exc
    except Exception as exc:  # pragma: no cover - unexpected failure
        logger.exception("Unexpected study load failure")
        raise _internal_error("Failed to load study") from exc


@router.post("/study/file", response_model=StudySummaryResponse, status_code=status.HTTP_200_OK)
async def load_study_file(
    payload: LoadStudyFileRequest,
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> StudySummaryResponse:
    try:
        mapping = FieldMapping.from_dict(payload.mapping) if payload.mapping is not None else None
        result = study_service.load_study_file(
            payload.path,
            study_type=payload.study_type,
            mapping=mapping,
        )
        return StudySummaryResponse(**result)
    except (StudyFileError, InvalidInputStructureError) as exc:
        raise _bad_request(exc) from exc
    except Exception as exc:  # pragma: no cover - unexpected failure
        logger.exception("Unexpected study file load failure")
        raise _internal_error("Failed to load study file") from exc


@router.post("/study/sample", response_model=StudySummaryResponse, status_code=status.HTTP_200_OK)
async def load_sample_study(
    payload: SampleStudyRequest,
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> StudySummaryResponse:
    try:
        result = study_service.load_sample_study(study_type=payload.study_type)
        return StudySummaryResponse(**result)
    except Exception as exc:  # pragma: no cover - unexpected failure
        logger.exception("Unexpected sample study failure")
        raise _internal_error("Failed to load sample study") from exc


@router.put("/study/mapping", response_model=StudySummaryResponse, status_code=status.HTTP_200_OK)
async def update_mapping(
    payload: UpdateMappingRequest,
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> StudySummaryResponse:
    try:
        result = study_service.update_mapping(FieldMapping.from_dict(payload.mapping))
        return StudySummaryResponse(**result)
    except StudyNotLoadedError as exc:
        raise _conflict(exc) from exc
    except InvalidInputStructureError as exc:
        raise _bad_request(exc) from exc
    except Exception as exc:  # pragma: no cover - unexpected failure
        logger.exception("Unexpected mapping update failure")
        raise _internal_error("Failed to update mapping") from exc


@router.put(
    "/study/capacities",
    response_model=UpdateCapacitiesResponse,
    status_code=status.HTTP_200_OK,
)
async def update_capacities(
    payload: UpdateCapacitiesRequest,
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> UpdateCapacitiesResponse:
    try:
        result = study_service.update_capacities(payload.capacities)
        return UpdateCapacitiesResponse(capacities={key: int(value) for key, value in result.items()})
    except StudyNotLoadedError as exc:
        raise _conflict(exc) from exc
    except InvalidInputStructureError as exc:
        raise _bad_request(exc) from exc


@router.put("/study/filter", response_model=UpdateFilterResponse, status_code=status.HTTP_200_OK)
async def update_filter(
    payload: UpdateFilterRequest,
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> UpdateFilterResponse:
    try:
        count = study_service.update_filter(payload.to_record_filter())
        return UpdateFilterResponse(record_count=count)
    except StudyNotLoadedError as exc:
        raise _conflict(exc) from exc


@router.get("/study/validation", response_model=ValidationResponse, status_code=status.HTTP_200_OK)
async def get_validation(
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> ValidationResponse:
    try:
        return ValidationResponse(**study_service.get_validation_report().to_dict())
    except StudyNotLoadedError as exc:
        raise _conflict(exc) from exc


@router.get("/study/filters", response_model=FilterOptionsResponse, status_code=status.HTTP_200_OK)
async def get_filter_options(
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> FilterOptionsResponse:
    try:
        return FilterOptionsResponse(**study_service.get_filter_options())
    except StudyNotLoadedError as exc:
        raise _conflict(exc) from exc


@router.get(
    "/study/records",
    response_model=list[ObservationRecord],
    status_code=status.HTTP_200_OK,
)
async def get_records(
    ids: Optional[list[str]] = Query(default=None),
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> list[ObservationRecord]:
    try:
        return study_service.get_records(ids)
    except StudyNotLoadedError as exc:
        raise _conflict(exc) from exc


@router.get("/study/metrics", response_model=UtilizationMetrics, status_code=status.HTTP_200_OK)
async def get_metrics(
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> UtilizationMetrics:
    try:
        return study_service.get_metrics()
    except StudyNotLoadedError as exc:
        raise _conflict(exc) from exc
    except Exception as exc:  # pragma: no cover - unexpected failure
        logger.exception("Unexpected metrics failure")
        raise _internal_error("Failed to compute metrics") from exc


@router.get("/study/concurrency", response_model=ConcurrencyStats, status_code=status.HTTP_200_OK)
async def get_concurrency(
    room_type: Optional[str] = Query(default=None),
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> ConcurrencyStats:
    try:
        return study_service.get_concurrency(room_type)
    except StudyNotLoadedError as exc:
        raise _conflict(exc) from exc


@router.get("/study/export", status_code=status.HTTP_200_OK)
async def export_workbook(
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> Response:
    try:
        payload = study_service.export_workbook()
    except StudyNotLoadedError as exc:
        raise _conflict(exc) from exc
    except Exception as exc:  # pragma: no cover - unexpected failure
        logger.exception("Unexpected workbook export failure")
        raise _internal_error("Failed to export workbook") from exc
    return Response(
        content=payload,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{settings.export_workbook_name}"'
        },
    )


@router.get("/study/export/concurrency", status_code=status.HTTP_200_OK)
async def export_concurrency(
    room_type: Optional[str] = Query(default=None),
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> Response:
    try:
        payload = study_service.export_concurrency_csv(room_type)
    except StudyNotLoadedError as exc:
        raise _conflict(exc) from exc
    return Response(
        content=payload,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="concurrency_data.csv"'},
    )


@router.get("/study/export/drilldown", status_code=status.HTTP_200_OK)
async def export_drilldown(
    floor: str = Query(min_length=1),
    room_name: str = Query(min_length=1),
    size: Optional[int] = Query(default=None, gt=0),
    study_service: UtilizationStudyService = Depends(get_study_service),
) -> Response:
    try:
        payload = study_service.export_drilldown(floor=floor, room_name=room_name, size=size)
    except StudyNotLoadedError as exc:
        raise _conflict(exc) from exc
    except RoomNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(
        content=payload,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="Drilldown_Events.xlsx"'},
    )
