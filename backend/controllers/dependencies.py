"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from backend.services.mapping_service import ColumnMappingService
from backend.services.study_service import UtilizationStudyService
from backend.utils.config import get_settings


def get_mapping_service(request: Request) -> ColumnMappingService:
    service = getattr(request.app.state, "mapping_service", None)
    if service is None:
        service = ColumnMappingService(settings=get_settings())
        request.app.state.mapping_service = service
    return service


def get_study_service(request: Request) -> UtilizationStudyService:
    service = getattr(request.app.state, "study_service", None)
    if service is None:
        mapping_service = getattr(request.app.state, "mapping_service", None)
        if mapping_service is not None:
            service = UtilizationStudyService(
                mapping_service=mapping_service,
                settings=get_settings(),
            )
            request.app.state.study_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Study service is not initialized",
        )
    return service
