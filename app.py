"""
app.py: FastAPI application factory.

This is the ASGI application object imported by uvicorn.
It wires the study services and registers routers.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.controllers.study_controller import router as study_router
from backend.repository.data_repository import StudyRepository
from backend.services.mapping_service import ColumnMappingService
from backend.services.study_service import UtilizationStudyService
from backend.utils.config import get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def create_app() -> FastAPI:
    """
    Build and wire the FastAPI application.

    Services are created here and exposed through app.state so every
    dependency is traceable from this function.
    """
    settings = get_settings()

    repository = StudyRepository(settings)
    mapping_service = ColumnMappingService(settings=settings)
    study_service = UtilizationStudyService(
        mapping_service=mapping_service,
        repository=repository,
        settings=settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Startup complete | app=%s | version=%s",
            settings.app_name,
            settings.app_version,
        )
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(study_router)

    app.state.repository = repository
    app.state.mapping_service = mapping_service
    app.state.study_service = study_service

    return app


# Module-level app object for uvicorn
app = create_app()
