"""Application settings resolved from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    validation_sample_rows: int
    sample_random_seed: int
    sample_workstation_records: int
    sample_meeting_slots: int
    export_workbook_name: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; call cache_clear() to re-read env."""
    return Settings(
        app_name=os.getenv("APP_NAME", "Utilization Study Engine"),
        app_version=os.getenv("APP_VERSION", "0.1.0"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        validation_sample_rows=_env_int("VALIDATION_SAMPLE_ROWS", 10),
        sample_random_seed=_env_int("SAMPLE_RANDOM_SEED", 42),
        sample_workstation_records=_env_int("SAMPLE_WORKSTATION_RECORDS", 800),
        sample_meeting_slots=_env_int("SAMPLE_MEETING_SLOTS", 500),
        export_workbook_name=os.getenv(
            "EXPORT_WORKBOOK_NAME", "Utilization_Analysis.xlsx"
        ),
    )
