"""Repository layer responsible for reading study spreadsheets."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)

_EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}


class StudyFileError(RuntimeError):
    """Raised when a study file cannot be read as a grid of cells."""


def csv_width(path: Path) -> int:
    """Field count of the widest line; rows may be ragged."""
    with path.open(newline="", encoding="utf-8-sig") as handle:
        return max((len(row) for row in csv.reader(handle)), default=0)


def frame_to_rows(frame: pd.DataFrame) -> list[list[Any]]:
    """Header-less frame -> row matrix with blanks as None."""
    cleaned = frame.astype(object).where(pd.notna(frame), None)
    return [list(row) for row in cleaned.itertuples(index=False, name=None)]


class StudyRepository:
    """Loads the first sheet of a study file as raw rows (row 0 = headers)."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def load_rows(self, path: str | Path) -> list[list[Any]]:
        file_path = Path(path)
        if not file_path.is_file():
            raise StudyFileError(f"Study file not found: {file_path}")

        try:
            if file_path.suffix.lower() in _EXCEL_SUFFIXES:
                frame = pd.read_excel(file_path, sheet_name=0, header=None)
            else:
                width = csv_width(file_path)
                frame = pd.read_csv(
                    file_path,
                    header=None,
                    names=list(range(width)) if width else None,
                    encoding="utf-8-sig",
                )
        except (ValueError, OSError, csv.Error, pd.errors.ParserError) as exc:
            raise StudyFileError(f"Failed to read study file {file_path}: {exc}") from exc

        rows = frame_to_rows(frame)
        logger.info("Study file loaded | path=%s | rows=%s", file_path, len(rows))
        return rows
