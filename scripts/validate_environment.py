#!/usr/bin/env python3
"""Validate local utilization study environment readiness."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.domain.models import STUDY_MEETING, STUDY_WORKSTATION
from backend.services.study_service import UtilizationStudyService

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("numpy", "numpy"),
        ("pandas", "pandas"),
        ("openpyxl", "openpyxl"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{dist_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3: Workstation sample pipeline
    service = UtilizationStudyService()
    try:
        summary = service.load_sample_study(study_type=STUDY_WORKSTATION)
        metrics = service.get_metrics()
        if summary["record_count"] == 0:
            raise RuntimeError("sample produced no records")
        ok, line = _print_result(
            "Workstation sample",
            True,
            f": records={summary['record_count']} avg={metrics.avg_occupancy:.1f}%",
        )
    except Exception as exc:
        ok, line = _print_result("Workstation sample", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 4: Meeting sample pipeline and workbook export
    try:
        service.load_sample_study(study_type=STUDY_MEETING)
        metrics = service.get_metrics()
        workbook = service.export_workbook()
        if not metrics.room_metrics:
            raise RuntimeError("sample produced no rooms")
        ok, line = _print_result(
            "Meeting sample + export",
            True,
            f": rooms={metrics.total_rooms} workbook={len(workbook)} bytes",
        )
    except Exception as exc:
        ok, line = _print_result("Meeting sample + export", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Utilization Study Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
