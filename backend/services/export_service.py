"""Tabular exports of normalized records and study results."""

from __future__ import annotations

from dataclasses import asdict
from io import BytesIO
from typing import Sequence

import pandas as pd

from backend.domain.models import (
    STUDY_MEETING,
    ConcurrencyStats,
    MeetingEvent,
    ObservationRecord,
    UtilizationMetrics,
)
from backend.utils.logger import get_logger


logger = get_logger(__name__)

RAW_DATA_SHEET = "Raw Data"
ROOM_PERFORMANCE_SHEET = "Room Performance"
EVENTS_SHEET = "Events"

ROOM_PERFORMANCE_COLUMNS = [
    "Floor",
    "Room Name",
    "Type",
    "Room Capacity (User)",
    "Observed Slots",
    "Occupied Slots",
    "Utilization %",
    "Avg Occupancy",
    "Top Meeting Size",
    "Classification",
]
CONCURRENCY_COLUMNS = ["Time", "Occupied Rooms", "Total Rooms", "Concurrency %"]
EVENT_COLUMNS = ["Week", "Day", "Time", "Floor", "Room", "Type", "Attendees"]


def records_frame(records: Sequence[ObservationRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [asdict(record) for record in records],
        columns=list(ObservationRecord.__dataclass_fields__),
    )


def room_performance_frame(metrics: UtilizationMetrics) -> pd.DataFrame:
    rows = [
        {
            "Floor": room.floor,
            "Room Name": room.room_name,
            "Type": room.room_type,
            "Room Capacity (User)": room.capacity,
            "Observed Slots": room.observed_slots,
            "Occupied Slots": room.occupied_slots,
            "Utilization %": round(room.utilization_pct / 100, 2),
            "Avg Occupancy": round(room.avg_occupancy, 1),
            "Top Meeting Size": room.top_meeting_size,
            "Classification": room.classification,
        }
        for room in metrics.room_metrics
    ]
    return pd.DataFrame(rows, columns=ROOM_PERFORMANCE_COLUMNS)


def events_frame(events: Sequence[MeetingEvent]) -> pd.DataFrame:
    rows = [
        {
            "Week": event.week,
            "Day": event.day,
            "Time": event.time,
            "Floor": event.floor,
            "Room": event.room_name,
            "Type": event.room_type,
            "Attendees": event.attendees,
        }
        for event in events
    ]
    return pd.DataFrame(rows, columns=EVENT_COLUMNS)


def _write_sheets(sheets: dict[str, pd.DataFrame]) -> bytes:
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for name, frame in sheets.items():
            frame.to_excel(writer, sheet_name=name, index=False)
    return buffer.getvalue()


def build_analysis_workbook(
    records: Sequence[ObservationRecord],
    metrics: UtilizationMetrics,
) -> bytes:
    """Normalized records, plus room performance for meeting studies."""
    sheets = {RAW_DATA_SHEET: records_frame(records)}
    if metrics.study_type == STUDY_MEETING:
        sheets[ROOM_PERFORMANCE_SHEET] = room_performance_frame(metrics)
    payload = _write_sheets(sheets)
    logger.info(
        "Analysis workbook exported | sheets=%s | records=%s | bytes=%s",
        ",".join(sheets),
        len(records),
        len(payload),
    )
    return payload


def build_drilldown_workbook(events: Sequence[MeetingEvent]) -> bytes:
    return _write_sheets({EVENTS_SHEET: events_frame(events)})


def build_concurrency_csv(stats: ConcurrencyStats) -> str:
    frame = pd.DataFrame(
        [
            [point.label, point.occupied, point.total, f"{point.pct:.2f}"]
            for point in stats.timeline
        ],
        columns=CONCURRENCY_COLUMNS,
    )
    return frame.to_csv(index=False, lineterminator="\n")
