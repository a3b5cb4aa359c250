"""Meeting event reconstruction and per-room performance aggregation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional

from backend.domain.classification import classify_room, modal_bin, size_bin
from backend.domain.models import (
    SIZE_BIN_ORDER,
    STUDY_MEETING,
    CapacityFitBucket,
    MeetingEvent,
    ObservationRecord,
    RoomPerformanceMetric,
    RoomSizeBreakdown,
    UtilizationMetrics,
)
from backend.services.concurrency_service import calculate_concurrency_stats
from backend.services.insight_service import build_global_size_bins, generate_global_insights
from backend.utils.logger import get_logger


logger = get_logger(__name__)

FIT_BUCKETS = ("low", "mid", "fit", "over")


def capacity_key(floor: str, room_name: str) -> str:
    return f"{floor}::{room_name}"


def fit_bucket(attendees: int, capacity: float) -> str:
    ratio = attendees / capacity
    if ratio < 0.40:
        return "low"
    if ratio < 0.70:
        return "mid"
    if ratio <= 1.00:
        return "fit"
    return "over"


@dataclass
class _EventBuilder:
    event_id: str
    floor: str
    room_name: str
    room_type: str
    week: int
    day: int
    time: str
    attendees: int = 0
    occupied: bool = False
    raw_row_ids: list[str] = field(default_factory=list)

    def build(self) -> MeetingEvent:
        return MeetingEvent(
            event_id=self.event_id,
            floor=self.floor,
            room_name=self.room_name,
            room_type=self.room_type,
            week=self.week,
            day=self.day,
            time=self.time,
            attendees=self.attendees,
            occupied=self.occupied,
            raw_row_ids=tuple(self.raw_row_ids),
        )


def reconstruct_events(records: Sequence[ObservationRecord]) -> list[MeetingEvent]:
    """Group per-attendee rows into one event per room and time slot.

    Only rows individually marked occupied contribute attendees. Events are
    returned in first-seen order.
    """
    builders: dict[tuple[str, str, int, int, str], _EventBuilder] = {}
    for record in records:
        week = record.week or 0
        day = record.day or 0
        room_name = record.room_name or "Unknown"
        key = (record.floor, room_name, week, day, record.time_slot)
        builder = builders.get(key)
        if builder is None:
            builder = _EventBuilder(
                event_id=f"{record.floor}::{room_name}::{week}::{day}::{record.time_slot}",
                floor=record.floor,
                room_name=room_name,
                room_type=record.room_type or "General",
                week=week,
                day=day,
                time=record.time_slot,
            )
            builders[key] = builder

        builder.raw_row_ids.append(record.id)
        if record.is_occupied:
            builder.occupied = True
            builder.attendees += record.attendee_count if record.attendee_count is not None else 1

    return [builder.build() for builder in builders.values()]


def is_counted_occupied(event: MeetingEvent) -> bool:
    return event.occupied and event.attendees > 0


@dataclass
class RoomAccumulator:
    floor: str
    room_name: str
    room_type: str
    capacity: int
    observed_slots: int = 0
    occupied_slots: int = 0
    total_attendees: int = 0
    size_counts: dict[int, int] = field(default_factory=dict)
    bin_counts: dict[str, int] = field(default_factory=dict)
    events_by_size: dict[int, list[MeetingEvent]] = field(default_factory=dict)
    fit_events: dict[str, list[MeetingEvent]] = field(
        default_factory=lambda: {bucket: [] for bucket in FIT_BUCKETS}
    )

    def add(self, event: MeetingEvent) -> Optional[str]:
        """Fold one event in; returns its size bucket when it counts as occupied."""
        self.observed_slots += 1
        if not is_counted_occupied(event):
            return None

        size = event.attendees
        label = size_bin(size)
        self.occupied_slots += 1
        self.total_attendees += size
        self.size_counts[size] = self.size_counts.get(size, 0) + 1
        self.bin_counts[label] = self.bin_counts.get(label, 0) + 1
        self.events_by_size.setdefault(size, []).append(event)
        if self.capacity > 0:
            self.fit_events[fit_bucket(size, self.capacity)].append(event)
        return label

    def _pct(self, count: int) -> float:
        return (count / self.occupied_slots) * 100 if self.occupied_slots > 0 else 0.0

    def to_metric(self) -> RoomPerformanceMetric:
        size_breakdown = [
            RoomSizeBreakdown(
                floor=self.floor,
                room_name=self.room_name,
                size=size,
                count=count,
                occupancy_pct=self._pct(count),
                events=sorted(
                    self.events_by_size.get(size, []),
                    key=lambda event: (event.day, event.time),
                ),
            )
            for size, count in sorted(self.size_counts.items())
        ]

        classification, analysis = classify_room(
            capacity=self.capacity,
            occupied_slots=self.occupied_slots,
            total_attendees=self.total_attendees,
            bin_counts=self.bin_counts,
        )
        _, mode_count = modal_bin(self.bin_counts)
        top_meeting_size = (
            f"{analysis.typical_bin} ({self._pct(mode_count):.0f}%)"
            if analysis.typical_value > 0
            else "-"
        )

        return RoomPerformanceMetric(
            floor=self.floor,
            room_name=self.room_name,
            room_type=self.room_type,
            capacity=self.capacity,
            observed_slots=self.observed_slots,
            occupied_slots=self.occupied_slots,
            utilization_pct=(
                (self.occupied_slots / self.observed_slots) * 100
                if self.observed_slots > 0
                else 0.0
            ),
            avg_occupancy=analysis.avg_occ_raw,
            meeting_size_distribution={
                label: self.bin_counts[label] for label in SIZE_BIN_ORDER if label in self.bin_counts
            },
            size_breakdown=size_breakdown,
            top_meeting_size=top_meeting_size,
            classification=classification,
            analysis=analysis,
            capacity_fit={
                bucket: CapacityFitBucket(
                    count=len(events),
                    pct=self._pct(len(events)),
                    events=list(events),
                )
                for bucket, events in self.fit_events.items()
            },
        )


def calculate_meeting_metrics(
    records: Sequence[ObservationRecord],
    user_capacities: Optional[Mapping[str, int]] = None,
) -> UtilizationMetrics:
    """Events -> per-room metrics, global size bins, insights and concurrency."""
    capacities = user_capacities or {}
    events = reconstruct_events(records)

    rooms: dict[str, RoomAccumulator] = {}
    global_bins: dict[str, int] = {label: 0 for label in SIZE_BIN_ORDER}
    total_occupied_events = 0
    grand_total_attendees = 0

    for event in events:
        key = capacity_key(event.floor, event.room_name)
        room = rooms.get(key)
        if room is None:
            room = RoomAccumulator(
                floor=event.floor,
                room_name=event.room_name,
                room_type=event.room_type,
                capacity=int(capacities.get(key) or 0),
            )
            rooms[key] = room

        label = room.add(event)
        if label is not None:
            global_bins[label] = global_bins.get(label, 0) + 1
            total_occupied_events += 1
            grand_total_attendees += event.attendees

    room_metrics = [room.to_metric() for room in rooms.values()]
    total_observed = sum(metric.observed_slots for metric in room_metrics)
    size_bins = build_global_size_bins(global_bins, total_occupied_events)

    logger.info(
        "Meeting metrics computed | records=%s | events=%s | rooms=%s | occupied_events=%s",
        len(records),
        len(events),
        len(rooms),
        total_occupied_events,
    )
    return UtilizationMetrics(
        study_type=STUDY_MEETING,
        total_observations=total_observed,
        total_rooms=len(rooms),
        overall_utilization=(
            (total_occupied_events / total_observed) * 100 if total_observed > 0 else 0.0
        ),
        overall_avg_attendees=(
            grand_total_attendees / total_occupied_events if total_occupied_events > 0 else 0.0
        ),
        room_metrics=room_metrics,
        global_size_bins=size_bins,
        global_insights=generate_global_insights(size_bins),
        concurrency=calculate_concurrency_stats(records),
    )
