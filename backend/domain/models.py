"""Domain models for observation-based utilization studies."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


STUDY_WORKSTATION = "workstation"
STUDY_MEETING = "meeting"
STUDY_TYPES = (STUDY_WORKSTATION, STUDY_MEETING)

UNCLASSIFIED = "Unclassified"
UNDERUTILIZED = "Underutilized / Size Mismatch"
REASONABLY_UTILIZED = "Reasonably Utilized"
OVER_UTILIZED = "Over Utilized"
OVER_CAPACITY_RISK = "Over Capacity Risk"
MIXED_PATTERN = "Mixed Pattern / Review Required"

SIZE_BIN_ORDER = ("1p", "2p", "3-4p", "5-7p", "8-11p", "12p+")


@dataclass(frozen=True)
class FieldMapping:
    """Field key -> column index; unmapped fields stay None."""

    floor: Optional[int] = None
    date: Optional[int] = None
    time_slot: Optional[int] = None
    week: Optional[int] = None
    day: Optional[int] = None
    is_occupied: Optional[int] = None
    department: Optional[int] = None
    room_name: Optional[int] = None
    room_type: Optional[int] = None
    capacity: Optional[int] = None
    attendee_count: Optional[int] = None

    @classmethod
    def from_dict(cls, values: dict[str, int]) -> "FieldMapping":
        known = cls.__dataclass_fields__
        return cls(**{key: value for key, value in values.items() if key in known})

    def to_dict(self) -> dict[str, int]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class ObservationRecord:
    id: str
    date: str
    time_slot: str
    floor: str
    is_occupied: bool
    department: Optional[str] = None
    room_name: Optional[str] = None
    room_type: Optional[str] = None
    attendee_count: Optional[int] = None
    week: Optional[int] = None
    day: Optional[int] = None


@dataclass(frozen=True)
class RecordFilter:
    """Optional value sets; an empty set leaves that dimension unfiltered."""

    floors: frozenset[str] = frozenset()
    time_slots: frozenset[str] = frozenset()
    rooms: frozenset[str] = frozenset()
    room_types: frozenset[str] = frozenset()
    weeks: frozenset[int] = frozenset()
    days: frozenset[int] = frozenset()
    departments: frozenset[str] = frozenset()
    dates: frozenset[str] = frozenset()


@dataclass(frozen=True)
class MeetingEvent:
    event_id: str
    floor: str
    room_name: str
    room_type: str
    week: int
    day: int
    time: str
    attendees: int
    occupied: bool
    raw_row_ids: tuple[str, ...]


@dataclass(frozen=True)
class RoomSizeBreakdown:
    floor: str
    room_name: str
    size: int
    count: int
    occupancy_pct: float
    events: list[MeetingEvent]


@dataclass(frozen=True)
class CapacityFitBucket:
    count: int
    pct: float
    events: list[MeetingEvent]


@dataclass(frozen=True)
class RoomAnalysis:
    avg_occ_raw: float
    avg_occ_rounded: int
    avg_ratio: float
    typical_bin: str
    typical_value: float
    typical_rounded: int
    typical_ratio: float
    status_rule: str


@dataclass(frozen=True)
class RoomPerformanceMetric:
    floor: str
    room_name: str
    room_type: str
    capacity: int
    observed_slots: int
    occupied_slots: int
    utilization_pct: float
    avg_occupancy: float
    meeting_size_distribution: dict[str, int]
    size_breakdown: list[RoomSizeBreakdown]
    top_meeting_size: str
    classification: str
    analysis: RoomAnalysis
    capacity_fit: dict[str, CapacityFitBucket]


@dataclass(frozen=True)
class GlobalSizeBin:
    label: str
    count: int
    occupancy_pct: float


@dataclass(frozen=True)
class ConcurrencyMetric:
    week: int
    day: int
    time_slot: str
    label: str
    occupied: int
    total: int
    pct: float
    is_peak: bool = False


@dataclass(frozen=True)
class ConcurrencyStats:
    timeline: list[ConcurrencyMetric]
    avg_pct: float
    max_pct: float
    unique_rooms_count: int


@dataclass(frozen=True)
class TimeRate:
    time: str
    rate: float


@dataclass(frozen=True)
class FloorRate:
    floor: str
    rate: float


@dataclass(frozen=True)
class UtilizationMetrics:
    study_type: str
    total_observations: int
    total_rooms: int = 0
    overall_utilization: float = 0.0
    overall_avg_attendees: float = 0.0
    avg_occupancy: float = 0.0
    peak_occupancy: float = 0.0
    occupancy_by_time: list[TimeRate] = field(default_factory=list)
    occupancy_by_floor: list[FloorRate] = field(default_factory=list)
    room_metrics: list[RoomPerformanceMetric] = field(default_factory=list)
    global_size_bins: list[GlobalSizeBin] = field(default_factory=list)
    global_insights: list[str] = field(default_factory=list)
    concurrency: Optional[ConcurrencyStats] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
