"""Room utilization classification rules."""

from __future__ import annotations

from collections.abc import Mapping

from backend.domain.models import (
    MIXED_PATTERN,
    OVER_CAPACITY_RISK,
    OVER_UTILIZED,
    REASONABLY_UTILIZED,
    SIZE_BIN_ORDER,
    UNCLASSIFIED,
    UNDERUTILIZED,
    RoomAnalysis,
)
from backend.domain.parsing import round_half_up


BIN_REPRESENTATIVE_VALUES: dict[str, float] = {
    "1p": 1.0,
    "2p": 2.0,
    "3-4p": 3.5,
    "5-7p": 6.0,
    "8-11p": 9.5,
    "12p+": 12.0,
}


def size_bin(attendees: int) -> str:
    if attendees == 1:
        return "1p"
    if attendees == 2:
        return "2p"
    if 3 <= attendees <= 4:
        return "3-4p"
    if 5 <= attendees <= 7:
        return "5-7p"
    if 8 <= attendees <= 11:
        return "8-11p"
    if attendees >= 12:
        return "12p+"
    return "0p"


def modal_bin(bin_counts: Mapping[str, int]) -> tuple[str, int]:
    """Most frequent bucket; ties resolve to the earlier bucket in fixed order."""
    label, best = "", 0
    for candidate in SIZE_BIN_ORDER:
        count = bin_counts.get(candidate, 0)
        if count > best:
            label, best = candidate, count
    return label, best


def classify_ratios(avg_ratio: float, typical_ratio: float) -> tuple[str, str]:
    if avg_ratio > 1.0 or typical_ratio > 1.0:
        return OVER_CAPACITY_RISK, "Avg or Typical > 100%"
    if avg_ratio < 0.50 and typical_ratio < 0.50:
        return UNDERUTILIZED, "Both Metrics < 50%"
    if 0.50 <= avg_ratio < 0.80 and 0.50 <= typical_ratio < 0.80:
        return REASONABLY_UTILIZED, "Both Metrics 50-79%"
    if 0.80 <= avg_ratio <= 1.0 and 0.80 <= typical_ratio <= 1.0:
        return OVER_UTILIZED, "Both Metrics 80-100%"
    return MIXED_PATTERN, "Metrics in different bands"


def classify_room(
    capacity: float,
    occupied_slots: int,
    total_attendees: int,
    bin_counts: Mapping[str, int],
) -> tuple[str, RoomAnalysis]:
    """Classify one room; averages are rounded before dividing by capacity."""
    avg_raw = total_attendees / occupied_slots if occupied_slots > 0 else 0.0
    avg_rounded = round_half_up(avg_raw)
    typical_bin, _ = modal_bin(bin_counts)
    typical_value = BIN_REPRESENTATIVE_VALUES.get(typical_bin, 0.0)
    typical_rounded = round_half_up(typical_value)

    avg_ratio = 0.0
    typical_ratio = 0.0
    if capacity <= 0:
        classification, rule = UNCLASSIFIED, "Missing Capacity"
    elif occupied_slots == 0:
        classification, rule = UNDERUTILIZED, "No Usage"
    else:
        avg_ratio = avg_rounded / capacity
        typical_ratio = typical_rounded / capacity
        classification, rule = classify_ratios(avg_ratio, typical_ratio)

    return classification, RoomAnalysis(
        avg_occ_raw=avg_raw,
        avg_occ_rounded=avg_rounded,
        avg_ratio=avg_ratio,
        typical_bin=typical_bin,
        typical_value=typical_value,
        typical_rounded=typical_rounded,
        typical_ratio=typical_ratio,
        status_rule=rule,
    )
