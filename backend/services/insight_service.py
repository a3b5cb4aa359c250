"""Study-wide meeting size distribution and advisory observations."""

from __future__ import annotations

from collections.abc import Mapping

from backend.domain.models import SIZE_BIN_ORDER, GlobalSizeBin


INSUFFICIENT_DATA = "Insufficient data to generate behavioral insights."
SMALL_FORMAT_DOMINANT = (
    "Most interactions are small-format (1-2p), suggesting high demand for "
    "focus or dyad rooms."
)
LARGE_FORMAT_NOTABLE = (
    "Notable volume of mid-to-large meetings indicates valid need for formal "
    "conference spaces."
)
LARGE_FORMAT_RARE = (
    "Large meetings (8p+) are infrequent; consider repurposing large boardrooms."
)
SMALL_GROUP_DOMINANT = "Small group collaboration (3-4p) is a dominant behavior."


def build_global_size_bins(
    bin_counts: Mapping[str, int],
    total_occupied_events: int,
) -> list[GlobalSizeBin]:
    bins: list[GlobalSizeBin] = []
    for label in SIZE_BIN_ORDER:
        count = int(bin_counts.get(label, 0))
        pct = (count / total_occupied_events) * 100 if total_occupied_events > 0 else 0.0
        bins.append(GlobalSizeBin(label=label, count=count, occupancy_pct=pct))
    return bins


def generate_global_insights(bins: list[GlobalSizeBin]) -> list[str]:
    counts = {item.label: item.count for item in bins}
    total = sum(counts.values())
    if total == 0:
        return [INSUFFICIENT_DATA]

    small_pct = (counts.get("1p", 0) + counts.get("2p", 0)) / total * 100
    large_pct = (counts.get("8-11p", 0) + counts.get("12p+", 0)) / total * 100

    insights: list[str] = []
    if small_pct > 60:
        insights.append(SMALL_FORMAT_DOMINANT)
    if large_pct > 15:
        insights.append(LARGE_FORMAT_NOTABLE)
    if large_pct < 5:
        insights.append(LARGE_FORMAT_RARE)
    if counts.get("3-4p", 0) > counts.get("1p", 0):
        insights.append(SMALL_GROUP_DOMINANT)
    return insights
