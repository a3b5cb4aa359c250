"""Best-effort interpretation of heterogeneous spreadsheet cell values."""

from __future__ import annotations

import math
import re
from datetime import date, datetime, time
from typing import Any, Optional


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

_STANDARD_STATUS_TOKENS = frozenset({"1", "0", "yes", "no", "true", "false"})
_TRUE_STATUS_TOKENS = frozenset({"yes", "y", "occ"})
_FALSE_STATUS_TOKENS = frozenset({"n", "free", "empty"})


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value == ""


def cell_text(value: Any) -> str:
    """Render a raw cell as text the way a spreadsheet would display it."""
    if is_blank(value):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return str(value)


def parse_int(value: Any) -> Optional[int]:
    """Leading-integer parse: 4 -> 4, 3.7 -> 3, '4 pax' -> 4, 'n/a' -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def parse_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if not math.isnan(number) else None
    if isinstance(value, str):
        match = _LEADING_FLOAT.match(value)
        return float(match.group(1)) if match else None
    return None


def parse_status(value: Any) -> bool:
    """Map an occupancy cell to a boolean; unrecognized values are False."""
    if isinstance(value, (int, float)) and value == 1:
        return True
    if isinstance(value, str):
        text = value.lower().strip()
        if text == "1":
            return True
        if "unoccupied" in text:
            return False
        if "occupied" in text or text in _TRUE_STATUS_TOKENS:
            return True
    return False


def looks_like_status(value: Any) -> bool:
    """Whether a cell resembles a standard occupied/vacant encoding."""
    text = cell_text(value).lower()
    return "occ" in text or text in _STANDARD_STATUS_TOKENS


def is_recognized_status(value: Any) -> bool:
    """Whether parse_status interprets the value deliberately, not by default."""
    if parse_status(value) or looks_like_status(value):
        return True
    text = cell_text(value).lower().strip()
    return "vacan" in text or text in _FALSE_STATUS_TOKENS


def looks_like_time(value: Any) -> bool:
    text = cell_text(value)
    return ":" in text or parse_float(text) is not None


def minutes_of_day(time_slot: str) -> float:
    """'09:30' -> 570, 0.375 (day fraction) -> 540, 600 -> 600, garbage -> 0."""
    if ":" in time_slot:
        hours_text, minutes_text = (time_slot.split(":") + [""])[:2]
        return float((parse_int(hours_text) or 0) * 60 + (parse_int(minutes_text) or 0))
    number = parse_float(time_slot)
    if number is None:
        return 0.0
    if number < 1:
        return number * 1440
    return number


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3, 3.5 -> 4)."""
    return int(math.floor(value + 0.5))
