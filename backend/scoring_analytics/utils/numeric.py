# scoring_analytics/utils/numeric.py
from __future__ import annotations

from typing import Optional


def coerce_float(value) -> Optional[float]:
    """
    Best-effort float conversion that returns None when the value cannot be parsed.
    """
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def coerce_int(value, default: Optional[int] = None) -> Optional[int]:
    """
    Best-effort integer conversion with support for numeric strings/floats.

    ClickHouse quotes 64-bit integers in JSON output, so aggregate columns
    usually arrive as strings.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return default


__all__ = ["coerce_float", "coerce_int"]
