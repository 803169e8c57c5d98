# scoring_analytics/services/rollups.py
"""
Pick the pre-aggregated table for a date range.

Ranges of 90 days or more read the monthly rollup; anything shorter reads the
daily one. The choice also fixes the date column name (``day`` or ``month``).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Union

DAILY_TABLE = "company_scores_daily"
MONTHLY_TABLE = "company_scores_monthly"
MONTHLY_MIN_SPAN_DAYS = 90

DateLike = Union[date, str]


@dataclass(frozen=True)
class RollupTable:
    table_name: str
    date_field: str

    @property
    def is_monthly(self) -> bool:
        return self.date_field == "month"


DAILY = RollupTable(DAILY_TABLE, "day")
MONTHLY = RollupTable(MONTHLY_TABLE, "month")
ROLLUP_TABLES = {DAILY.table_name: DAILY, MONTHLY.table_name: MONTHLY}


def _as_date(value: DateLike) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def span_days(date_from: DateLike, date_to: DateLike) -> int:
    return abs((_as_date(date_to) - _as_date(date_from)).days)


def select_table(date_from: DateLike, date_to: DateLike) -> RollupTable:
    if span_days(date_from, date_to) >= MONTHLY_MIN_SPAN_DAYS:
        return MONTHLY
    return DAILY


__all__ = [
    "DAILY",
    "MONTHLY",
    "DAILY_TABLE",
    "MONTHLY_TABLE",
    "MONTHLY_MIN_SPAN_DAYS",
    "ROLLUP_TABLES",
    "RollupTable",
    "select_table",
    "span_days",
]
