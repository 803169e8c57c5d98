# scoring_analytics/services/dashboard.py
"""
Queries behind the admin dashboards (legacy ``business_scores`` table).

Sort columns and directions come from whitelists and fall back to a default
when unknown. Every filter value is a ClickHouse query parameter.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog

from scoring_analytics.db.clickhouse import ClickHouseClient
from scoring_analytics.utils.numeric import coerce_float, coerce_int

logger = structlog.get_logger("dashboard")

BUSINESS_SCORES_TABLE = "business_scores"

BUSINESS_SORT_COLUMNS = (
    "business_id",
    "business_name",
    "company_id",
    "category",
    "company_size",
    "score",
    "created_at",
)
DAILY_SORT_COLUMNS = ("date", "category", "avg_score", "count")

COMPANY_SIZES = ("small", "medium", "large", "enterprise")

SCORE_RANGES: Dict[str, str] = {
    "": "All Scores",
    "-100--80": "-100 to -80",
    "-80--60": "-80 to -60",
    "-60--40": "-60 to -40",
    "-40--20": "-40 to -20",
    "-20-0": "-20 to 0",
    "0-20": "0 to 20",
    "20-40": "20 to 40",
    "40-60": "40 to 60",
    "60-80": "60 to 80",
    "80-100": "80 to 100",
}

RESULTS_LIMIT = 100
LOWEST_LIMIT = 10
DAILY_LIMIT = 1000

_SCORE_RANGE_RE = re.compile(r"\s*(-?\d+)-(-?\d+)\s*")


@dataclass
class BusinessScoreFilters:
    name: Optional[str] = None
    category: Optional[str] = None
    company_size: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    score_range: Optional[str] = None


@dataclass
class DailyAnalyticsFilters:
    category: Optional[str] = None
    company_id: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


def parse_score_range(value: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse ``"min-max"`` where either bound may be negative (``"-100--80"``)."""
    if not value:
        return None
    match = _SCORE_RANGE_RE.fullmatch(value)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def normalize_sort(
    column: Optional[str],
    direction: Optional[str],
    allowed: Sequence[str],
    default: str,
) -> Tuple[str, str]:
    column = (column or "").strip()
    direction = (direction or "").strip().upper()
    if column not in allowed:
        column = default
    if direction not in ("ASC", "DESC"):
        direction = "DESC"
    return column, direction


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _date_bounds(
    date_from: Optional[date],
    date_to: Optional[date],
    conditions: List[str],
    params: Dict[str, Any],
) -> None:
    if date_from is not None:
        conditions.append("created_at >= {date_from:DateTime}")
        params["date_from"] = f"{date_from.isoformat()} 00:00:00"
    if date_to is not None:
        conditions.append("created_at <= {date_to:DateTime}")
        params["date_to"] = f"{date_to.isoformat()} 23:59:59"


def build_business_filter(filters: BusinessScoreFilters) -> Tuple[str, Dict[str, Any]]:
    """
    Return the ``PREWHERE ... WHERE ...`` fragment and its parameters.

    category and company_size are selective, so they go to PREWHERE.
    """
    prewhere: List[str] = []
    where: List[str] = []
    params: Dict[str, Any] = {}

    category = _clean(filters.category)
    if category:
        prewhere.append("category = {category:String}")
        params["category"] = category

    company_size = _clean(filters.company_size)
    if company_size:
        prewhere.append("company_size = {company_size:String}")
        params["company_size"] = company_size

    name = _clean(filters.name)
    if name:
        where.append("business_name LIKE {name_pattern:String}")
        params["name_pattern"] = f"%{escape_like(name)}%"

    _date_bounds(filters.date_from, filters.date_to, where, params)

    bounds = parse_score_range(_clean(filters.score_range))
    if bounds is not None:
        where.append("score >= {score_min:Int32} AND score <= {score_max:Int32}")
        params["score_min"], params["score_max"] = bounds

    parts = []
    if prewhere:
        parts.append("PREWHERE " + " AND ".join(prewhere))
    if where:
        parts.append("WHERE " + " AND ".join(where))
    return " ".join(parts), params


def build_daily_filter(filters: DailyAnalyticsFilters) -> Tuple[str, Dict[str, Any]]:
    conditions: List[str] = []
    params: Dict[str, Any] = {}

    category = _clean(filters.category)
    if category:
        conditions.append("category = {category:String}")
        params["category"] = category

    if filters.company_id is not None:
        conditions.append("company_id = {company_id:UInt32}")
        params["company_id"] = int(filters.company_id)

    _date_bounds(filters.date_from, filters.date_to, conditions, params)

    clause = "WHERE " + " AND ".join(conditions) if conditions else ""
    return clause, params


def _finite(value: Any) -> Optional[float]:
    number = coerce_float(value)
    if number is None or not math.isfinite(number):
        return None
    return number


def _select(store: ClickHouseClient, sql: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
    return store.execute(sql, params).rows


def _business_row(row: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(row)
    for key in ("business_id", "company_id", "score"):
        if key in out:
            out[key] = coerce_int(out[key])
    return out


def fetch_business_scores(
    store: ClickHouseClient,
    filters: BusinessScoreFilters,
    *,
    sort: Optional[str] = None,
    direction: Optional[str] = None,
) -> Dict[str, Any]:
    sort_column, sort_dir = normalize_sort(sort, direction, BUSINESS_SORT_COLUMNS, "created_at")
    clause, params = build_business_filter(filters)
    source = f"FROM {BUSINESS_SCORES_TABLE} {clause}".rstrip()

    logger.info("dashboard.query", view="business_scores", sort=sort_column, dir=sort_dir, bindings=params)

    results = _select(
        store,
        "SELECT business_id, business_name, company_id, category, company_size, score, created_at "
        f"{source} ORDER BY {sort_column} {sort_dir} LIMIT {RESULTS_LIMIT}",
        params,
    )
    count_rows = _select(store, f"SELECT count() AS total {source}", params)
    avg_rows = _select(store, f"SELECT avg(score) AS avg_score {source}", params)
    avg_by_size = _select(
        store,
        f"SELECT company_size, avg(score) AS avg_score {source} "
        "GROUP BY company_size ORDER BY company_size",
        params,
    )
    count_by_size = _select(
        store,
        f"SELECT company_size, count() AS count {source} "
        "GROUP BY company_size ORDER BY company_size",
        params,
    )
    lowest = _select(
        store,
        "SELECT business_id, business_name, company_id, category, company_size, score "
        f"{source} ORDER BY score ASC LIMIT {LOWEST_LIMIT}",
        params,
    )
    categories = _select(
        store,
        f"SELECT DISTINCT category FROM {BUSINESS_SCORES_TABLE} ORDER BY category",
        {},
    )

    return {
        "results": [_business_row(r) for r in results],
        "total_rows": coerce_int(count_rows[0].get("total"), default=0) if count_rows else 0,
        "avg_score": _finite(avg_rows[0].get("avg_score")) if avg_rows else None,
        "avg_by_company_size": [
            {"company_size": r.get("company_size"), "avg_score": _finite(r.get("avg_score"))}
            for r in avg_by_size
        ],
        "count_by_company_size": [
            {"company_size": r.get("company_size"), "count": coerce_int(r.get("count"), default=0)}
            for r in count_by_size
        ],
        "lowest_scores": [_business_row(r) for r in lowest],
        "categories": [r.get("category") for r in categories],
        "company_sizes": list(COMPANY_SIZES),
        "score_ranges": SCORE_RANGES,
        "sort": {"column": sort_column, "dir": sort_dir},
        "filters": _filters_dict(filters),
    }


def fetch_daily_analytics(
    store: ClickHouseClient,
    filters: DailyAnalyticsFilters,
    *,
    sort: Optional[str] = None,
    direction: Optional[str] = None,
) -> Dict[str, Any]:
    sort_column, sort_dir = normalize_sort(sort, direction, DAILY_SORT_COLUMNS, "date")
    clause, params = build_daily_filter(filters)
    source = f"FROM {BUSINESS_SCORES_TABLE} {clause}".rstrip()

    logger.info("dashboard.query", view="daily_analytics", sort=sort_column, dir=sort_dir, bindings=params)

    rows = _select(
        store,
        "SELECT toDate(created_at) AS date, category, avg(score) AS avg_score, count() AS count "
        f"{source} GROUP BY date, category "
        f"ORDER BY {sort_column} {sort_dir} LIMIT {DAILY_LIMIT}",
        params,
    )
    overall = _select(store, f"SELECT avg(score) AS overall_avg {source}", params)
    categories = _select(
        store,
        f"SELECT DISTINCT category FROM {BUSINESS_SCORES_TABLE} ORDER BY category",
        {},
    )
    companies = _select(
        store,
        f"SELECT DISTINCT company_id FROM {BUSINESS_SCORES_TABLE} ORDER BY company_id",
        {},
    )

    data_rows = [
        {
            "date": r.get("date"),
            "category": r.get("category"),
            "avg_score": _finite(r.get("avg_score")),
            "count": coerce_int(r.get("count"), default=0),
        }
        for r in rows
    ]
    return {
        "rows": data_rows,
        "total_records": len(data_rows),
        "overall_avg": _finite(overall[0].get("overall_avg")) if overall else None,
        "categories": [r.get("category") for r in categories],
        "companies": [coerce_int(r.get("company_id")) for r in companies],
        "sort": {"column": sort_column, "dir": sort_dir},
        "filters": _filters_dict(filters),
    }


def _filters_dict(filters) -> Dict[str, Any]:
    out = {}
    for key, value in asdict(filters).items():
        if value is None or value == "":
            continue
        out[key] = value.isoformat() if isinstance(value, date) else value
    return out


__all__ = [
    "BUSINESS_SORT_COLUMNS",
    "DAILY_SORT_COLUMNS",
    "COMPANY_SIZES",
    "SCORE_RANGES",
    "BusinessScoreFilters",
    "DailyAnalyticsFilters",
    "build_business_filter",
    "build_daily_filter",
    "escape_like",
    "fetch_business_scores",
    "fetch_daily_analytics",
    "normalize_sort",
    "parse_score_range",
]
