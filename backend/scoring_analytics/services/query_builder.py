# scoring_analytics/services/query_builder.py
"""
SQL assembly for the scoring rollups.

Only identifiers taken from the closed mappings below and a pre-validated
integer limit are written into the SQL text. Dates and the company id are
ClickHouse query parameters (``{name:Type}``) and travel separately.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from scoring_analytics.schemas.analytics import (
    MAX_LIMIT,
    DEFAULT_LIMIT,
    BuiltQuery,
    CompanyFilter,
    OrderClause,
)
from scoring_analytics.services.rollups import ROLLUP_TABLES

# request-facing name -> column
GROUP_BY_FIELDS: Dict[str, str] = {
    "companyId": "company_id",
    "userId": "user_id",
    "scoreContext": "score_context",
    "day": "day",
    "month": "month",
}

ORDER_BY_FIELDS: Dict[str, str] = {
    **GROUP_BY_FIELDS,
    "total_points": "total_points",
    "decay_points": "decay_points",
    "events_count": "events_count",
    "days": "days",
}

AGGREGATE_COLUMNS = ("total_points", "decay_points", "events_count", "days")

_AGGREGATE_SELECT = (
    "sum(total_points) AS total_points",
    "sum(decay_points) AS decay_points",
    "sum(events_count) AS events_count",
    "count() AS days",
)

DIRECTIONS = ("ASC", "DESC")


def resolve_column(field: str, date_field: str, mapping: Dict[str, str] = GROUP_BY_FIELDS) -> str:
    """Map a request field to its column, keeping ``day`` in step with the rollup granularity."""
    try:
        column = mapping[field]
    except KeyError:
        raise ValueError(f"Unknown field: {field!r}") from None
    if column == "day" and date_field == "month":
        return "month"
    return column


def build_query(
    table: str,
    date_field: str,
    *,
    group_by: Sequence[str],
    order_by: Sequence[OrderClause],
    date_from: str,
    date_to: str,
    company: Optional[CompanyFilter] = None,
    limit: int = DEFAULT_LIMIT,
) -> BuiltQuery:
    rollup = ROLLUP_TABLES.get(table)
    if rollup is None or rollup.date_field != date_field:
        raise ValueError(f"Unknown rollup table/date field: {table!r}/{date_field!r}")
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_LIMIT:
        raise ValueError(f"limit must be an integer between 1 and {MAX_LIMIT}")

    group_columns = [resolve_column(f, date_field) for f in group_by]

    select_list: List[str] = [*group_columns, *_AGGREGATE_SELECT]
    params: Dict[str, object] = {"date_from": date_from, "date_to": date_to}

    lines = [
        "SELECT",
        ",\n".join(f"    {expr}" for expr in select_list),
        f"FROM {rollup.table_name}",
        f"WHERE {date_field} >= {{date_from:Date}}",
        f"  AND {date_field} <= {{date_to:Date}}",
    ]

    if company is not None and company.value:
        operator = "=" if company.include else "!="
        lines.append(f"  AND company_id {operator} {{company_id:Int64}}")
        params["company_id"] = int(company.value)

    if group_columns:
        lines.append("GROUP BY " + ", ".join(group_columns))

    if order_by:
        clauses = []
        for clause in order_by:
            direction = clause.direction.upper()
            if direction not in DIRECTIONS:
                raise ValueError(f"Unknown sort direction: {clause.direction!r}")
            clauses.append(f"{resolve_column(clause.field, date_field, ORDER_BY_FIELDS)} {direction}")
        lines.append("ORDER BY " + ", ".join(clauses))

    lines.append(f"LIMIT {limit}")

    return BuiltQuery(sql="\n".join(lines), params=params)


__all__ = [
    "AGGREGATE_COLUMNS",
    "GROUP_BY_FIELDS",
    "ORDER_BY_FIELDS",
    "build_query",
    "resolve_column",
]
