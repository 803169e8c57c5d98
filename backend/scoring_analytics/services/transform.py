# scoring_analytics/services/transform.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence

from scoring_analytics.services.query_builder import AGGREGATE_COLUMNS, resolve_column
from scoring_analytics.utils.numeric import coerce_int


def transform_rows(
    rows: Iterable[Mapping[str, Any]],
    group_by: Sequence[str],
    date_field: str,
) -> List[Dict[str, Any]]:
    """
    Shape result rows for the API.

    Group-by values are keyed by the requested name (``companyId``, ``day``...)
    even when the monthly rollup answered a ``day`` grouping. Aggregates are
    coerced to int with 0 for missing values.
    """
    columns = [(field, resolve_column(field, date_field)) for field in group_by]

    out: List[Dict[str, Any]] = []
    for row in rows:
        item: Dict[str, Any] = {}
        for field, column in columns:
            if row.get(column) is not None:
                item[field] = row[column]
        for name in AGGREGATE_COLUMNS:
            item[name] = coerce_int(row.get(name), default=0)
        out.append(item)
    return out


__all__ = ["transform_rows"]
