# scoring_analytics/services/scoring_analytics.py
"""
Request handling for ``POST /api/v1/scoring-analytics``.

validate -> pick rollup -> build SQL -> execute -> transform. Validation
failures short-circuit; a store failure or an empty result ends the request
with the matching error. Nothing is retried.
"""
from __future__ import annotations

from typing import Any, Dict

import structlog

from scoring_analytics.db.clickhouse import ClickHouseClient, StoreError
from scoring_analytics.errors import DatabaseError, InternalError, NoDataError
from scoring_analytics.observability.metrics import STORE_LATENCY, STORE_QUERIES
from scoring_analytics.services.query_builder import build_query
from scoring_analytics.services.rollups import select_table
from scoring_analytics.services.transform import transform_rows
from scoring_analytics.services.validation import validate_request

logger = structlog.get_logger("analytics")


def run_scoring_analytics(payload: Any, store: ClickHouseClient) -> Dict[str, Any]:
    request = validate_request(payload)

    rollup = select_table(request.date_from, request.date_to)

    query = build_query(
        rollup.table_name,
        rollup.date_field,
        group_by=request.group_by,
        order_by=request.order_by,
        date_from=request.date_from,
        date_to=request.date_to,
        company=request.company,
        limit=request.limit,
    )
    logger.info("analytics.query", table=rollup.table_name, sql=query.sql, bindings=query.params)

    try:
        result = store.execute(query.sql, query.params)
    except StoreError as ex:
        logger.exception(
            "analytics.store_error",
            error=str(ex),
            sql=query.sql,
            bindings=query.params,
        )
        STORE_QUERIES.labels(table=rollup.table_name, outcome="error").inc()
        raise DatabaseError("Database query failed") from ex

    STORE_LATENCY.labels(table=rollup.table_name).observe(result.elapsed_ms / 1000)

    if not result.rows:
        STORE_QUERIES.labels(table=rollup.table_name, outcome="no_data").inc()
        logger.info("analytics.no_data", table=rollup.table_name, bindings=query.params)
        raise NoDataError("No data found for specified filters")

    STORE_QUERIES.labels(table=rollup.table_name, outcome="ok").inc()

    try:
        data = transform_rows(result.rows, request.group_by, rollup.date_field)
    except (AttributeError, TypeError, ValueError) as ex:
        logger.exception("analytics.transform_error", error=str(ex))
        raise InternalError("Internal server error") from ex

    return {
        "data": data,
        "meta": {
            "total_rows": result.row_count,
            "limit": request.limit,
            "table_used": rollup.table_name,
            "query_time_ms": result.elapsed_ms,
        },
    }


__all__ = ["run_scoring_analytics"]
