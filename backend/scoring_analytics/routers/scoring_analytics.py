# scoring_analytics/routers/scoring_analytics.py
from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from scoring_analytics.db.clickhouse import ClickHouseClient
from scoring_analytics.db.session import get_store
from scoring_analytics.errors import ValidationError
from scoring_analytics.schemas.analytics import AnalyticsResponse, ErrorResponse
from scoring_analytics.services.scoring_analytics import run_scoring_analytics

router = APIRouter(prefix="/api/v1", tags=["scoring-analytics"])


# same handler with a trailing slash, served directly instead of redirected
@router.post("/scoring-analytics/", response_model=AnalyticsResponse, include_in_schema=False)
@router.post(
    "/scoring-analytics",
    response_model=AnalyticsResponse,
    responses={
        400: {"model": ErrorResponse, "description": "VALIDATION_ERROR"},
        404: {"model": ErrorResponse, "description": "NO_DATA"},
        500: {"model": ErrorResponse, "description": "DATABASE_ERROR / INTERNAL_ERROR"},
    },
)
async def scoring_analytics(
    request: Request,
    store: ClickHouseClient = Depends(get_store),
) -> dict:
    """
    Aggregate scoring rollups.

    Body: ``{"filter": {"date_from", "date_to", "companyId"?}, "group_by"?,
    "order_by"?, "limit"?}``. Ranges of 90+ days read the monthly rollup.
    """
    raw = await request.body()
    if not raw.strip():
        raise ValidationError("Request body is required")

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as ex:
        raise ValidationError(f"Invalid JSON: {ex.msg}") from ex
    except UnicodeDecodeError as ex:
        raise ValidationError("Invalid JSON: Malformed UTF-8 characters") from ex

    # the store call blocks; keep it off the event loop
    return await run_in_threadpool(run_scoring_analytics, payload, store)
