# scoring_analytics/routers/dashboard.py
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from scoring_analytics.db.clickhouse import ClickHouseClient, StoreError
from scoring_analytics.db.session import get_store
from scoring_analytics.errors import DatabaseError
from scoring_analytics.services.dashboard import (
    BusinessScoreFilters,
    DailyAnalyticsFilters,
    fetch_business_scores,
    fetch_daily_analytics,
)

router = APIRouter(prefix="/api/v1", tags=["dashboard"])


def _envelope(data: dict) -> dict:
    meta = {"sort": data.pop("sort"), "filters": data.pop("filters")}
    return {"data": data, "meta": meta}


# ---------------------------------------------------------------------------
# /api/v1/business-scores  -> filtered listing + summary stats
# ---------------------------------------------------------------------------
@router.get("/business-scores")
def business_scores(
    name: Optional[str] = Query(None, description="Substring of business_name"),
    category: Optional[str] = Query(None),
    company_size: Optional[str] = Query(None, description="small, medium, large or enterprise"),
    date_from: Optional[date] = Query(None, description="YYYY-MM-DD inclusive"),
    date_to: Optional[date] = Query(None, description="YYYY-MM-DD inclusive"),
    score_range: Optional[str] = Query(None, description='e.g. "0-20" or "-100--80"'),
    sort: Optional[str] = Query("created_at"),
    sort_dir: Optional[str] = Query("DESC", alias="dir"),
    store: ClickHouseClient = Depends(get_store),
) -> dict:
    filters = BusinessScoreFilters(
        name=name,
        category=category,
        company_size=company_size,
        date_from=date_from,
        date_to=date_to,
        score_range=score_range,
    )
    try:
        data = fetch_business_scores(store, filters, sort=sort, direction=sort_dir)
    except StoreError as ex:
        raise DatabaseError("Database query failed") from ex
    return _envelope(data)


# ---------------------------------------------------------------------------
# /api/v1/daily-analytics  -> avg score per day and category
# ---------------------------------------------------------------------------
@router.get("/daily-analytics")
def daily_analytics(
    category: Optional[str] = Query(None),
    company_id: Optional[int] = Query(None, ge=0),
    date_from: Optional[date] = Query(None, description="YYYY-MM-DD inclusive"),
    date_to: Optional[date] = Query(None, description="YYYY-MM-DD inclusive"),
    sort: Optional[str] = Query("date"),
    sort_dir: Optional[str] = Query("DESC", alias="dir"),
    store: ClickHouseClient = Depends(get_store),
) -> dict:
    filters = DailyAnalyticsFilters(
        category=category,
        company_id=company_id,
        date_from=date_from,
        date_to=date_to,
    )
    try:
        data = fetch_daily_analytics(store, filters, sort=sort, direction=sort_dir)
    except StoreError as ex:
        raise DatabaseError("Database query failed") from ex
    return _envelope(data)
