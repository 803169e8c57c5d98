from fastapi import APIRouter, Depends

from scoring_analytics.config import get_settings
from scoring_analytics.db.clickhouse import ClickHouseClient
from scoring_analytics.db.session import get_store

router = APIRouter(tags=["health"])


@router.get("/")
def index():
    settings = get_settings()
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "endpoints": {
            "POST /api/v1/scoring-analytics": "Query scoring analytics data",
            "GET /api/v1/business-scores": "Filtered business scores with summary stats",
            "GET /api/v1/daily-analytics": "Average score per day and category",
        },
    }


@router.get("/api/health")
def healthcheck(store: ClickHouseClient = Depends(get_store)):
    reachable = store.ping()
    return {"status": "ok" if reachable else "degraded", "clickhouse": reachable}
