# scoring_analytics/services/sample_data.py
"""
Random rows for local dashboards.

``business_scores``: the trade category's base range shifted by company size,
clamped to [-100, 100], with an occasional penalty. ``churn_events``: a year
of account events where the first 4000 companies churn.
"""
from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterator, List, Optional, Tuple

import structlog

from scoring_analytics.db.clickhouse import ClickHouseClient
from scoring_analytics.observability.instrument import log_job
from scoring_analytics.services.dashboard import BUSINESS_SCORES_TABLE, COMPANY_SIZES

logger = structlog.get_logger("sample_data")

CATEGORY_SCORES: Dict[str, Tuple[int, int]] = {
    "electricians": (70, 100),
    "plumbers": (65, 95),
    "painters": (50, 85),
    "carpenters": (60, 90),
    "hvac_technicians": (75, 100),
    "landscapers": (40, 75),
    "roofers": (55, 85),
    "masons": (60, 90),
    "plumbing_contractors": (70, 100),
    "electrical_contractors": (72, 100),
    "general_contractors": (65, 95),
    "welders": (68, 98),
    "auto_mechanics": (55, 85),
    "locksmiths": (50, 80),
}

SIZE_MODIFIERS: Dict[str, int] = {
    "small": -15,
    "medium": -5,
    "large": 5,
    "enterprise": 15,
}

COMPANY_IDS = range(1, 51)
MAX_AGE_DAYS = 60
PENALTY_CHANCE = 5  # percent
PENALTY_RANGE = (20, 50)
SCORE_MIN, SCORE_MAX = -100, 100

CHURN_EVENTS_TABLE = "churn_events"
EVENT_TYPES = (
    "LOGIN",
    "BID_SUBMITTED",
    "JOB_ACCEPTED",
    "SELF_PURCHASE_CANCEL",
    "INVOICE_DOWNLOAD",
    "TENDER_DELETE",
    "INACTIVE_30D",
)
CHURN_EVENT_COMPANIES = 10_000
# companies 1..CHURN_CUTOFF are churning and only ever lose points
CHURN_CUTOFF = 4_000
EVENT_MAX_AGE_DAYS = 365

# (low, high) inclusive point ranges
_CHURN_POINTS: Dict[str, Tuple[int, int]] = {
    "SELF_PURCHASE_CANCEL": (-25, -10),
    "TENDER_DELETE": (-25, -10),
    "INACTIVE_30D": (-25, -10),
    "LOGIN": (-12, -2),
    "BID_SUBMITTED": (-12, -2),
}
_CHURN_DEFAULT = (-6, -1)
_HEALTHY_POINTS: Dict[str, Tuple[int, int]] = {
    "JOB_ACCEPTED": (15, 30),
    "INVOICE_DOWNLOAD": (10, 20),
    "LOGIN": (3, 13),
    "BID_SUBMITTED": (3, 13),
}
_HEALTHY_DEFAULT = (1, 6)


def _score(rng: random.Random, category: str, company_size: str) -> int:
    low, high = CATEGORY_SCORES[category]
    score = rng.randint(low, high) + SIZE_MODIFIERS[company_size]
    score = max(SCORE_MIN, min(SCORE_MAX, score))
    if rng.randint(1, 100) <= PENALTY_CHANCE:
        score = max(SCORE_MIN, score - rng.randint(*PENALTY_RANGE))
    return score


def generate_business_scores(
    count: int,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
    start_id: int = 1,
) -> Iterator[Dict[str, object]]:
    rng = rng or random.Random()
    now = now or datetime.now()
    categories = list(CATEGORY_SCORES)

    for offset in range(count):
        business_id = start_id + offset
        category = rng.choice(categories)
        company_size = rng.choice(COMPANY_SIZES)
        age = timedelta(days=rng.randint(0, MAX_AGE_DAYS), seconds=rng.randint(0, 86400))
        yield {
            "business_id": business_id,
            "business_name": f"Business {business_id}",
            "company_id": rng.choice(COMPANY_IDS),
            "category": category,
            "company_size": company_size,
            "score": _score(rng, category, company_size),
            "created_at": (now - age).strftime("%Y-%m-%d %H:%M:%S"),
        }


def event_points(rng: random.Random, company_id: int, event_type: str) -> int:
    """Points for one event: churning companies only lose, healthy ones only gain."""
    if company_id <= CHURN_CUTOFF:
        low, high = _CHURN_POINTS.get(event_type, _CHURN_DEFAULT)
    else:
        low, high = _HEALTHY_POINTS.get(event_type, _HEALTHY_DEFAULT)
    return rng.randint(low, high)


def generate_churn_events(
    count: int,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
    start_id: int = 1,
) -> Iterator[Dict[str, object]]:
    rng = rng or random.Random()
    now = now or datetime.now()

    for _ in range(count):
        company_id = rng.randint(1, CHURN_EVENT_COMPANIES)
        event_type = rng.choice(EVENT_TYPES)
        points = event_points(rng, company_id, event_type)
        event_time = now - timedelta(days=rng.randint(0, EVENT_MAX_AGE_DAYS - 1))
        yield {
            "company_id": company_id,
            "event_time": event_time.strftime("%Y-%m-%d %H:%M:%S"),
            "event_type": event_type,
            "score_points": points,
            # stand-in for a running total
            "total_score": points * rng.randint(1, 50),
        }


DATASETS: Dict[str, Tuple[str, Callable[..., Iterator[Dict[str, object]]]]] = {
    "business_scores": (BUSINESS_SCORES_TABLE, generate_business_scores),
    "churn_events": (CHURN_EVENTS_TABLE, generate_churn_events),
}


@log_job("sample_data.load")
def load_sample_data(
    store: ClickHouseClient,
    total: int,
    *,
    batch_size: int = 100_000,
    rng: Optional[random.Random] = None,
    dataset: str = "business_scores",
) -> int:
    """Insert ``total`` generated rows of ``dataset`` in batches; returns rows inserted."""
    if total < 0 or batch_size < 1:
        raise ValueError("total must be >= 0 and batch_size >= 1")
    try:
        table, generate = DATASETS[dataset]
    except KeyError:
        raise ValueError(f"Unknown dataset: {dataset!r}") from None

    rng = rng or random.Random()
    now = datetime.now()
    inserted = 0
    batches = -(-total // batch_size)

    for batch in range(batches):
        size = min(batch_size, total - inserted)
        rows: List[Dict[str, object]] = list(
            generate(size, rng=rng, now=now, start_id=inserted + 1)
        )
        inserted += store.insert_rows(table, rows)
        logger.info(
            "sample_data.batch",
            table=table,
            batch=batch + 1,
            batches=batches,
            inserted=inserted,
        )

    return inserted


__all__ = [
    "CATEGORY_SCORES",
    "DATASETS",
    "EVENT_TYPES",
    "SIZE_MODIFIERS",
    "event_points",
    "generate_business_scores",
    "generate_churn_events",
    "load_sample_data",
]
