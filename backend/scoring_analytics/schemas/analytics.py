# scoring_analytics/schemas/analytics.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel

DEFAULT_LIMIT = 1000
MAX_LIMIT = 10000

DirectionLiteral = Literal["ASC", "DESC"]


@dataclass(frozen=True)
class CompanyFilter:
    include: bool
    value: Optional[int] = None


@dataclass(frozen=True)
class OrderClause:
    field: str
    direction: DirectionLiteral = "ASC"


@dataclass(frozen=True)
class AnalyticsRequest:
    """Validated body of ``POST /api/v1/scoring-analytics``."""

    date_from: str
    date_to: str
    company: Optional[CompanyFilter] = None
    group_by: Tuple[str, ...] = ()
    order_by: Tuple[OrderClause, ...] = ()
    limit: int = DEFAULT_LIMIT


@dataclass(frozen=True)
class BuiltQuery:
    sql: str
    params: Dict[str, Any] = field(default_factory=dict)


# --- response models ---


class AnalyticsMeta(BaseModel):
    total_rows: int
    limit: int
    table_used: str
    query_time_ms: float


class AnalyticsResponse(BaseModel):
    data: List[Dict[str, Any]]
    meta: AnalyticsMeta


class ErrorResponse(BaseModel):
    error: str
    code: str
    request_id: Optional[str] = None


__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "AnalyticsRequest",
    "BuiltQuery",
    "CompanyFilter",
    "OrderClause",
    "AnalyticsResponse",
    "AnalyticsMeta",
    "ErrorResponse",
]
