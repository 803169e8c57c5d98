# scoring_analytics/services/validation.py
"""
Validation for the scoring analytics request body.

Rules run in a fixed order and the first violation wins; callers get exactly
one ``ValidationError`` naming the offending field.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import date
from typing import Any, List, Optional

from scoring_analytics.errors import ValidationError
from scoring_analytics.schemas.analytics import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    AnalyticsRequest,
    CompanyFilter,
    OrderClause,
)
from scoring_analytics.services.query_builder import GROUP_BY_FIELDS, ORDER_BY_FIELDS, resolve_column
from scoring_analytics.services.rollups import select_table

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

# company_id is bound as Int64
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

# order-by fields that only make sense when the same dimension is grouped
DIMENSION_FIELDS = frozenset(GROUP_BY_FIELDS)


def is_valid_date(value: Any) -> bool:
    if not isinstance(value, str) or not _DATE_RE.fullmatch(value):
        return False
    year, month, day = (int(p) for p in value.split("-"))
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _allowed(mapping) -> str:
    return ", ".join(mapping)


def _validate_filter(payload: Mapping) -> tuple[str, str, Optional[CompanyFilter]]:
    flt = payload.get("filter")
    if not isinstance(flt, Mapping):
        raise ValidationError("Missing required field: filter")

    for key in ("date_from", "date_to"):
        if flt.get(key) is None:
            raise ValidationError(f"Missing required field: filter.{key}")

    date_from, date_to = flt["date_from"], flt["date_to"]
    if not is_valid_date(date_from):
        raise ValidationError("Invalid date_from format. Expected YYYY-MM-DD")
    if not is_valid_date(date_to):
        raise ValidationError("Invalid date_to format. Expected YYYY-MM-DD")

    # fixed-width ISO strings compare like dates
    if date_from > date_to:
        raise ValidationError("date_from must be less than or equal to date_to")

    company = None
    raw_company = flt.get("companyId")
    if raw_company is not None:
        include = raw_company.get("include") if isinstance(raw_company, Mapping) else None
        if not isinstance(include, bool):
            raise ValidationError("filter.companyId.include must be a boolean")
        value = raw_company.get("value")
        if value is not None and not (_is_int(value) and INT64_MIN <= value <= INT64_MAX):
            raise ValidationError("filter.companyId.value must be an integer")
        company = CompanyFilter(include=include, value=value)

    return date_from, date_to, company


def _validate_group_by(raw: Any) -> List[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError("group_by must be an array of strings")
    for field in raw:
        if not isinstance(field, str) or field not in GROUP_BY_FIELDS:
            raise ValidationError(
                f"Invalid group_by field: {field}. Allowed: {_allowed(GROUP_BY_FIELDS)}"
            )
    return list(raw)


def _validate_limit(raw: Any) -> int:
    if raw is None:
        return DEFAULT_LIMIT
    if not _is_int(raw) or raw < 1 or raw > MAX_LIMIT:
        raise ValidationError(f"limit must be an integer between 1 and {MAX_LIMIT}")
    return raw


def _validate_order_by(raw: Any) -> List[OrderClause]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError("order_by must be an array of objects")

    clauses: List[OrderClause] = []
    for item in raw:
        if not isinstance(item, Mapping):
            raise ValidationError("order_by items must be objects with field and order properties")

        field = item.get("field")
        if not isinstance(field, str):
            raise ValidationError("order_by.field is required and must be a string")
        if field not in ORDER_BY_FIELDS:
            raise ValidationError(
                f"Invalid order_by field: {field}. Allowed: {_allowed(ORDER_BY_FIELDS)}"
            )

        order = item.get("order")
        if not isinstance(order, str) or order.lower() not in ("asc", "desc"):
            raise ValidationError('order_by.order must be "asc" or "desc"')

        clauses.append(OrderClause(field=field, direction=order.upper()))
    return clauses


def validate_request(payload: Any) -> AnalyticsRequest:
    """Check ``payload`` and return a typed request, or raise ``ValidationError``."""
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")

    date_from, date_to, company = _validate_filter(payload)
    group_by = _validate_group_by(payload.get("group_by"))
    limit = _validate_limit(payload.get("limit"))
    order_by = _validate_order_by(payload.get("order_by"))

    # on the monthly rollup "day" and "month" resolve to the same column
    date_field = select_table(date_from, date_to).date_field
    grouped = {resolve_column(field, date_field) for field in group_by}
    for clause in order_by:
        if clause.field not in DIMENSION_FIELDS:
            continue
        if resolve_column(clause.field, date_field, ORDER_BY_FIELDS) not in grouped:
            raise ValidationError(
                f"order_by field {clause.field} must also appear in group_by"
            )

    return AnalyticsRequest(
        date_from=date_from,
        date_to=date_to,
        company=company,
        group_by=tuple(group_by),
        order_by=tuple(order_by),
        limit=min(limit, MAX_LIMIT),
    )


__all__ = ["DIMENSION_FIELDS", "is_valid_date", "validate_request"]
