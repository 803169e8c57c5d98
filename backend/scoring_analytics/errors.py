# backend/scoring_analytics/errors.py
"""
Error taxonomy for the analytics API.

Every error that reaches a client is one of these classes and is rendered as
``{"error": <message>, "code": <code>}`` with the class' HTTP status.
"""
from __future__ import annotations

from typing import Any, Dict


class AnalyticsError(Exception):
    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code}


class ValidationError(AnalyticsError):
    """Client input is malformed."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NoDataError(AnalyticsError):
    """The query ran but matched nothing."""

    code = "NO_DATA"
    status_code = 404


class NotFoundError(AnalyticsError):
    code = "NOT_FOUND"
    status_code = 404


class DatabaseError(AnalyticsError):
    """The columnar store failed to execute a query."""

    code = "DATABASE_ERROR"
    status_code = 500


class InternalError(AnalyticsError):
    code = "INTERNAL_ERROR"
    status_code = 500


__all__ = [
    "AnalyticsError",
    "ValidationError",
    "NoDataError",
    "NotFoundError",
    "DatabaseError",
    "InternalError",
]
