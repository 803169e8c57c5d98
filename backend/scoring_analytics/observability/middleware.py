from __future__ import annotations

import time
import uuid
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from scoring_analytics.errors import AnalyticsError, InternalError, NotFoundError, ValidationError

from .metrics import record_latency, REQUEST_COUNTER, REQUEST_LATENCY

logger = structlog.get_logger("http")


async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.perf_counter()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=str(request.url.path),
        user_agent=request.headers.get("user-agent", "-"),
    )
    try:
        response = await call_next(request)
    except Exception:
        duration = (time.perf_counter() - start) * 1000
        _record(request, duration, "500")
        logger.exception(
            "request.error",
            status_code=500,
            duration_ms=round(duration, 2),
        )
        structlog.contextvars.clear_contextvars()
        raise

    duration = (time.perf_counter() - start) * 1000
    _record(request, duration, str(response.status_code))
    logger.info(
        "request.completed",
        status_code=response.status_code,
        duration_ms=round(duration, 2),
    )
    response.headers["X-Request-Id"] = request_id
    structlog.contextvars.clear_contextvars()
    return response


def _path_label(request: Request) -> str:
    # route template, not the raw path; unmatched requests share one label
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or "<unmatched>"


def _record(request: Request, duration_ms: float, status: str) -> None:
    path = _path_label(request)
    record_latency(path, duration_ms)
    REQUEST_COUNTER.labels(path=path, method=request.method, status=status).inc()
    REQUEST_LATENCY.labels(path=path, method=request.method).observe(
        duration_ms / 1000
    )


def register_request_middleware(app: FastAPI) -> None:
    app.middleware("http")(request_context_middleware)


def _error_response(request: Request, exc: AnalyticsError) -> JSONResponse:
    payload: dict[str, Any] = exc.to_dict()
    request_id = getattr(request.state, "request_id", None)
    if request_id and exc.status_code >= 500:
        payload["request_id"] = request_id
    return JSONResponse(status_code=exc.status_code, content=payload)


def analytics_error_handler(request: Request, exc: AnalyticsError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request.failed", code=exc.code, error=exc.message)
    return _error_response(request, exc)


def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # unknown routes and unsupported methods are both reported as NOT_FOUND
    if exc.status_code in (404, 405):
        return _error_response(request, NotFoundError("Endpoint not found"))
    if exc.status_code >= 500:
        return _error_response(request, InternalError("Internal server error"))
    return _error_response(request, ValidationError(str(exc.detail)))


def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(p) for p in first.get("loc", ()) if p not in ("query", "body"))
        message = f"Invalid {location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", "")
    else:
        message = "Invalid request"
    return _error_response(request, ValidationError(message))


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "request.unhandled_exception",
        exc_type=type(exc).__name__,
        error=str(exc),
    )
    return _error_response(request, InternalError("Internal server error"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AnalyticsError, analytics_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
