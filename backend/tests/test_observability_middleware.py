from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from scoring_analytics.errors import NoDataError
from scoring_analytics.observability.metrics import _percentile
from scoring_analytics.observability.middleware import (
    analytics_error_handler,
    register_exception_handlers,
    register_request_middleware,
    unhandled_exception_handler,
)


def _build_app():
    app = FastAPI()
    register_request_middleware(app)
    register_exception_handlers(app)
    return app


def _request(request_id=None) -> Request:
    request = Request({"type": "http", "method": "GET", "path": "/", "headers": []})
    if request_id:
        request.state.request_id = request_id
    return request


def test_request_context_adds_request_id_header():
    app = _build_app()

    @app.get("/ok")
    def ok_route():
        return {"ok": True}

    resp = TestClient(app).get("/ok")
    assert resp.status_code == 200
    assert resp.headers.get("X-Request-Id")


def test_query_param_errors_use_validation_shape():
    app = _build_app()

    @app.get("/items")
    def items(limit: int):
        return {"limit": limit}

    resp = TestClient(app).get("/items", params={"limit": "many"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["error"].startswith("Invalid limit: ")


def test_unhandled_exception_returns_request_id():
    response = unhandled_exception_handler(_request("abc-123"), RuntimeError("boom"))
    assert response.status_code == 500
    assert b"abc-123" in response.body
    assert b"INTERNAL_ERROR" in response.body
    assert b"boom" not in response.body


def test_client_errors_omit_request_id():
    response = analytics_error_handler(_request("abc-123"), NoDataError("nothing"))
    assert response.status_code == 404
    assert b"abc-123" not in response.body


def test_percentile_interpolates():
    assert _percentile([], 50) == 0.0
    assert _percentile([10.0], 95) == 10.0
    assert _percentile([0.0, 10.0], 50) == 5.0
