from fastapi.testclient import TestClient

from scoring_analytics.db.clickhouse import StoreError
from scoring_analytics.db.session import get_store
from scoring_analytics.main import app

from _helpers import FakeStore, aggregate_row, analytics_payload

URL = "/api/v1/scoring-analytics"


def test_query_returns_data_and_meta(client, store):
    store.rows = [aggregate_row(company_id=1), aggregate_row(company_id=2, total_points="55")]
    r = client.post(
        URL,
        json=analytics_payload(
            companyId={"include": True, "value": 1},
            group_by=["companyId"],
            order_by=[{"field": "total_points", "order": "desc"}],
            limit=10,
        ),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["data"][1] == {
        "companyId": 2,
        "total_points": 55,
        "decay_points": 40,
        "events_count": 7,
        "days": 3,
    }
    assert body["meta"]["total_rows"] == 2
    assert body["meta"]["limit"] == 10
    assert body["meta"]["table_used"] == "company_scores_daily"
    assert isinstance(body["meta"]["query_time_ms"], float)
    assert "ORDER BY total_points DESC" in store.last_sql


def test_long_range_reports_monthly_table(client, store):
    store.rows = [aggregate_row(month="2024-01-01")]
    r = client.post(URL, json=analytics_payload("2024-01-01", "2024-06-30", group_by=["day"]))
    assert r.status_code == 200, r.text
    assert r.json()["meta"]["table_used"] == "company_scores_monthly"
    assert r.json()["data"][0]["day"] == "2024-01-01"


def test_unknown_group_by_is_rejected(client, store):
    r = client.post(URL, json=analytics_payload(group_by=["category_placeholder"]))
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["error"].startswith("Invalid group_by field: category_placeholder")
    assert store.calls == []


def test_missing_filter(client):
    r = client.post(URL, json={"group_by": ["day"]})
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required field: filter", "code": "VALIDATION_ERROR"}


def test_empty_body(client):
    r = client.post(URL, content=b"", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["error"] == "Request body is required"


def test_invalid_json(client):
    r = client.post(URL, content=b"{filter:", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"
    assert r.json()["error"].startswith("Invalid JSON: ")


def test_malformed_utf8(client):
    r = client.post(URL, content=b'{"filter": "\xff"}', headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid JSON: Malformed UTF-8 characters"


def test_json_array_body(client):
    r = client.post(URL, json=[1, 2])
    assert r.status_code == 400
    assert r.json()["error"] == "Request body must be a JSON object"


def test_no_rows_is_404(client, store):
    store.rows = []
    r = client.post(URL, json=analytics_payload())
    assert r.status_code == 404
    assert r.json() == {"error": "No data found for specified filters", "code": "NO_DATA"}


def test_store_failure_is_500(client, store):
    store.error = StoreError("Code: 81. DB::Exception: Database scoring does not exist")
    r = client.post(URL, json=analytics_payload(), headers={"X-Request-Id": "req-42"})
    assert r.status_code == 500
    body = r.json()
    assert body["code"] == "DATABASE_ERROR"
    assert body["error"] == "Database query failed"
    assert "DB::Exception" not in r.text
    assert body["request_id"] == "req-42"


def test_unexpected_failure_is_internal_error():
    app.dependency_overrides[get_store] = lambda: FakeStore(error=RuntimeError("boom"))
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            r = c.post(URL, json=analytics_payload())
    finally:
        app.dependency_overrides.pop(get_store, None)
    assert r.status_code == 500
    assert r.json()["code"] == "INTERNAL_ERROR"
    assert r.json()["error"] == "Internal server error"
    assert "boom" not in r.text


def test_unknown_route_is_not_found(client):
    r = client.get("/api/v1/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Endpoint not found", "code": "NOT_FOUND"}


def test_trailing_slash_is_served(client, store):
    store.rows = [aggregate_row()]
    r = client.post(URL + "/", json=analytics_payload(), follow_redirects=False)
    assert r.status_code == 200, r.text
    assert r.json()["meta"]["table_used"] == "company_scores_daily"


def test_wrong_method_is_not_found(client):
    r = client.get(URL)
    assert r.status_code == 404
    assert r.json()["code"] == "NOT_FOUND"
