import json
from datetime import date, datetime

import httpx
import pytest

from scoring_analytics.config import Settings
from scoring_analytics.db.clickhouse import ClickHouseClient, ClickHouseConfig, StoreError


def _client(handler, **config):
    cfg = ClickHouseConfig(url="http://ch.test:8123", user="reader", password="secret", **config)
    return ClickHouseClient(cfg, transport=httpx.MockTransport(handler))


def test_execute_sends_sql_and_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        seen["body"] = request.content.decode()
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={"data": [{"days": "2"}], "rows": 1})

    with _client(handler) as client:
        result = client.execute(
            "SELECT count() AS days FROM t WHERE day >= {date_from:Date}",
            {"date_from": date(2024, 1, 1), "company_id": 7, "flag": True},
        )

    assert result.rows == [{"days": "2"}]
    assert result.row_count == 1
    assert result.elapsed_ms >= 0
    assert seen["body"].endswith("\nFORMAT JSON")
    assert seen["params"] == {
        "database": "scoring",
        "param_date_from": "2024-01-01",
        "param_company_id": "7",
        "param_flag": "1",
    }
    assert seen["auth"].startswith("Basic ")


def test_execute_formats_datetimes():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json={"data": [], "rows": 0})

    with _client(handler) as client:
        result = client.execute("SELECT 1", {"at": datetime(2024, 5, 6, 7, 8, 9)})
    assert seen["param_at"] == "2024-05-06 07:08:09"
    assert result.rows == []


def test_http_error_status_raises_store_error():
    def handler(request):
        return httpx.Response(404, text="Code: 60. DB::Exception: Table scoring.x does not exist")

    with _client(handler) as client:
        with pytest.raises(StoreError) as exc:
            client.execute("SELECT * FROM x")
    assert "404" in str(exc.value)
    assert "does not exist" in str(exc.value)


def test_transport_error_raises_store_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(StoreError, match="request failed"):
            client.execute("SELECT 1")


def test_invalid_json_raises_store_error():
    with _client(lambda r: httpx.Response(200, text="not json")) as client:
        with pytest.raises(StoreError, match="invalid JSON"):
            client.execute("SELECT 1")


def test_insert_rows_posts_json_each_row():
    seen = {}

    def handler(request):
        seen["query"] = request.url.params.get("query")
        seen["lines"] = request.content.decode().split("\n")
        return httpx.Response(200, text="")

    rows = [{"business_id": 1, "score": 50}, {"business_id": 2, "score": -3}]
    with _client(handler) as client:
        assert client.insert_rows("business_scores", rows) == 2

    assert seen["query"] == "INSERT INTO business_scores FORMAT JSONEachRow"
    assert [json.loads(line) for line in seen["lines"]] == rows


def test_insert_rows_skips_empty_batch():
    def handler(request):
        raise AssertionError("no request expected")

    with _client(handler) as client:
        assert client.insert_rows("business_scores", []) == 0


def test_insert_rows_rejects_bad_table_name():
    with _client(lambda r: httpx.Response(200)) as client:
        with pytest.raises(ValueError):
            client.insert_rows("scores; DROP TABLE x", [{"a": 1}])


def test_ping():
    with _client(lambda r: httpx.Response(200, text="Ok.\n")) as client:
        assert client.ping() is True
    with _client(lambda r: httpx.Response(503)) as client:
        assert client.ping() is False

    def down(request):
        raise httpx.ConnectError("down", request=request)

    with _client(down) as client:
        assert client.ping() is False


def test_config_from_settings():
    settings = Settings(
        CLICKHOUSE_URL="http://ch.example:8123/",
        CLICKHOUSE_USER="u",
        CLICKHOUSE_PASSWORD="p",
        CLICKHOUSE_DB="analytics",
        CLICKHOUSE_TIMEOUT=3.0,
    )
    cfg = ClickHouseConfig.from_settings(settings)
    assert cfg.url == "http://ch.example:8123"
    assert (cfg.user, cfg.password, cfg.database, cfg.timeout) == ("u", "p", "analytics", 3.0)
