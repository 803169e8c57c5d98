def test_index_lists_endpoints(client):
    r = client.get("/")
    assert r.status_code == 200
    body = r.json()
    assert body["name"] == "ClickHouse Scoring Analytics API"
    assert body["version"] == "1.0.0"
    assert "POST /api/v1/scoring-analytics" in body["endpoints"]


def test_health_ok(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "clickhouse": True}


def test_health_degraded(client, store):
    store.reachable = False
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "degraded", "clickhouse": False}
