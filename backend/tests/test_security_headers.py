from __future__ import annotations

from fastapi.testclient import TestClient

from scoring_analytics.config import Settings
from scoring_analytics.db.session import get_store
from scoring_analytics.main import create_app

from _helpers import FakeStore


def _client(settings: Settings, **kwargs) -> TestClient:
    app = create_app(settings)
    app.dependency_overrides[get_store] = lambda: FakeStore()
    return TestClient(app, **kwargs)


def test_security_headers_with_https():
    client = _client(Settings(FORCE_HTTPS=True), base_url="https://testserver")
    resp = client.get("/api/health")

    assert resp.status_code == 200
    assert resp.headers["Strict-Transport-Security"].startswith("max-age=31536000")
    assert "Content-Security-Policy" in resp.headers
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert resp.headers["Cache-Control"] == "no-store"


def test_plain_http_is_redirected_when_https_forced():
    client = _client(Settings(FORCE_HTTPS=True), follow_redirects=False)
    resp = client.get("/api/health")
    assert resp.status_code in (301, 307, 308)
    assert resp.headers["location"].startswith("https://")


def test_no_hsts_without_https():
    client = _client(Settings(FORCE_HTTPS=False))
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert "Strict-Transport-Security" not in resp.headers
    assert resp.headers["Referrer-Policy"] == "no-referrer"


def test_untrusted_host_rejected():
    client = _client(Settings(TRUSTED_HOSTS=["api.example.com"]))
    resp = client.get("/api/health")
    assert resp.status_code == 400
