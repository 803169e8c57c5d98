import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure backend/ is importable even when pytest runs from repo root
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# Settings are read once; set test values *before* importing app modules
os.environ.setdefault("ENV", "test")
os.environ.setdefault("CLICKHOUSE_URL", "http://clickhouse.test:8123")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from scoring_analytics.db.session import get_store
from scoring_analytics.main import app

from _helpers import FakeStore


@pytest.fixture
def store():
    fake = FakeStore()
    app.dependency_overrides[get_store] = lambda: fake
    try:
        yield fake
    finally:
        app.dependency_overrides.pop(get_store, None)


@pytest.fixture
def client(store):
    with TestClient(app) as c:
        yield c
