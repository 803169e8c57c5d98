from __future__ import annotations

from functools import lru_cache
from typing import Generator

from scoring_analytics.config import get_settings
from scoring_analytics.db.clickhouse import ClickHouseClient, ClickHouseConfig


@lru_cache
def get_client() -> ClickHouseClient:
    # One client per process; each call carries its own timeouts.
    return ClickHouseClient(ClickHouseConfig.from_settings(get_settings()))


def get_store() -> Generator[ClickHouseClient, None, None]:
    yield get_client()


def close_client() -> None:
    if get_client.cache_info().currsize:
        get_client().close()
        get_client.cache_clear()
