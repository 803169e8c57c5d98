from .clickhouse import ClickHouseClient, ClickHouseConfig, QueryResult, StoreError
from .session import close_client, get_client, get_store

__all__ = [
    "ClickHouseClient",
    "ClickHouseConfig",
    "QueryResult",
    "StoreError",
    "close_client",
    "get_client",
    "get_store",
]
