# backend/scoring_analytics/db/clickhouse.py
"""
Minimal client for the ClickHouse HTTP interface.

Queries are POSTed as the request body with ``FORMAT JSON`` appended. Values
for ``{name:Type}`` placeholders travel separately as ``param_<name>`` query
arguments, so user input never becomes part of the SQL text.
"""
from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

import httpx
import structlog

from scoring_analytics.config import Settings

logger = structlog.get_logger("clickhouse")

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class StoreError(Exception):
    """Raised when ClickHouse cannot execute a statement."""


@dataclass(frozen=True)
class ClickHouseConfig:
    url: str = "http://clickhouse:8123"
    user: str = "app"
    password: str = "app"
    database: str = "scoring"
    timeout: float = 10.0
    connect_timeout: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClickHouseConfig":
        return cls(
            url=settings.CLICKHOUSE_URL.rstrip("/"),
            user=settings.CLICKHOUSE_USER,
            password=settings.CLICKHOUSE_PASSWORD,
            database=settings.CLICKHOUSE_DB,
            timeout=settings.CLICKHOUSE_TIMEOUT,
            connect_timeout=settings.CLICKHOUSE_CONNECT_TIMEOUT,
        )


@dataclass
class QueryResult:
    rows: List[Dict[str, Any]] = field(default_factory=list)
    row_count: int = 0
    elapsed_ms: float = 0.0


def _param_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class ClickHouseClient:
    def __init__(
        self,
        config: ClickHouseConfig,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config
        self._http = httpx.Client(
            base_url=config.url,
            auth=(config.user, config.password),
            timeout=httpx.Timeout(config.timeout, connect=config.connect_timeout),
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ClickHouseClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _post(self, body: str, params: Dict[str, str]) -> httpx.Response:
        query = {"database": self.config.database, **params}
        try:
            response = self._http.post(
                "/",
                params=query,
                content=body.encode("utf-8"),
                headers={"Content-Type": "text/plain; charset=utf-8"},
            )
        except httpx.HTTPError as ex:
            raise StoreError(f"ClickHouse request failed: {ex}") from ex

        if response.status_code != 200:
            raise StoreError(
                f"ClickHouse HTTP error {response.status_code}: {response.text.strip()[:500]}"
            )
        return response

    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> QueryResult:
        """
        Run a SELECT and return its rows.

        ``params`` fills the ``{name:Type}`` placeholders in ``sql``.
        """
        bound = {f"param_{k}": _param_value(v) for k, v in (params or {}).items()}

        start = time.perf_counter()
        response = self._post(f"{sql}\nFORMAT JSON", bound)
        elapsed = (time.perf_counter() - start) * 1000

        try:
            payload = response.json()
        except ValueError as ex:
            raise StoreError(f"ClickHouse returned invalid JSON: {ex}") from ex

        rows = payload.get("data") or []
        return QueryResult(
            rows=rows,
            row_count=int(payload.get("rows", len(rows))),
            elapsed_ms=round(elapsed, 2),
        )

    def insert_rows(self, table: str, rows: Iterable[Mapping[str, Any]]) -> int:
        if not _IDENTIFIER.match(table):
            raise ValueError(f"Invalid table name: {table!r}")

        lines = [json.dumps(dict(r), default=_param_value) for r in rows]
        if not lines:
            return 0

        self._post(
            "\n".join(lines),
            {"query": f"INSERT INTO {table} FORMAT JSONEachRow"},
        )
        return len(lines)

    def ping(self) -> bool:
        try:
            response = self._http.get("/ping")
        except httpx.HTTPError as ex:
            logger.info("clickhouse.ping_failed", error=str(ex))
            return False
        return response.status_code == 200


__all__ = [
    "ClickHouseClient",
    "ClickHouseConfig",
    "QueryResult",
    "StoreError",
]
