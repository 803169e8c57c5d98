from scoring_analytics.db.clickhouse import QueryResult


class FakeStore:
    """
    Stand-in for ClickHouseClient.

    ``responses`` is a queue of row lists for successive execute() calls;
    once empty, ``rows`` is returned. ``error`` is raised from execute().
    """

    def __init__(self, rows=None, *, responses=None, error=None):
        self.rows = list(rows or [])
        self.responses = list(responses or [])
        self.error = error
        self.calls = []
        self.inserted = []
        self.reachable = True

    def execute(self, sql, params=None):
        self.calls.append((sql, dict(params or {})))
        if self.error is not None:
            raise self.error
        rows = self.responses.pop(0) if self.responses else self.rows
        return QueryResult(rows=list(rows), row_count=len(rows), elapsed_ms=1.25)

    def insert_rows(self, table, rows):
        rows = list(rows)
        self.inserted.append((table, rows))
        return len(rows)

    def ping(self):
        return self.reachable

    @property
    def last_sql(self):
        return self.calls[-1][0]

    @property
    def last_params(self):
        return self.calls[-1][1]


def analytics_payload(date_from="2024-01-01", date_to="2024-01-31", **extra):
    """Minimal valid scoring-analytics body with optional top-level overrides."""
    payload = {"filter": {"date_from": date_from, "date_to": date_to}}
    company = extra.pop("companyId", None)
    if company is not None:
        payload["filter"]["companyId"] = company
    payload.update(extra)
    return payload


def aggregate_row(**columns):
    row = {"total_points": "100", "decay_points": "40", "events_count": "7", "days": "3"}
    row.update(columns)
    return row
