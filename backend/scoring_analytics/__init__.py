"""Analytics query layer over ClickHouse scoring rollups."""

__version__ = "1.0.0"
