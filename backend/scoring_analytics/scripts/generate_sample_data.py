"""Load random business_scores or churn_events rows into ClickHouse.

Usage:
    scoring-analytics-generate --rows 10000000 --batch-size 100000
    scoring-analytics-generate --dataset churn_events --rows 10000000

Connection settings come from the CLICKHOUSE_* environment variables.
"""
from __future__ import annotations

import argparse
import random
import sys
from typing import Optional, Sequence

import structlog

from scoring_analytics.config import get_settings
from scoring_analytics.db.clickhouse import ClickHouseClient, ClickHouseConfig, StoreError
from scoring_analytics.observability.logging import configure_logging
from scoring_analytics.services.sample_data import DATASETS, load_sample_data

logger = structlog.get_logger("generate")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate sample analytics data")
    parser.add_argument("--rows", type=int, default=10_000_000, help="total rows to insert")
    parser.add_argument("--batch-size", type=int, default=100_000, help="rows per INSERT")
    parser.add_argument("--seed", type=int, default=None, help="random seed for repeatable data")
    parser.add_argument(
        "--dataset",
        choices=sorted(DATASETS),
        default="business_scores",
        help="table to fill",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, service="scoring-analytics-generate")

    rng = random.Random(args.seed)
    with ClickHouseClient(ClickHouseConfig.from_settings(settings)) as store:
        try:
            inserted = load_sample_data(
                store,
                args.rows,
                batch_size=args.batch_size,
                rng=rng,
                dataset=args.dataset,
            )
        except StoreError as ex:
            logger.error("generate.failed", error=str(ex))
            return 1

    logger.info("generate.completed", dataset=args.dataset, inserted=inserted)
    return 0


if __name__ == "__main__":
    sys.exit(main())
