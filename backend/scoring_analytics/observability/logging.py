from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, Optional

import structlog

DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# the store client logs through these; per-request lines would duplicate analytics.query
_NOISY_LOGGERS = ("httpx", "httpcore")

_WHITESPACE = re.compile(r"\s+")


def configure_logging(level: Optional[str] = None, *, service: Optional[str] = None) -> None:
    """Emit one JSON object per line on stdout, for both stdlib and structlog loggers."""
    log_level = (level or DEFAULT_LEVEL).upper()

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        _one_line_sql,
    ]
    if service:
        processors.append(_add_service(service))
    processors += [
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(default=str),
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def _one_line_sql(logger: Any, name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    sql = event_dict.get("sql")
    if isinstance(sql, str):
        event_dict["sql"] = _WHITESPACE.sub(" ", sql).strip()
    return event_dict


def _add_service(service: str):
    def processor(logger: Any, name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", service)
        return event_dict

    return processor
