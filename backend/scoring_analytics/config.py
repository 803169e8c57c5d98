# backend/scoring_analytics/config.py
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # environment: "dev" for running the app locally, "test" for pytest
    ENV: str = "dev"
    APP_NAME: str = "ClickHouse Scoring Analytics API"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # --- ClickHouse (HTTP interface) ---
    CLICKHOUSE_URL: str = "http://clickhouse:8123"
    CLICKHOUSE_USER: str = "app"
    CLICKHOUSE_PASSWORD: str = "app"
    CLICKHOUSE_DB: str = "scoring"
    # seconds
    CLICKHOUSE_TIMEOUT: float = 10.0
    CLICKHOUSE_CONNECT_TIMEOUT: float = 5.0

    # --- HTTP controls ---
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )
    FORCE_HTTPS: bool = False
    TRUSTED_HOSTS: List[str] = Field(
        default_factory=lambda: [
            "localhost",
            "127.0.0.1",
            "testserver",
            "test",
        ]
    )
    HSTS_MAX_AGE: int = 31536000  # 1 year
    CONTENT_SECURITY_POLICY: str = (
        "default-src 'self'; "
        "img-src 'self' data:; "
        "style-src 'self' 'unsafe-inline'; "
        "script-src 'self'; "
        "connect-src 'self'; "
        "frame-ancestors 'none'"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
