# scoring_analytics/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware

from scoring_analytics.config import Settings, get_settings
from scoring_analytics.db.session import close_client
from scoring_analytics.observability.logging import configure_logging
from scoring_analytics.observability.metrics import router as observability_router
from scoring_analytics.observability.middleware import (
    register_exception_handlers,
    register_request_middleware,
)
from scoring_analytics.routers.dashboard import router as dashboard_router
from scoring_analytics.routers.health import router as health_router
from scoring_analytics.routers.scoring_analytics import router as scoring_analytics_router
from scoring_analytics.security.middleware import SecurityHeadersMiddleware


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield
    close_client()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, service=settings.APP_NAME)

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        max_age=86400,
    )

    if settings.TRUSTED_HOSTS:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.TRUSTED_HOSTS)

    if settings.FORCE_HTTPS:
        app.add_middleware(HTTPSRedirectMiddleware)

    app.add_middleware(SecurityHeadersMiddleware, settings=settings)

    register_request_middleware(app)
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(observability_router)
    app.include_router(scoring_analytics_router)
    app.include_router(dashboard_router)

    return app


app = create_app()
