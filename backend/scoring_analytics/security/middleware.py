from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from scoring_analytics.config import Settings


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Appends security headers to every response; API answers are never cached."""

    def __init__(self, app, *, settings: Settings) -> None:
        super().__init__(app)
        self.csp = settings.CONTENT_SECURITY_POLICY
        self.hsts_max_age = settings.HSTS_MAX_AGE
        self.enable_hsts = settings.FORCE_HTTPS

    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)

        if self.enable_hsts:
            response.headers.setdefault(
                "Strict-Transport-Security",
                f"max-age={self.hsts_max_age}; includeSubDomains",
            )

        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")

        if request.url.path.startswith("/api/"):
            response.headers.setdefault("Cache-Control", "no-store")

        if self.csp:
            response.headers.setdefault("Content-Security-Policy", self.csp)

        return response
