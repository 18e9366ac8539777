"""Middleware registration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mwb.config import Settings
from mwb.middleware.error_handler import setup_error_handlers
from mwb.middleware.logging import setup_logging
from mwb.middleware.rate_limit import RateLimitMiddleware
from mwb.middleware.request_id import RequestIdMiddleware

# Response headers browser clients may read.
EXPOSED_HEADERS = ["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit", "Retry-After"]


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install error handlers and the middleware stack.

    Request flow, outermost first: CORS, request id, rate limit. CORS wraps
    everything so a 429 still carries the allow-origin header.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)

    # Tokens travel in the Authorization header, never in cookies. A "*" origin
    # list opens the API to any site.
    any_origin = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if any_origin else settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=EXPOSED_HEADERS,
        max_age=600,
    )
