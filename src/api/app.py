"""
FastAPI application factory.

* Builds the DB engine and the geocoder HTTP client once per app and keeps
  them on ``app.state``; the lifespan closes them on shutdown.
* Registers distance, auth and health routes under ``/api/v1``.
* Applies request logging, CORS and rate-limiting middleware.
* Unknown routes get a light-hearted 404; unhandled errors get a generic
  500 with no internal detail.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
import random
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.middleware import configure_limiter, log_requests
from src.api.routes import auth, distance, health
from src.config import Settings, settings as default_settings
from src.infrastructure.database import build_engine, build_session_factory
from src.infrastructure.geocoder import NominatimGeocoder
from src.logging_config import configure_logging

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

NOT_FOUND_QUOTES = [
    "This page took a wrong turn somewhere over the Atlantic.",
    "Recalculating... no route to this page exists.",
    "The great circle between you and this page has zero points on it.",
    "Even the geocoder could not find this one.",
    "You have reached the edge of the map. Here be dragons.",
    "This page is 404 km away and the meter is still running.",
]

AVAILABLE_ENDPOINTS = [
    f"POST {API_PREFIX}/calculate - Calculate distance between two addresses",
    f"GET {API_PREFIX}/autocomplete - Get address suggestions",
    f"GET {API_PREFIX}/history - View calculation history",
    f"POST {API_PREFIX}/auth/register - Create an account",
    f"POST {API_PREFIX}/auth/login - Log in",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release the HTTP client and DB pool on shutdown."""
    logger.info("Distance Calculator API starting")
    yield
    await app.state.http_client.aclose()
    await app.state.engine.dispose()
    logger.info("Distance Calculator API stopped")


async def not_found_handler(request: Request, exc: StarletteHTTPException):
    # Only unmatched routes; 404s raised by handlers keep their detail
    if exc.status_code != 404 or exc.detail != "Not Found":
        return await http_exception_handler(request, exc)
    logger.warning("404 Not Found %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=404,
        content={
            "status": 404,
            "message": random.choice(NOT_FOUND_QUOTES),
            "tip": "Check the URL or head back to the API docs at /docs.",
            "available_endpoints": AVAILABLE_ENDPOINTS,
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(
        title="Distance Calculator API",
        description=(
            "Geocodes two free-text addresses with OpenStreetMap Nominatim, "
            "returns the great-circle (Haversine) distance between them and "
            "keeps a per-user history of calculations."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Collaborators, built once and handed to routes via dependencies
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.http_client = httpx.AsyncClient(
        timeout=settings.geocoder_timeout_seconds
    )
    app.state.geocoder = NominatimGeocoder(
        app.state.http_client,
        base_url=settings.geocoder_base_url,
        user_agent=settings.geocoder_user_agent,
        accept_language=settings.geocoder_accept_language,
    )

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count"],
    )
    app.middleware("http")(log_requests)

    # Rate limiter
    app.state.limiter = configure_limiter(settings)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, not_found_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routers
    app.include_router(distance.router, prefix=API_PREFIX)
    app.include_router(auth.router, prefix=API_PREFIX)
    app.include_router(health.router, prefix=API_PREFIX)

    return app
