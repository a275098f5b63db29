"""
FastAPI application factory.

* Registers routes for ride forms, users and admin.
* Holds the in-memory draft registry on ``app.state``.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ridedraft.api.dependencies import build_form
from ridedraft.api.middleware import limiter
from ridedraft.api.routes import admin, ride_forms, users
from ridedraft.config import settings
from ridedraft.services.registry import DraftRegistry

logging.basicConfig(level=settings.log_level.upper())


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ride Draft API",
        description=(
            "Server-side ride creation form: geocodes start and end "
            "addresses, estimates the fare from the driving distance and "
            "submits the ride to the backend."
        ),
        version="1.0.0",
    )

    app.state.drafts = DraftRegistry(
        build_form,
        max_drafts=settings.max_open_drafts,
        idle_ttl=settings.draft_idle_ttl_seconds,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Routers
    app.include_router(ride_forms.router, prefix="/api/v1")
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
