"""
Shared test fixtures.

External services (Nominatim, OpenRouteService, the ride/user backend) are
replaced with ``AsyncMock`` fakes so tests run without network access.
Address "A" resolves to (12.9, 77.6), "B" to (13.0, 77.7), "C" to
(13.1, 77.8); anything else is not found. Every route is 10 km.
"""

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ridedraft.domain.entities import Coordinate
from ridedraft.domain.enums import LocationField
from ridedraft.infrastructure.geocoder import AddressNotFoundError
from ridedraft.services.registry import DraftRegistry
from ridedraft.services.ride_form import RideFormController

ADDRESSES = {
    "A": Coordinate(12.9, 77.6),
    "B": Coordinate(13.0, 77.7),
    "C": Coordinate(13.1, 77.8),
}

ROUTE_METERS = 10_000.0

CREATED_RIDE = {
    "_id": "ride-1",
    "startLocation": "A",
    "endLocation": "B",
    "availableSeats": 2,
    "price": 156.0,
}


async def lookup(address: str) -> Coordinate:
    try:
        return ADDRESSES[address]
    except KeyError:
        raise AddressNotFoundError(f"No location found for {address!r}") from None


# ── Fakes ─────────────────────────────────────────────────────────────


@pytest.fixture
def geocoder() -> AsyncMock:
    fake = AsyncMock()
    fake.resolve = AsyncMock(side_effect=lookup)
    return fake


@pytest.fixture
def router() -> AsyncMock:
    fake = AsyncMock()
    fake.resolve = AsyncMock(return_value=ROUTE_METERS)
    return fake


@pytest.fixture
def ride_api() -> AsyncMock:
    fake = AsyncMock()
    fake.create_ride = AsyncMock(return_value=dict(CREATED_RIDE))
    return fake


@pytest.fixture
def user_api() -> AsyncMock:
    fake = AsyncMock()
    fake.register_user = AsyncMock(
        return_value={"token": "jwt-token", "_id": "user-1", "name": "Asha", "email": "asha@example.com"}
    )
    return fake


@pytest.fixture
def form(geocoder, router, ride_api) -> RideFormController:
    return RideFormController(geocoder, router, ride_api)


@pytest_asyncio.fixture
async def estimated_form(form) -> RideFormController:
    """A form with A -> B resolved and priced, date/time filled in."""
    await form.select_location(LocationField.START, "A")
    await form.select_location(LocationField.END, "B")
    form.set_ride_date("2024-05-01")
    form.set_ride_time("14:30")
    return form


# ── API client ────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def client(geocoder, router, ride_api, user_api) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient against the app with fake external services."""
    from ridedraft.api.app import create_app
    from ridedraft.api.dependencies import get_draft_registry, get_user_api
    from ridedraft.api.middleware import limiter

    limiter.reset()
    registry = DraftRegistry(lambda: RideFormController(geocoder, router, ride_api))

    app = create_app()
    app.dependency_overrides[get_draft_registry] = lambda: registry
    app.dependency_overrides[get_user_api] = lambda: user_api

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
