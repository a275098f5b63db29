"""
Integration tests for the REST API endpoints.

The draft registry and user API dependencies are overridden so every form
is wired to the fake geocoder / router / ride backend from ``conftest``.
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from ridedraft.config import settings
from ridedraft.infrastructure.backend_api import RideApiError, UserApiError
from ridedraft.infrastructure.router import RoutingError
from ridedraft.services.registration import REGISTRATION_FAILED


async def _open(client: AsyncClient) -> str:
    resp = await client.post("/api/v1/ride-forms")
    assert resp.status_code == 201
    return resp.json()["id"]


async def _estimated(client: AsyncClient) -> str:
    form_id = await _open(client)
    await client.post(f"/api/v1/ride-forms/{form_id}/locations", json={"field": "start", "text": "A"})
    await client.post(f"/api/v1/ride-forms/{form_id}/locations", json={"field": "end", "text": "B"})
    await client.patch(
        f"/api/v1/ride-forms/{form_id}",
        json={"ride_date": "2024-05-01", "ride_time": "14:30", "available_seats": "2"},
    )
    return form_id


# ── Tests ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_open_form(client: AsyncClient):
    resp = await client.post("/api/v1/ride-forms")
    assert resp.status_code == 201
    data = resp.json()
    assert data["state"] == "IDLE"
    assert data["available_seats"] == 1
    assert data["price"] is None


@pytest.mark.asyncio
async def test_get_form_not_found(client: AsyncClient):
    resp = await client.get("/api/v1/ride-forms/does-not-exist")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_select_locations_produces_estimate(client: AsyncClient):
    form_id = await _open(client)

    resp = await client.post(
        f"/api/v1/ride-forms/{form_id}/locations", json={"field": "start", "text": "A"}
    )
    assert resp.status_code == 200
    assert resp.json()["start_coordinate"] == {"latitude": 12.9, "longitude": 77.6}
    assert resp.json()["state"] == "IDLE"

    resp = await client.post(
        f"/api/v1/ride-forms/{form_id}/locations", json={"field": "end", "text": "B"}
    )
    data = resp.json()
    assert data["state"] == "ESTIMATED"
    assert data["distance_km"] == "10.00"
    assert data["price"] == "156.00"


@pytest.mark.asyncio
async def test_unknown_address_is_not_an_http_error(client: AsyncClient):
    form_id = await _open(client)
    resp = await client.post(
        f"/api/v1/ride-forms/{form_id}/locations", json={"field": "start", "text": "Atlantis"}
    )
    assert resp.status_code == 200
    assert resp.json()["start_coordinate"] is None
    assert resp.json()["error_message"] == ""


@pytest.mark.asyncio
async def test_routing_failure_reported_in_form(client: AsyncClient, router):
    form_id = await _estimated(client)
    router.resolve.side_effect = RoutingError("Routing service error: 500")

    resp = await client.post(
        f"/api/v1/ride-forms/{form_id}/locations", json={"field": "end", "text": "C"}
    )
    data = resp.json()
    assert resp.status_code == 200
    assert data["price"] == "156.00"
    assert data["error_message"] == "Routing service error: 500"


@pytest.mark.asyncio
async def test_empty_location_text_rejected(client: AsyncClient):
    form_id = await _open(client)
    resp = await client.post(
        f"/api/v1/ride-forms/{form_id}/locations", json={"field": "start", "text": ""}
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_patch_location_text_invalidates_estimate(client: AsyncClient):
    form_id = await _estimated(client)
    resp = await client.patch(f"/api/v1/ride-forms/{form_id}", json={"end_location": "B2"})
    data = resp.json()
    assert data["state"] == "IDLE"
    assert data["end_coordinate"] is None
    assert data["price"] is None


@pytest.mark.asyncio
async def test_submit_creates_ride(client: AsyncClient, ride_api):
    form_id = await _estimated(client)

    resp = await client.post(
        f"/api/v1/ride-forms/{form_id}/submit", headers={"Authorization": "Bearer jwt"}
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["ride"]["_id"] == "ride-1"
    assert body["form"]["state"] == "SUBMITTED"
    assert body["form"]["success_message"] == "Ride created successfully!"
    assert body["form"]["start_location"] == ""

    submission = ride_api.create_ride.await_args.args[0]
    assert submission.ride_time == "2024-05-01T14:30:00.000Z"
    assert submission.available_seats == 2
    assert ride_api.create_ride.await_args.kwargs["auth_token"] == "jwt"


@pytest.mark.asyncio
async def test_resubmit_is_conflict(client: AsyncClient):
    form_id = await _estimated(client)
    await client.post(f"/api/v1/ride-forms/{form_id}/submit")
    resp = await client.post(f"/api/v1/ride-forms/{form_id}/submit")
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_edit_after_submit_is_conflict(client: AsyncClient):
    form_id = await _estimated(client)
    await client.post(f"/api/v1/ride-forms/{form_id}/submit")
    resp = await client.patch(f"/api/v1/ride-forms/{form_id}", json={"available_seats": 3})
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_submit_invalid_seats(client: AsyncClient, ride_api):
    form_id = await _estimated(client)
    await client.patch(f"/api/v1/ride-forms/{form_id}", json={"available_seats": "0"})

    resp = await client.post(f"/api/v1/ride-forms/{form_id}/submit")

    assert resp.status_code == 422
    assert resp.json()["error_message"] == "Seats must be a positive whole number"
    assert resp.json()["state"] == "ESTIMATED"
    ride_api.create_ride.assert_not_awaited()


@pytest.mark.asyncio
async def test_submit_without_estimate(client: AsyncClient):
    form_id = await _open(client)
    resp = await client.post(f"/api/v1/ride-forms/{form_id}/submit")
    assert resp.status_code == 422
    assert resp.json()["error_message"] == "Invalid price estimate"


@pytest.mark.asyncio
async def test_submit_backend_failure(client: AsyncClient, ride_api):
    ride_api.create_ride.side_effect = RideApiError("Driver profile incomplete", status_code=400)
    form_id = await _estimated(client)

    resp = await client.post(f"/api/v1/ride-forms/{form_id}/submit")

    assert resp.status_code == 502
    assert resp.json()["error_message"] == "Driver profile incomplete"
    assert resp.json()["state"] == "ESTIMATED"


@pytest.mark.asyncio
async def test_discard_form(client: AsyncClient):
    form_id = await _open(client)
    resp = await client.delete(f"/api/v1/ride-forms/{form_id}")
    assert resp.status_code == 204
    assert (await client.get(f"/api/v1/ride-forms/{form_id}")).status_code == 404
    assert (await client.delete(f"/api/v1/ride-forms/{form_id}")).status_code == 404


@pytest.mark.asyncio
async def test_register(client: AsyncClient, user_api):
    resp = await client.post(
        "/api/v1/users/register",
        json={"name": "Asha", "email": "asha@example.com", "password": "s3cret"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["token"] == "jwt-token"
    assert body["user"]["email"] == "asha@example.com"
    assert "token" not in body["user"]
    user_api.register_user.assert_awaited_once_with(
        name="Asha", email="asha@example.com", password="s3cret"
    )


@pytest.mark.asyncio
async def test_register_failure(client: AsyncClient, user_api):
    user_api.register_user.side_effect = UserApiError("Email already in use", status_code=409)
    resp = await client.post(
        "/api/v1/users/register",
        json={"name": "Asha", "email": "asha@example.com", "password": "s3cret"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == REGISTRATION_FAILED


@pytest.mark.asyncio
async def test_location_lookups_are_rate_limited(client: AsyncClient, geocoder):
    form_id = await _open(client)
    allowed = int(settings.geocode_rate_limit.split("/")[0])

    for _ in range(allowed):
        resp = await client.post(
            f"/api/v1/ride-forms/{form_id}/locations", json={"field": "start", "text": "A"}
        )
        assert resp.status_code == 200

    resp = await client.post(
        f"/api/v1/ride-forms/{form_id}/locations", json={"field": "start", "text": "A"}
    )
    assert resp.status_code == 429
    assert geocoder.resolve.await_count == allowed


@pytest.mark.asyncio
async def test_error_responses_documented(client: AsyncClient):
    schema = (await client.get("/openapi.json")).json()
    responses = schema["paths"]["/api/v1/ride-forms/{form_id}"]["patch"]["responses"]
    assert responses["404"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
    assert responses["409"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
