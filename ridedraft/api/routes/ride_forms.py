"""
Ride form endpoints
===================

POST   /api/v1/ride-forms                  -- open a new ride draft
GET    /api/v1/ride-forms/{form_id}        -- current draft, estimate and messages
PATCH  /api/v1/ride-forms/{form_id}        -- edit texts, date, time or seats
POST   /api/v1/ride-forms/{form_id}/locations -- pick a location (geocode + estimate)
POST   /api/v1/ride-forms/{form_id}/submit -- validate and create the ride
DELETE /api/v1/ride-forms/{form_id}        -- discard the draft
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from ridedraft.api.dependencies import get_draft_registry
from ridedraft.api.middleware import limiter
from ridedraft.api.schemas import (
    ErrorResponse,
    LocationSelection,
    RideFormResponse,
    RideFormUpdate,
    SubmitResponse,
)
from ridedraft.config import settings
from ridedraft.domain.entities import InvalidStateTransition
from ridedraft.domain.enums import LocationField
from ridedraft.exceptions import ValidationError
from ridedraft.services.registry import DraftRegistry
from ridedraft.services.ride_form import RideFormController

router = APIRouter(prefix="/ride-forms", tags=["ride-forms"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Unknown ride form."}}
CONFLICT = {409: {"model": ErrorResponse, "description": "Form is submitted or submitting."}}


def _get_form(registry: DraftRegistry, form_id: str) -> RideFormController:
    form = registry.get(form_id)
    if form is None:
        raise HTTPException(status_code=404, detail="Ride form not found")
    return form


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return authorization.strip()


@router.post(
    "",
    status_code=201,
    response_model=RideFormResponse,
    summary="Open a ride draft",
)
@limiter.limit("100/minute")
async def open_form(
    request: Request,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    form_id, form = registry.open()
    return RideFormResponse.from_form(form_id, form)


@router.get(
    "/{form_id}",
    response_model=RideFormResponse,
    summary="Get the draft, estimate and messages",
    responses=NOT_FOUND,
)
@limiter.limit("100/minute")
async def get_form(
    request: Request,
    form_id: str,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    return RideFormResponse.from_form(form_id, _get_form(registry, form_id))


@router.patch(
    "/{form_id}",
    response_model=RideFormResponse,
    summary="Edit draft fields",
    responses={**NOT_FOUND, **CONFLICT},
    description=(
        "Date, time and seat edits never invalidate an estimate. Editing a "
        "location text away from the text it was resolved for clears that "
        "coordinate and the estimate."
    ),
)
@limiter.limit("100/minute")
async def update_form(
    request: Request,
    form_id: str,
    body: RideFormUpdate,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    form = _get_form(registry, form_id)
    try:
        if body.start_location is not None:
            form.edit_location(LocationField.START, body.start_location)
        if body.end_location is not None:
            form.edit_location(LocationField.END, body.end_location)
        if body.ride_date is not None:
            form.set_ride_date(body.ride_date)
        if body.ride_time is not None:
            form.set_ride_time(body.ride_time)
        if body.available_seats is not None:
            form.set_available_seats(body.available_seats)
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return RideFormResponse.from_form(form_id, form)


@router.post(
    "/{form_id}/locations",
    response_model=RideFormResponse,
    summary="Select a start or end location",
    responses={**NOT_FOUND, **CONFLICT},
    description=(
        "Geocodes the text; once both locations are resolved the route "
        "distance and price estimate are computed. Lookup failures are "
        "reported in ``error_message``, not as an HTTP error."
    ),
)
@limiter.limit(settings.geocode_rate_limit)
async def select_location(
    request: Request,
    form_id: str,
    body: LocationSelection,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    form = _get_form(registry, form_id)
    try:
        await form.select_location(body.field, body.text)
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return RideFormResponse.from_form(form_id, form)


@router.post(
    "/{form_id}/submit",
    status_code=201,
    response_model=SubmitResponse,
    summary="Submit the ride",
    responses={
        **NOT_FOUND,
        **CONFLICT,
        422: {"model": RideFormResponse, "description": "Draft failed validation."},
        502: {"model": RideFormResponse, "description": "Ride backend rejected or failed."},
    },
)
@limiter.limit("100/minute")
async def submit_form(
    request: Request,
    form_id: str,
    authorization: Optional[str] = Header(None),
    registry: DraftRegistry = Depends(get_draft_registry),
):
    form = _get_form(registry, form_id)
    try:
        ride = await form.submit(auth_token=_bearer_token(authorization))
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    if ride is None:
        status_code = 422 if isinstance(form.last_error, ValidationError) else 502
        return JSONResponse(
            status_code=status_code,
            content=RideFormResponse.from_form(form_id, form).model_dump(mode="json"),
        )
    return SubmitResponse(form=RideFormResponse.from_form(form_id, form), ride=ride)


@router.delete(
    "/{form_id}",
    status_code=204,
    summary="Discard a ride draft",
    responses=NOT_FOUND,
)
@limiter.limit("100/minute")
async def discard_form(
    request: Request,
    form_id: str,
    registry: DraftRegistry = Depends(get_draft_registry),
):
    if not registry.discard(form_id):
        raise HTTPException(status_code=404, detail="Ride form not found")
    return Response(status_code=204)
