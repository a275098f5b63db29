"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from ridedraft.domain.entities import Coordinate
from ridedraft.domain.enums import FormState, LocationField
from ridedraft.services.ride_form import RideFormController


# ── Requests ──────────────────────────────────────────────────────────


class RideFormUpdate(BaseModel):
    start_location: Optional[str] = None
    end_location: Optional[str] = None
    ride_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    ride_time: Optional[str] = Field(None, description="HH:MM, UTC")
    available_seats: Optional[Union[int, str]] = Field(
        None, description="Raw form input; validated on submit."
    )


class LocationSelection(BaseModel):
    field: LocationField
    text: str = Field(..., min_length=1, max_length=512)


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


# ── Responses ─────────────────────────────────────────────────────────


class CoordinateResponse(BaseModel):
    latitude: float
    longitude: float

    @classmethod
    def from_coordinate(cls, coordinate: Optional[Coordinate]) -> Optional[CoordinateResponse]:
        if coordinate is None:
            return None
        return cls(latitude=coordinate.latitude, longitude=coordinate.longitude)


class RideFormResponse(BaseModel):
    id: str
    state: FormState
    start_location: str
    end_location: str
    ride_date: str
    ride_time: str
    available_seats: Union[int, str]
    start_coordinate: Optional[CoordinateResponse] = None
    end_coordinate: Optional[CoordinateResponse] = None
    distance_km: Optional[Decimal] = None
    price: Optional[Decimal] = None
    error_message: str = ""
    success_message: str = ""

    @classmethod
    def from_form(cls, draft_id: str, form: RideFormController) -> RideFormResponse:
        draft = form.draft
        return cls(
            id=draft_id,
            state=form.state,
            start_location=draft.start_location,
            end_location=draft.end_location,
            ride_date=draft.ride_date,
            ride_time=draft.ride_time,
            available_seats=draft.available_seats,
            start_coordinate=CoordinateResponse.from_coordinate(draft.start_coordinate),
            end_coordinate=CoordinateResponse.from_coordinate(draft.end_coordinate),
            distance_km=form.distance_km,
            price=form.price,
            error_message=form.error_message,
            success_message=form.success_message,
        )


class SubmitResponse(BaseModel):
    form: RideFormResponse
    ride: dict[str, Any]


class RegisterResponse(BaseModel):
    token: str
    user: dict[str, Any]


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
