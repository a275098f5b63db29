"""Immutable ride submission payload and the checks that gate it."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Optional, Union

from ridedraft.exceptions import ValidationError

from .entities import RideDraft

INVALID_PRICE = "Invalid price estimate"
INVALID_SEATS = "Seats must be a positive whole number"
MISSING_SCHEDULE = "Ride date and time are required"
INVALID_SCHEDULE = "Invalid ride date or time"


@dataclass(frozen=True)
class RideSubmission:
    start_location: str
    end_location: str
    ride_date: str
    ride_time: str  # ISO-8601 UTC timestamp, millisecond precision
    available_seats: int
    price: Decimal

    def to_payload(self) -> dict[str, Any]:
        """camelCase body expected by the ride backend."""
        return {
            "startLocation": self.start_location,
            "endLocation": self.end_location,
            "rideDate": self.ride_date,
            "rideTime": self.ride_time,
            "availableSeats": self.available_seats,
            "price": float(self.price),
        }


def validate_price(price: Optional[Decimal]) -> Decimal:
    if price is None or not price.is_finite() or price <= 0:
        raise ValidationError(INVALID_PRICE)
    return price


def parse_seats(raw: Union[int, str]) -> int:
    """Accept an int or a string of ASCII digits; the result must be >= 1."""
    if isinstance(raw, bool):
        raise ValidationError(INVALID_SEATS)
    if isinstance(raw, int):
        seats = raw
    elif isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdigit():
        seats = int(raw.strip())
    else:
        raise ValidationError(INVALID_SEATS)
    if seats < 1:
        raise ValidationError(INVALID_SEATS)
    return seats


def combine_ride_datetime(ride_date: str, ride_time: str) -> str:
    """Combine ``YYYY-MM-DD`` and ``HH:MM`` into ``YYYY-MM-DDTHH:MM:SS.mmmZ`` (UTC)."""
    if not ride_date or not ride_time:
        raise ValidationError(MISSING_SCHEDULE)
    try:
        day = date.fromisoformat(ride_date)
        clock = time.fromisoformat(ride_time)
    except ValueError as exc:
        raise ValidationError(INVALID_SCHEDULE) from exc
    if clock.tzinfo is not None:
        raise ValidationError(INVALID_SCHEDULE)

    moment = datetime.combine(day, clock, tzinfo=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"


def build_submission(draft: RideDraft, price: Optional[Decimal]) -> RideSubmission:
    """Validate *draft* and freeze it into a ``RideSubmission``.

    Raises ``ValidationError`` with a user-facing message on the first
    failing check.
    """
    checked_price = validate_price(price)
    seats = parse_seats(draft.available_seats)
    ride_time = combine_ride_datetime(draft.ride_date, draft.ride_time)
    return RideSubmission(
        start_location=draft.start_location,
        end_location=draft.end_location,
        ride_date=draft.ride_date,
        ride_time=ride_time,
        available_seats=seats,
        price=checked_price,
    )
