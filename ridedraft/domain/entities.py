"""
Domain entities for a ride draft.

Patterns used
-------------
- **Tagged union** for coordinate validity: each location field is
  ``Unresolved``, ``Resolving`` (a geocoding request is outstanding) or
  ``Resolved`` (a coordinate *for a specific text*). Editing the text away
  from ``for_text`` drops the field back to ``Unresolved``.
- ``RideDraft`` is a plain mutable record; only the form controller writes it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from .enums import LocationField


class InvalidStateTransition(Exception):
    """Raised when a form state change violates the state machine."""


# ── Value Object ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def as_lon_lat(self) -> str:
        return f"{self.longitude},{self.latitude}"


# ── Coordinate slots ──────────────────────────────────────────────────


@dataclass(frozen=True)
class Unresolved:
    pass


@dataclass(frozen=True)
class Resolving:
    for_text: str
    sequence: int


@dataclass(frozen=True)
class Resolved:
    coordinate: Coordinate
    for_text: str


CoordinateSlot = Union[Unresolved, Resolving, Resolved]


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class RideDraft:
    start_location: str = ""
    end_location: str = ""
    ride_date: str = ""
    ride_time: str = ""
    available_seats: Union[int, str] = 1
    start: CoordinateSlot = field(default_factory=Unresolved)
    end: CoordinateSlot = field(default_factory=Unresolved)

    def location_text(self, which: LocationField) -> str:
        if which is LocationField.START:
            return self.start_location
        return self.end_location

    def slot(self, which: LocationField) -> CoordinateSlot:
        return self.start if which is LocationField.START else self.end

    def set_slot(self, which: LocationField, slot: CoordinateSlot) -> None:
        if which is LocationField.START:
            self.start = slot
        else:
            self.end = slot

    def set_location_text(self, which: LocationField, text: str) -> bool:
        """Store *text*; return True if that invalidated the field's coordinate."""
        if which is LocationField.START:
            self.start_location = text
        else:
            self.end_location = text

        current = self.slot(which)
        if isinstance(current, Unresolved) or current.for_text == text:
            return False
        self.set_slot(which, Unresolved())
        return True

    def coordinate(self, which: LocationField) -> Optional[Coordinate]:
        current = self.slot(which)
        return current.coordinate if isinstance(current, Resolved) else None

    @property
    def start_coordinate(self) -> Optional[Coordinate]:
        return self.coordinate(LocationField.START)

    @property
    def end_coordinate(self) -> Optional[Coordinate]:
        return self.coordinate(LocationField.END)

    @property
    def both_resolved(self) -> bool:
        return self.start_coordinate is not None and self.end_coordinate is not None
