"""
Ride Draft Form Controller
==========================

Owns a single ``RideDraft`` and drives it through the form state machine::

    IDLE -> RESOLVING_START / RESOLVING_END -> COMPUTING_ROUTE -> ESTIMATED
         -> SUBMITTING -> SUBMITTED | FAILED (-> ESTIMATED / IDLE)

Concurrency
-----------
Everything runs on one asyncio loop; the controller suspends only while a
geocoding, routing or submission request is outstanding.

* Every geocoding request gets a sequence number. A response is applied
  only while its field is still ``Resolving`` with that number, so an older
  response can never overwrite a newer selection, and a response for text
  the user has since edited away is dropped.
* Route requests carry their own sequence number and are applied only if
  they are the latest and the coordinates they were computed for are
  still current.

Error handling
--------------
Geocoding, routing and submission failures are recovered here: they set
``error_message`` / ``last_error`` and leave previously computed distance
and price untouched. A kept price is submittable only while the coordinates
it was computed for (``priced_route``) are still the current ones. A failed
re-lookup of unchanged text keeps the coordinate it already had. A geocoder
miss (``NotFoundError``) is silent.
``InvalidStateTransition`` signals misuse (editing a submitted draft) and
propagates.
"""

from __future__ import annotations

import itertools
import logging
from decimal import Decimal
from typing import Any, Optional, Protocol, Union

from ridedraft.domain.distance import meters_to_km
from ridedraft.domain.entities import (
    Coordinate,
    InvalidStateTransition,
    RideDraft,
    Resolved,
    Resolving,
    Unresolved,
)
from ridedraft.domain.enums import (
    EDITING_STATES,
    FORM_TRANSITIONS,
    FormState,
    LocationField,
    RoadType,
    TrafficLevel,
)
from ridedraft.domain.pricing import PriceEstimator
from ridedraft.domain.submission import RideSubmission, build_submission, validate_price
from ridedraft.exceptions import (
    NetworkError,
    NotFoundError,
    RideDraftError,
    ValidationError,
)

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Ride created successfully!"
NOT_READY_MESSAGE = "Ride estimate is not ready"


class Geocoder(Protocol):
    async def resolve(self, address: str) -> Coordinate: ...


class Router(Protocol):
    async def resolve(self, origin: Coordinate, destination: Coordinate) -> float: ...


class RideApi(Protocol):
    async def create_ride(
        self, submission: RideSubmission, auth_token: Optional[str] = None
    ) -> dict[str, Any]: ...


class RideFormController:
    def __init__(
        self,
        geocoder: Geocoder,
        router: Router,
        ride_api: RideApi,
        estimator: Optional[PriceEstimator] = None,
        traffic_level: Optional[TrafficLevel] = None,
        road_type: Optional[RoadType] = None,
    ):
        self.geocoder = geocoder
        self.router = router
        self.ride_api = ride_api
        self.estimator = estimator or PriceEstimator()
        self.traffic_level = traffic_level or self.estimator.traffic_level
        self.road_type = road_type or self.estimator.road_type

        self.draft = RideDraft()
        self.state = FormState.IDLE
        self.distance_km: Optional[Decimal] = None
        self.price: Optional[Decimal] = None
        self.priced_route: Optional[tuple[Coordinate, Coordinate]] = None
        self.error_message = ""
        self.success_message = ""
        self.last_error: Optional[RideDraftError] = None

        self._geocode_sequence = itertools.count(1)
        self._route_sequence = 0
        self._route_pending = False
        self._submitting = False
        self._submitted = False

    # ── Field edits ───────────────────────────────────────────────────

    def edit_location(self, which: LocationField, text: str) -> None:
        """Typing without picking a suggestion; may invalidate the coordinate."""
        self._ensure_editable()
        if self.draft.set_location_text(which, text):
            logger.info("%s location edited; coordinate invalidated", which.value)
            self._clear_estimate()
        self._settle()

    def set_ride_date(self, value: str) -> None:
        self._ensure_editable()
        self.draft.ride_date = value

    def set_ride_time(self, value: str) -> None:
        self._ensure_editable()
        self.draft.ride_time = value

    def set_available_seats(self, value: Union[int, str]) -> None:
        self._ensure_editable()
        self.draft.available_seats = value

    # ── Location selection -> geocode -> route -> price ───────────────

    async def select_location(self, which: LocationField, text: str) -> None:
        """Picking a suggestion: resolve *text* and, if possible, re-estimate."""
        self._ensure_editable()
        self.draft.set_location_text(which, text)

        previous = self.draft.slot(which)
        if not (isinstance(previous, Resolved) and previous.for_text == text):
            previous = Unresolved()

        sequence = next(self._geocode_sequence)
        self.draft.set_slot(which, Resolving(for_text=text, sequence=sequence))
        self._settle()

        try:
            coordinate = await self.geocoder.resolve(text)
        except NotFoundError:
            if self._is_current(which, sequence):
                logger.info("No coordinates for %s location %r", which.value, text)
                self.draft.set_slot(which, previous)
                self._settle()
            return
        except (NetworkError, ValidationError) as exc:
            if self._is_current(which, sequence):
                self.draft.set_slot(which, previous)
                self._record_error(exc)
                self._settle()
            return

        if not self._is_current(which, sequence):
            logger.debug(
                "Discarding stale geocoding response #%d for %s", sequence, which.value
            )
            return

        self.draft.set_slot(which, Resolved(coordinate=coordinate, for_text=text))
        self._settle()

        if self.draft.both_resolved:
            await self._compute_route()

    async def _compute_route(self) -> None:
        origin = self.draft.start_coordinate
        destination = self.draft.end_coordinate
        assert origin is not None and destination is not None

        self._route_sequence += 1
        sequence = self._route_sequence
        self._route_pending = True
        self._settle()

        try:
            meters = await self.router.resolve(origin, destination)
            distance_km = meters_to_km(meters)
            price = self.estimator.estimate(
                distance_km, self.traffic_level, self.road_type
            )
        except (NetworkError, ValidationError) as exc:
            if sequence == self._route_sequence:
                self._route_pending = False
                self._record_error(exc)
                self._settle()
            return

        if sequence != self._route_sequence:
            logger.debug("Discarding stale route response #%d", sequence)
            return

        self._route_pending = False
        if (self.draft.start_coordinate, self.draft.end_coordinate) != (origin, destination):
            logger.debug("Coordinates changed while routing; dropping route #%d", sequence)
            self._settle()
            return

        self.distance_km = distance_km
        self.price = price
        self.priced_route = (origin, destination)
        logger.info("Estimated %s km -> %s INR", distance_km, price)
        self._settle()

    # ── Submission ────────────────────────────────────────────────────

    async def submit(self, auth_token: Optional[str] = None) -> Optional[dict[str, Any]]:
        """Validate and send the draft.

        Returns the created ride, or ``None`` when validation or the backend
        call failed (``error_message`` / ``last_error`` say why).
        """
        if self.state in (FormState.SUBMITTING, FormState.SUBMITTED):
            raise InvalidStateTransition(f"Cannot submit a form in state {self.state.value}")

        self.error_message = ""
        self.success_message = ""

        try:
            validate_price(self.price)
            if self.state is not FormState.ESTIMATED:
                raise ValidationError(NOT_READY_MESSAGE)
            submission = build_submission(self.draft, self.price)
        except ValidationError as exc:
            self._record_error(exc)
            return None

        self._submitting = True
        self._settle()

        try:
            ride = await self.ride_api.create_ride(submission, auth_token=auth_token)
        except NetworkError as exc:
            self._submitting = False
            self._transition_to(FormState.FAILED)
            self._record_error(exc)
            self._settle()
            return None

        self._submitting = False
        self._submitted = True
        self._reset_draft()
        self.success_message = SUCCESS_MESSAGE
        logger.info("Ride submitted: %s", submission)
        self._settle()
        return ride

    # ── Internals ─────────────────────────────────────────────────────

    def _is_current(self, which: LocationField, sequence: int) -> bool:
        slot = self.draft.slot(which)
        return isinstance(slot, Resolving) and slot.sequence == sequence

    def _ensure_editable(self) -> None:
        if self.state not in EDITING_STATES:
            raise InvalidStateTransition(f"Form is not editable in state {self.state.value}")

    def _clear_estimate(self) -> None:
        self.distance_km = None
        self.price = None
        self.priced_route = None

    def _reset_draft(self) -> None:
        self.draft = RideDraft()
        self._clear_estimate()

    def _record_error(self, exc: RideDraftError) -> None:
        self.last_error = exc
        self.error_message = str(exc)
        logger.warning("Ride form error (%s): %s", type(exc).__name__, exc)

    def _derive_state(self) -> FormState:
        if self._submitted:
            return FormState.SUBMITTED
        if self._submitting:
            return FormState.SUBMITTING
        if self._route_pending:
            return FormState.COMPUTING_ROUTE
        if isinstance(self.draft.start, Resolving):
            return FormState.RESOLVING_START
        if isinstance(self.draft.end, Resolving):
            return FormState.RESOLVING_END
        # A price kept after a failed re-route is shown but not submittable.
        current_route = (self.draft.start_coordinate, self.draft.end_coordinate)
        if self.price is not None and self.priced_route == current_route:
            return FormState.ESTIMATED
        return FormState.IDLE

    def _settle(self) -> None:
        target = self._derive_state()
        if target is not self.state:
            self._transition_to(target)

    def _transition_to(self, new_state: FormState) -> None:
        """Move to *new_state* if the transition is legal, else raise."""
        allowed = FORM_TRANSITIONS.get(self.state, set())
        if new_state not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.state.value} to {new_state.value}"
            )
        logger.debug("Ride form %s -> %s", self.state.value, new_state.value)
        self.state = new_state
