"""Domain enumerations and state-transition rules."""

import enum


class TrafficLevel(str, enum.Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class RoadType(str, enum.Enum):
    HIGHWAY = "highway"
    CITY = "city"


class LocationField(str, enum.Enum):
    START = "start"
    END = "end"


class FormState(str, enum.Enum):
    IDLE = "IDLE"
    RESOLVING_START = "RESOLVING_START"
    RESOLVING_END = "RESOLVING_END"
    COMPUTING_ROUTE = "COMPUTING_ROUTE"
    ESTIMATED = "ESTIMATED"
    SUBMITTING = "SUBMITTING"
    SUBMITTED = "SUBMITTED"
    FAILED = "FAILED"


# States in which the user may still edit the draft. Geocoding and routing
# responses arrive asynchronously, so any editing state may follow any other.
EDITING_STATES: frozenset[FormState] = frozenset(
    {
        FormState.IDLE,
        FormState.RESOLVING_START,
        FormState.RESOLVING_END,
        FormState.COMPUTING_ROUTE,
        FormState.ESTIMATED,
    }
)

# State machine: maps current state -> set of valid next states
FORM_TRANSITIONS: dict[FormState, set[FormState]] = {
    **{state: set(EDITING_STATES - {state}) for state in EDITING_STATES},
    FormState.SUBMITTING: {FormState.SUBMITTED, FormState.FAILED},
    FormState.SUBMITTED: set(),
    FormState.FAILED: {FormState.ESTIMATED, FormState.IDLE},
}
FORM_TRANSITIONS[FormState.ESTIMATED].add(FormState.SUBMITTING)
