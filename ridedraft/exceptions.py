"""
Error taxonomy shared by the domain, the HTTP clients and the form controller.

* ``ValidationError`` -- bad input; blocks the action, shown inline.
* ``NetworkError``    -- an external call failed; transient, never corrupts
  draft state.
* ``NotFoundError``   -- the geocoder had no match; the estimate pipeline
  simply stalls until the user changes the address.
"""


class RideDraftError(Exception):
    """Base class for every error the form controller knows how to recover from."""


class ValidationError(RideDraftError):
    pass


class NetworkError(RideDraftError):
    pass


class NotFoundError(RideDraftError):
    pass
