"""
Nominatim geocoding client.

Resolves a free-text address to the first matching coordinate. An empty
result set is a miss (``AddressNotFoundError``); transport, status and
parsing failures are ``GeocodingError``.
"""

import httpx

from ridedraft.domain.entities import Coordinate
from ridedraft.exceptions import NetworkError, NotFoundError, ValidationError


class AddressNotFoundError(NotFoundError):
    """Nominatim returned an empty result set for the query."""


class GeocodingError(NetworkError):
    """Transport failure, error status or unparseable Nominatim response."""


class NominatimGeocoder:
    def __init__(self, base_url: str, user_agent: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout

    async def resolve(self, address: str) -> Coordinate:
        """Resolve free-text *address* to the best matching coordinate."""
        if not address or not address.strip():
            raise ValidationError("Address must not be empty")

        params = {"q": address, "format": "json", "limit": 1}
        headers = {"User-Agent": self.user_agent}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, headers=headers) as client:
                response = await client.get(f"{self.base_url}/search", params=params)
                response.raise_for_status()
                results = response.json()
        except httpx.TimeoutException as e:
            raise GeocodingError(f"Geocoding timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise GeocodingError(
                f"Geocoding service error: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise GeocodingError(f"Network error: {e}") from e
        except ValueError as e:
            raise GeocodingError("Geocoding service returned invalid JSON") from e

        if not isinstance(results, list):
            raise GeocodingError("Malformed geocoding response")
        if not results:
            raise AddressNotFoundError(f"No location found for {address!r}")

        try:
            first = results[0]
            return Coordinate(latitude=float(first["lat"]), longitude=float(first["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingError("Malformed geocoding response") from e
