"""OpenRouteService directions client returning the driving distance in meters."""

import math

import httpx

from ridedraft.domain.entities import Coordinate
from ridedraft.exceptions import NetworkError


class RoutingError(NetworkError):
    """No usable route distance could be obtained from OpenRouteService."""


class OpenRouteServiceRouter:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        profile: str = "driving-car",
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.profile = profile
        self.timeout = timeout

    async def resolve(self, origin: Coordinate, destination: Coordinate) -> float:
        """Return the driving distance in **meters** from *origin* to *destination*."""
        url = f"{self.base_url}/v2/directions/{self.profile}"
        params = {
            "api_key": self.api_key,
            "start": origin.as_lon_lat(),
            "end": destination.as_lon_lat(),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise RoutingError(f"Routing timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise RoutingError(
                f"Routing service error: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise RoutingError(f"Network error: {e}") from e
        except ValueError as e:
            raise RoutingError("Routing service returned invalid JSON") from e

        try:
            distance = float(data["features"][0]["properties"]["segments"][0]["distance"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise RoutingError("Malformed routing response") from e

        if not math.isfinite(distance) or distance <= 0:
            raise RoutingError(f"Invalid route distance: {distance}")
        return distance
