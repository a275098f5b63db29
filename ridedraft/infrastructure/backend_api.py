"""
Clients for the ride/user backend.

The backend owns persistence and authentication; this service only
forwards validated payloads and relays the backend's ``message`` field
when a request is rejected.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ridedraft.domain.submission import RideSubmission
from ridedraft.exceptions import NetworkError

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred"


class BackendApiError(NetworkError):
    def __init__(self, message: str = DEFAULT_ERROR_MESSAGE, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RideApiError(BackendApiError):
    pass


class UserApiError(BackendApiError):
    pass


def _server_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"]:
        return body["message"]
    return None


class _BackendClient:
    error_class: type[BackendApiError] = BackendApiError

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def _post(
        self, path: str, payload: dict[str, Any], auth_token: Optional[str] = None
    ) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {auth_token}"} if auth_token else {}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}{path}", json=payload, headers=headers
                )
        except httpx.HTTPError as e:
            logger.warning("Backend request %s failed: %s", path, e)
            raise self.error_class() from e

        if response.is_error:
            message = _server_message(response) or DEFAULT_ERROR_MESSAGE
            raise self.error_class(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise self.error_class(status_code=response.status_code) from e
        if not isinstance(body, dict):
            raise self.error_class(status_code=response.status_code)
        return body


class RideApiClient(_BackendClient):
    error_class = RideApiError

    async def create_ride(
        self, submission: RideSubmission, auth_token: Optional[str] = None
    ) -> dict[str, Any]:
        """POST the ride and return the created record."""
        return await self._post("/rides", submission.to_payload(), auth_token)


class UserApiClient(_BackendClient):
    error_class = UserApiError

    async def register_user(self, name: str, email: str, password: str) -> dict[str, Any]:
        """Register a user; the backend answers with ``{token, ...userFields}``."""
        return await self._post(
            "/users/register", {"name": name, "email": email, "password": password}
        )
