"""User registration: forwards to the backend and hands back the session data."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from ridedraft.exceptions import NetworkError

logger = logging.getLogger(__name__)

REGISTRATION_FAILED = "Registration failed"


class RegistrationError(Exception):
    def __init__(self, message: str = REGISTRATION_FAILED):
        super().__init__(message)
        self.message = message


class UserApi(Protocol):
    async def register_user(self, name: str, email: str, password: str) -> dict[str, Any]: ...


async def register(
    user_api: UserApi, name: str, email: str, password: str
) -> tuple[str, dict[str, Any]]:
    """Register a user and return ``(token, user)``.

    The backend's reason is logged but never shown; any failure surfaces as
    ``RegistrationError("Registration failed")``.
    """
    try:
        data = await user_api.register_user(name=name, email=email, password=password)
    except NetworkError as exc:
        logger.warning("Registration for %s rejected: %s", email, exc)
        raise RegistrationError() from exc

    token = data.get("token")
    if not isinstance(token, str) or not token:
        logger.warning("Registration for %s returned no token", email)
        raise RegistrationError()

    user = {key: value for key, value in data.items() if key != "token"}
    return token, user
