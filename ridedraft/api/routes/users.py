"""
User endpoints
==============

POST /api/v1/users/register -- register with the backend, returns token + user
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from ridedraft.api.dependencies import get_user_api
from ridedraft.api.middleware import limiter
from ridedraft.api.schemas import RegisterRequest, RegisterResponse
from ridedraft.infrastructure.backend_api import UserApiClient
from ridedraft.services.registration import RegistrationError, register

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/register",
    status_code=201,
    response_model=RegisterResponse,
    summary="Register a new user",
    responses={400: {"description": "Registration failed"}},
)
@limiter.limit("100/minute")
async def register_user(
    request: Request,
    body: RegisterRequest,
    user_api: UserApiClient = Depends(get_user_api),
):
    try:
        token, user = await register(user_api, body.name, body.email, body.password)
    except RegistrationError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    return RegisterResponse(token=token, user=user)
