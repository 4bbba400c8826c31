"""Authentication endpoints issuing bearer tokens."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...deps import AuthServiceDependency
from ...schemas import LoginRequest, LoginResponse, UserPublic

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Exchange a username and password for a bearer token",
    responses={401: {"description": "Invalid username or password"}},
)
async def login(payload: LoginRequest, auth_service: AuthServiceDependency) -> LoginResponse:
    user, token = await auth_service.login(payload.username, payload.password)
    return LoginResponse(
        token=token.token,
        expires_at=token.expires_at,
        user=UserPublic.model_validate(user),
    )


__all__ = ["router"]
