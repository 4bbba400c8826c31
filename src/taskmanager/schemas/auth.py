"""Schemas describing authentication payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models import UserRole
from .common import CamelModel
from .user import UserPublic


class LoginRequest(CamelModel):
    """Credentials submitted to obtain a bearer token."""

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(CamelModel):
    """Issued bearer token together with the authenticated user."""

    token: str
    expires_at: datetime
    user: UserPublic


class TokenPayload(BaseModel):
    """Validated JWT payload."""

    model_config = ConfigDict(extra="ignore")

    sub: str
    username: str
    email: str
    role: UserRole
    exp: datetime
    iat: datetime
    jti: str
    iss: str | None = None
    aud: str | None = None


__all__ = ["LoginRequest", "LoginResponse", "TokenPayload"]
