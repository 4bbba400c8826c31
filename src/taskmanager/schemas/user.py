"""User-facing Pydantic schemas."""

from __future__ import annotations

from pydantic import ConfigDict, EmailStr, Field, model_validator

from ..models import UserRole
from .common import CamelModel, UtcDateTime

USER_READ_EXAMPLE = {
    "id": 2,
    "username": "user",
    "email": "user@taskmanagement.com",
    "role": UserRole.USER.value,
    "createdAt": "2024-01-01T12:00:00Z",
}


class UserPublic(CamelModel):
    """Minimal public representation of a user embedded in login responses."""

    id: int
    username: str
    email: str
    role: UserRole


class UserRead(UserPublic):
    """Public representation of a user record."""

    model_config = ConfigDict(json_schema_extra={"example": USER_READ_EXAMPLE})

    created_at: UtcDateTime


class UserCreate(CamelModel):
    """Payload for creating a new user account."""

    username: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    role: UserRole = Field(default=UserRole.USER)


class UserUpdate(CamelModel):
    """Payload for partially updating a user."""

    username: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = Field(default=None)
    role: UserRole | None = Field(default=None)

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "UserUpdate":
        if not self.model_dump(exclude_unset=True, exclude_none=True):
            raise ValueError("At least one field must be provided for update.")
        return self


__all__ = ["UserCreate", "UserPublic", "UserRead", "UserUpdate"]
