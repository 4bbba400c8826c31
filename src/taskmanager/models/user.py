"""User domain models built with SQLModel."""

from enum import Enum
from typing import TYPE_CHECKING, List

import sqlalchemy as sa
from sqlmodel import Field, Relationship, SQLModel

from .common import CreatedAtMixin, enum_column_type

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .task import Task


class UserRole(str, Enum):
    """Roles supported by the authorization policy."""

    ADMIN = "Admin"
    USER = "User"


class UserBase(SQLModel, table=False):
    """Shared attributes for user models."""

    username: str = Field(
        max_length=100,
        sa_column=sa.Column(sa.String(length=100), nullable=False, unique=True),
    )
    email: str = Field(
        max_length=320,
        sa_column=sa.Column(sa.String(length=320), nullable=False, unique=True),
    )
    role: UserRole = Field(
        default=UserRole.USER,
        sa_column=sa.Column(
            enum_column_type(UserRole, "user_role"),
            nullable=False,
            server_default=UserRole.USER.value,
        ),
    )


class User(UserBase, CreatedAtMixin, table=True):
    """Persistent user model."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    tasks: List["Task"] = Relationship(
        back_populates="assignee",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


__all__ = ["User", "UserBase", "UserRole"]
