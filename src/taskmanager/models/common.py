"""Shared model mixins and utilities."""

from __future__ import annotations

from datetime import datetime, timezone

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


class CreatedAtMixin(SQLModel, table=False):
    """Mixin that provides a creation timestamp column."""

    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now()},
    )


def enum_column_type(enum_cls: type, name: str) -> sa.Enum:
    """Store enum *values* (the wire form) rather than member names."""
    return sa.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        validate_strings=True,
        values_callable=lambda members: [member.value for member in members],
    )


__all__ = ["CreatedAtMixin", "enum_column_type", "utcnow"]
