"""Task domain models built with SQLModel."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlmodel import Field, Relationship, SQLModel

from .common import CreatedAtMixin, enum_column_type

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .user import User


class TaskStatus(str, Enum):
    """Enumeration of possible task states."""

    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


class TaskBase(SQLModel, table=False):
    """Shared attributes for task models."""

    title: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    description: Optional[str] = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )
    status: TaskStatus = Field(
        default=TaskStatus.PENDING,
        sa_column=sa.Column(
            enum_column_type(TaskStatus, "task_status"),
            nullable=False,
            server_default=TaskStatus.PENDING.value,
        ),
    )
    assigned_user_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )


class Task(TaskBase, CreatedAtMixin, table=True):
    """Persistent task model."""

    __tablename__ = "tasks"
    __table_args__ = (
        sa.CheckConstraint("length(title) > 0", name="ck_tasks_title_length"),
        sa.Index("ix_tasks_assigned_user_id", "assigned_user_id"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    updated_at: Optional[datetime] = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )
    assignee: Optional["User"] = Relationship(
        back_populates="tasks",
        sa_relationship_kwargs={"lazy": "selectin"},
    )

    @property
    def assigned_user_name(self) -> str | None:
        return self.assignee.username if self.assignee is not None else None


__all__ = ["Task", "TaskBase", "TaskStatus"]
