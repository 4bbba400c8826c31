"""Task-related Pydantic schemas."""

from __future__ import annotations

from pydantic import ConfigDict, Field, model_validator

from ..models import TaskStatus
from .common import CamelModel, UtcDateTime

TASK_READ_EXAMPLE = {
    "id": 1,
    "title": "Create User Dashboard",
    "description": "Design and implement the user dashboard with task overview.",
    "status": TaskStatus.IN_PROGRESS.value,
    "assignedUserId": 2,
    "assignedUserName": "user",
    "createdAt": "2024-01-01T12:00:00Z",
    "updatedAt": None,
}


class TaskCreate(CamelModel):
    """Payload for creating a new task."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Add Task Filtering",
                "description": "Allow filtering tasks by status.",
                "status": TaskStatus.PENDING.value,
                "assignedUserId": 2,
            }
        }
    )

    title: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None)
    status: TaskStatus = Field(default=TaskStatus.PENDING)
    assigned_user_id: int = Field(gt=0)


class TaskUpdate(CamelModel):
    """Payload for partially updating an existing task."""

    model_config = ConfigDict(json_schema_extra={"example": {"status": TaskStatus.COMPLETED.value}})

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None)
    status: TaskStatus | None = Field(default=None)
    assigned_user_id: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "TaskUpdate":
        if not self.model_dump(exclude_unset=True, exclude_none=True):
            raise ValueError("At least one field must be provided for update.")
        return self


class TaskRead(CamelModel):
    """Public representation of a task."""

    model_config = ConfigDict(json_schema_extra={"example": TASK_READ_EXAMPLE})

    id: int
    title: str
    description: str | None = None
    status: TaskStatus
    assigned_user_id: int
    assigned_user_name: str | None = None
    created_at: UtcDateTime
    updated_at: UtcDateTime | None = None


__all__ = ["TaskCreate", "TaskRead", "TaskUpdate"]
