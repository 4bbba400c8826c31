"""SQLModel table definitions."""

from .common import CreatedAtMixin, utcnow
from .task import Task, TaskBase, TaskStatus
from .user import User, UserBase, UserRole

__all__ = [
    "CreatedAtMixin",
    "Task",
    "TaskBase",
    "TaskStatus",
    "User",
    "UserBase",
    "UserRole",
    "utcnow",
]
