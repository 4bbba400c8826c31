"""Persistence repositories for SQLModel entities."""

from .base import BaseRepository
from .tasks import TaskRepository
from .users import UserRepository

__all__ = ["BaseRepository", "TaskRepository", "UserRepository"]
