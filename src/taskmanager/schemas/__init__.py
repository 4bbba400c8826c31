"""Pydantic schemas for public interfaces."""

from __future__ import annotations

from .auth import LoginRequest, LoginResponse, TokenPayload
from .common import CamelModel
from .system import ErrorResponse, HealthCheckResponse, RootResponse
from .task import TaskCreate, TaskRead, TaskUpdate
from .user import UserCreate, UserPublic, UserRead, UserUpdate

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "HealthCheckResponse",
    "LoginRequest",
    "LoginResponse",
    "RootResponse",
    "TaskCreate",
    "TaskRead",
    "TaskUpdate",
    "TokenPayload",
    "UserCreate",
    "UserPublic",
    "UserRead",
    "UserUpdate",
]
