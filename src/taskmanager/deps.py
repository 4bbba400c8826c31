"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from .core.config import Settings, get_settings
from .core.context import bind_actor_id
from .core.permissions import Actor
from .core.session import get_session_token, logout_user
from .db.session import get_session
from .errors import AuthenticationError
from .models import User
from .services import AuthService, TaskService, UserService

_bearer_scheme = HTTPBearer(auto_error=False, description="JWT issued by POST /api/auth/login")


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a database session."""

    async for session in get_session():
        yield session


SettingsDependency = Annotated[Settings, Depends(get_settings)]
DatabaseSessionDependency = Annotated[AsyncSession, Depends(get_db_session)]


def get_auth_service(
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> AuthService:
    return AuthService(session, settings)


def get_user_service(session: DatabaseSessionDependency) -> UserService:
    return UserService(session)


def get_task_service(session: DatabaseSessionDependency) -> TaskService:
    return TaskService(session)


AuthServiceDependency = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDependency = Annotated[UserService, Depends(get_user_service)]
TaskServiceDependency = Annotated[TaskService, Depends(get_task_service)]


async def get_current_user(
    auth_service: AuthServiceDependency,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> User:
    """Resolve the bearer token on the request to its stored user."""

    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError("Not authenticated.")
    user = await auth_service.resolve_user(credentials.credentials)
    # Each request runs in its own task, so the binding ends with the request.
    bind_actor_id(user.id)
    return user


CurrentUserDependency = Annotated[User, Depends(get_current_user)]


async def get_current_actor(current_user: CurrentUserDependency) -> Actor:
    return Actor.from_user(current_user)


CurrentActorDependency = Annotated[Actor, Depends(get_current_actor)]


async def get_session_user(request: Request, auth_service: AuthServiceDependency) -> User | None:
    """Resolve the bearer token held in the browser session, dropping it when stale."""

    token = get_session_token(request.session)
    if token is None:
        return None
    try:
        user = await auth_service.resolve_user(token)
    except AuthenticationError:
        logout_user(request.session)
        return None
    bind_actor_id(user.id)
    return user


SessionUserDependency = Annotated[User | None, Depends(get_session_user)]


async def require_session_user(request: Request, current_user: SessionUserDependency) -> User:
    """Redirect anonymous browsers to the sign-in page."""

    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER,
            detail="Sign in required.",
            headers={"Location": str(request.url_for("auth:login"))},
        )
    return current_user


AuthenticatedSessionUserDependency = Annotated[User, Depends(require_session_user)]


__all__ = [
    "AuthServiceDependency",
    "AuthenticatedSessionUserDependency",
    "CurrentActorDependency",
    "CurrentUserDependency",
    "SessionUserDependency",
    "DatabaseSessionDependency",
    "SettingsDependency",
    "TaskServiceDependency",
    "UserServiceDependency",
    "get_current_actor",
    "get_current_user",
    "get_db_session",
    "get_session_user",
    "require_session_user",
]
