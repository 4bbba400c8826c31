"""Service layer orchestrating user-related repository operations."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.permissions import Action, Actor, authorize
from ..core.security import get_password_hash
from ..errors import ConflictError, NotFoundError
from ..models import User, UserRole
from ..repositories import UserRepository

logger = logging.getLogger(__name__)


class UserService:
    """High-level business operations for ``User`` entities.

    Methods taking an :class:`Actor` run the authorization policy before
    touching the store; :meth:`register_user` is the unguarded path used by the
    seed step and test fixtures.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = UserRepository(session)

    @property
    def repository(self) -> UserRepository:
        """Expose the underlying repository for advanced scenarios."""
        return self._repository

    async def _ensure_unique(
        self,
        *,
        username: str | None = None,
        email: str | None = None,
        exclude_id: int | None = None,
    ) -> None:
        if username is not None:
            existing = await self._repository.get_by_username(username)
            if existing is not None and existing.id != exclude_id:
                raise ConflictError("Username is already taken.", details={"field": "username"})
        if email is not None:
            existing = await self._repository.get_by_email(email)
            if existing is not None and existing.id != exclude_id:
                raise ConflictError("Email is already registered.", details={"field": "email"})

    async def _commit(self) -> None:
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ConflictError("Username or email is already in use.") from exc

    async def register_user(
        self,
        *,
        username: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Create and persist a new user record."""
        await self._ensure_unique(username=username, email=email)
        user = User(
            username=username,
            email=email,
            role=role,
            hashed_password=get_password_hash(password),
        )
        self._session.add(user)
        await self._commit()
        await self._repository.refresh(user)
        logger.info(
            "User created",
            extra={"user_id": user.id, "username": user.username, "role": user.role.value},
        )
        return user

    async def create_user(
        self,
        actor: Actor,
        *,
        username: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        authorize(actor, Action.CREATE_USER)
        return await self.register_user(
            username=username,
            email=email,
            password=password,
            role=role,
        )

    async def get_user_by_username(self, username: str) -> User | None:
        """Fetch a user by their unique username."""
        return await self._repository.get_by_username(username)

    async def list_users(self, actor: Actor) -> list[User]:
        """Return all registered users ordered by id."""
        authorize(actor, Action.LIST_USERS)
        return await self._repository.list()

    async def get_user(self, actor: Actor, user_id: int) -> User:
        """Fetch a user visible to ``actor`` or raise ``NotFoundError``."""
        authorize(actor, Action.READ_USER, owner_id=user_id)
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return user

    async def update_user(
        self,
        actor: Actor,
        user_id: int,
        *,
        username: str | None = None,
        email: str | None = None,
        role: UserRole | None = None,
    ) -> User:
        """Apply updates to a user record and persist the changes."""
        authorize(actor, Action.UPDATE_USER, owner_id=user_id)
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        if role is not None and role is not user.role:
            authorize(actor, Action.CHANGE_USER_ROLE, owner_id=user_id)

        await self._ensure_unique(
            username=username if username != user.username else None,
            email=email if email != user.email else None,
            exclude_id=user.id,
        )
        if username is not None:
            user.username = username
        if email is not None:
            user.email = email
        if role is not None:
            user.role = role
        await self._commit()
        await self._repository.refresh(user)
        logger.info("User updated", extra={"user_id": user.id, "actor_id": actor.id})
        return user

    async def delete_user(self, actor: Actor, user_id: int) -> None:
        """Delete a user and every task assigned to them."""
        authorize(actor, Action.DELETE_USER, owner_id=user_id)
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        await self._repository.delete(user)
        await self._session.commit()
        logger.info("User deleted", extra={"user_id": user_id, "actor_id": actor.id})


__all__ = ["UserService"]
