"""Authentication service encapsulating credential checks and token flows."""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import Settings
from ..core.security import (
    GeneratedToken,
    TokenValidationError,
    create_access_token,
    decode_access_token,
    dummy_verify,
    verify_password,
)
from ..errors import AuthenticationError
from ..models import User
from ..repositories import UserRepository
from ..schemas.auth import TokenPayload

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."


class AuthService:
    """Verify credentials, issue bearer tokens and resolve them back to users."""

    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._user_repository = UserRepository(session)

    async def authenticate(self, username: str, password: str) -> User:
        """Return the user owning ``username`` when ``password`` matches.

        Unknown usernames and wrong passwords raise the same error, and both
        paths perform one bcrypt verification.
        """
        user = await self._user_repository.get_by_username(username)
        if user is None:
            dummy_verify()
            logger.warning("Login failed", extra={"username": username, "reason": "unknown_user"})
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        if not verify_password(password, user.hashed_password):
            logger.warning("Login failed", extra={"username": username, "reason": "bad_password"})
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        logger.info("Login succeeded", extra={"user_id": user.id, "username": username})
        return user

    def issue_token(self, user: User) -> GeneratedToken:
        return create_access_token(user, settings=self._settings)

    async def login(self, username: str, password: str) -> tuple[User, GeneratedToken]:
        user = await self.authenticate(username, password)
        return user, self.issue_token(user)

    async def resolve_user(self, token: str) -> User:
        """Return the stored user a bearer token was issued to."""
        try:
            claims = decode_access_token(token, settings=self._settings)
        except TokenValidationError as exc:
            raise AuthenticationError(str(exc)) from exc
        try:
            payload = TokenPayload.model_validate(claims)
            user_id = int(payload.sub)
        except (PydanticValidationError, ValueError) as exc:
            raise AuthenticationError() from exc

        user = await self._user_repository.get(user_id)
        if user is None:
            raise AuthenticationError("User no longer exists.")
        return user


__all__ = ["AuthService", "INVALID_CREDENTIALS_MESSAGE"]
