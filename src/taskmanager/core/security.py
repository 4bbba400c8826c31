"""Security helpers for password hashing and JWT token management."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .config import Settings

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..models import User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(slots=True)
class GeneratedToken:
    """Represents a generated JWT token with associated metadata."""

    token: str
    expires_at: datetime
    jti: str


class TokenValidationError(Exception):
    """Raised when a bearer token fails signature, expiry or claim checks."""


def get_password_hash(password: str) -> str:
    """Return a hashed representation of ``password``."""

    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hashed counterpart."""

    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """Spend the time of one bcrypt verification without a stored digest."""

    pwd_context.dummy_verify()


def create_access_token(
    user: "User",
    *,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> GeneratedToken:
    """Create a signed JWT access token describing ``user``."""

    if user.id is None:
        raise ValueError("User must be persisted before issuing tokens.")
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = now + expires_delta
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "username": user.username,
        "email": user.email,
        "role": user.role.value,
        "iat": now,
        "exp": expire,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "jti": uuid4().hex,
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return GeneratedToken(token=token, expires_at=expire, jti=payload["jti"])


def decode_access_token(token: str, *, settings: Settings) -> dict[str, Any]:
    """Decode ``token`` and return its claims.

    Signature, expiry, issuer and audience are all verified. Any failure is
    reported as :class:`TokenValidationError`.
    """

    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except ExpiredSignatureError as exc:
        raise TokenValidationError("Token has expired.") from exc
    except JWTError as exc:
        raise TokenValidationError("Token is invalid.") from exc


__all__ = [
    "GeneratedToken",
    "TokenValidationError",
    "create_access_token",
    "decode_access_token",
    "dummy_verify",
    "get_password_hash",
    "pwd_context",
    "verify_password",
]
