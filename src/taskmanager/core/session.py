"""Helpers for the signed browser session used by the server-rendered pages."""

from __future__ import annotations

import secrets
from typing import Any, MutableMapping

SESSION_TOKEN_KEY = "access_token"
SESSION_CSRF_KEY = "csrf_token"
SESSION_FLASH_KEY = "flash_messages"


def get_session_token(session: MutableMapping[str, Any]) -> str | None:
    """Return the bearer token stored for the signed-in browser, if any."""

    token = session.get(SESSION_TOKEN_KEY)
    if isinstance(token, str) and token:
        return token
    return None


def login_user(session: MutableMapping[str, Any], token: str) -> None:
    """Persist an issued bearer token in the session."""

    session[SESSION_TOKEN_KEY] = token


def logout_user(session: MutableMapping[str, Any]) -> None:
    """Remove user-specific state from the session."""

    session.pop(SESSION_TOKEN_KEY, None)
    session.pop(SESSION_CSRF_KEY, None)


def ensure_csrf_token(session: MutableMapping[str, Any]) -> str:
    """Return a CSRF token, generating one if necessary."""

    token = session.get(SESSION_CSRF_KEY)
    if isinstance(token, str) and token:
        return token
    token = secrets.token_urlsafe(32)
    session[SESSION_CSRF_KEY] = token
    return token


def validate_csrf_token(session: MutableMapping[str, Any], provided: Any) -> bool:
    """Validate a CSRF token against the value stored in the session."""

    expected = session.get(SESSION_CSRF_KEY)
    if not expected or not provided:
        return False
    return secrets.compare_digest(str(expected), str(provided))


def add_flash_message(session: MutableMapping[str, Any], category: str, message: str) -> None:
    """Store a one-time flash message in the session."""

    payload = {"category": category, "message": message}
    existing = session.get(SESSION_FLASH_KEY)
    if isinstance(existing, list):
        session[SESSION_FLASH_KEY] = [*existing, payload]
        return
    session[SESSION_FLASH_KEY] = [payload]


def pop_flash_messages(session: MutableMapping[str, Any]) -> list[dict[str, str]]:
    """Retrieve and clear any queued flash messages from the session."""

    messages = session.pop(SESSION_FLASH_KEY, [])
    if not isinstance(messages, list):
        return []
    cleaned: list[dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            continue
        message = str(item.get("message", ""))
        if message:
            cleaned.append({"category": str(item.get("category", "info")), "message": message})
    return cleaned


__all__ = [
    "SESSION_CSRF_KEY",
    "SESSION_FLASH_KEY",
    "SESSION_TOKEN_KEY",
    "add_flash_message",
    "ensure_csrf_token",
    "get_session_token",
    "login_user",
    "logout_user",
    "pop_flash_messages",
    "validate_csrf_token",
]
