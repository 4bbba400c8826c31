"""Request-scoped context helpers.

Two values travel with a request: the correlation id bound by
``CorrelationIdMiddleware`` and the id of the authenticated actor, bound once
the bearer token or browser session has been resolved. Both are read by the
logging filter so every record emitted while serving a request carries them.
"""

from __future__ import annotations

from contextvars import ContextVar, Token

REQUEST_ID_HEADER = "X-Request-ID"

_request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default="-")
_actor_id_ctx_var: ContextVar[int | None] = ContextVar("actor_id", default=None)


def get_request_id() -> str:
    """Return the request identifier for the current execution context."""

    return _request_id_ctx_var.get()


def bind_request_id(request_id: str) -> Token[str]:
    """Bind a request identifier to the current execution context."""

    return _request_id_ctx_var.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    _request_id_ctx_var.reset(token)


def get_actor_id() -> int | None:
    return _actor_id_ctx_var.get()


def bind_actor_id(actor_id: int | None) -> Token[int | None]:
    """Record which user the current request acts for."""

    return _actor_id_ctx_var.set(actor_id)


def reset_actor_id(token: Token[int | None]) -> None:
    _actor_id_ctx_var.reset(token)


__all__ = [
    "REQUEST_ID_HEADER",
    "bind_actor_id",
    "bind_request_id",
    "get_actor_id",
    "get_request_id",
    "reset_actor_id",
    "reset_request_id",
]
