"""Small helpers shared by the server-rendered views."""

from __future__ import annotations

from fastapi import Request
from starlette.datastructures import FormData
from starlette.responses import RedirectResponse

from ..core.session import add_flash_message, validate_csrf_token


def clean_text(raw: object) -> str:
    return str(raw or "").strip()


def redirect_to(request: Request, name: str, **path_params: object) -> RedirectResponse:
    return RedirectResponse(request.url_for(name, **path_params), status_code=303)


def csrf_is_valid(request: Request, form: FormData) -> bool:
    """Check the submitted token, queueing a flash message when it is stale."""

    if validate_csrf_token(request.session, form.get("csrf_token")):
        return True
    add_flash_message(request.session, "error", "The form has expired. Please try again.")
    return False


__all__ = ["clean_text", "csrf_is_valid", "redirect_to"]
