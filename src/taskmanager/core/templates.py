"""Shared Jinja2 environment for the server-rendered pages."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates

from ..models import TaskStatus, UserRole
from .session import ensure_csrf_token, pop_flash_messages

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
_templates.env.globals.setdefault("task_statuses", list(TaskStatus))
_templates.env.globals.setdefault("user_roles", list(UserRole))


def _base_context(request: Request, extra: dict[str, Any] | None = None) -> dict[str, Any]:
    context = dict(extra or {})
    session = request.session

    context.setdefault("settings", getattr(request.app.state, "settings", None))
    context.setdefault("current_user", None)
    context.setdefault("errors", {})
    context["csrf_token"] = ensure_csrf_token(session)
    context["messages"] = pop_flash_messages(session)
    return context


def template_response(
    request: Request,
    template_name: str,
    context: dict[str, Any] | None = None,
    *,
    status_code: int = 200,
) -> Any:
    """Render a full HTML response using the shared template environment."""

    payload = _base_context(request, context)
    return _templates.TemplateResponse(request, template_name, payload, status_code=status_code)


__all__ = ["TEMPLATES_DIR", "template_response"]
