from __future__ import annotations

from fastapi import APIRouter, Request, status

from ..core.session import add_flash_message, login_user, logout_user
from ..core.templates import template_response
from ..deps import AuthServiceDependency, SessionUserDependency
from ..errors import AuthenticationError
from .common import clean_text, csrf_is_valid, redirect_to

router = APIRouter(tags=["pages"])


def _login_page(request: Request, username: str, errors: dict[str, str], *, status_code: int = 200) -> object:
    return template_response(
        request,
        "auth/login.html",
        {"title": "Sign in", "form": {"username": username}, "errors": errors},
        status_code=status_code,
    )


@router.get("/login", name="auth:login")
async def login_form(request: Request, current_user: SessionUserDependency) -> object:
    """Render the login form."""

    if current_user is not None:
        return redirect_to(request, "pages:dashboard")
    return _login_page(request, "", {})


@router.post("/login", name="auth:login:submit")
async def login_submit(request: Request, auth_service: AuthServiceDependency) -> object:
    """Exchange the submitted credentials for a token held in the session."""

    form = await request.form()
    username = clean_text(form.get("username"))
    if not csrf_is_valid(request, form):
        return _login_page(request, username, {}, status_code=status.HTTP_400_BAD_REQUEST)

    password = str(form.get("password") or "")
    errors: dict[str, str] = {}
    if not username:
        errors["username"] = "Username is required."
    if not password:
        errors["password"] = "Password is required."
    if errors:
        return _login_page(request, username, errors, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        user, token = await auth_service.login(username, password)
    except AuthenticationError as exc:
        return _login_page(
            request,
            username,
            {"username": exc.message},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    login_user(request.session, token.token)
    add_flash_message(request.session, "success", f"Welcome back, {user.username}!")
    return redirect_to(request, "pages:dashboard")


@router.post("/logout", name="auth:logout")
async def logout(request: Request) -> object:
    """Sign the user out and clear their browser session."""

    form = await request.form()
    if not csrf_is_valid(request, form):
        return redirect_to(request, "pages:dashboard")

    logout_user(request.session)
    add_flash_message(request.session, "info", "You have been signed out.")
    return redirect_to(request, "auth:login")
