from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request, status
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import FormData

from ..core.permissions import Actor
from ..core.session import add_flash_message
from ..core.templates import template_response
from ..deps import AuthenticatedSessionUserDependency, UserServiceDependency
from ..errors import ApplicationError, ForbiddenError, NotFoundError
from ..models import User, UserRole
from .common import clean_text, csrf_is_valid, redirect_to

router = APIRouter(tags=["pages"])

_email_adapter = TypeAdapter(EmailStr)


def _parse_role(raw: object) -> UserRole | None:
    try:
        return UserRole(clean_text(raw))
    except ValueError:
        return None


def _form_from_submission(form: FormData) -> dict[str, Any]:
    return {
        "username": clean_text(form.get("username")),
        "email": clean_text(form.get("email")),
        "role": clean_text(form.get("role")) or UserRole.USER.value,
        "password": str(form.get("password") or ""),
    }


def _validate_form(payload: dict[str, Any], *, require_password: bool, with_role: bool) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not payload["username"]:
        errors["username"] = "Username is required."
    if not payload["email"]:
        errors["email"] = "Email is required."
    else:
        try:
            _email_adapter.validate_python(payload["email"])
        except PydanticValidationError:
            errors["email"] = "Enter a valid email address."
    if require_password and not payload["password"]:
        errors["password"] = "Password is required."
    if with_role and _parse_role(payload["role"]) is None:
        errors["role"] = "Choose a valid role."
    return errors


def _admins_only(request: Request) -> object:
    add_flash_message(request.session, "error", "Only administrators can manage users.")
    return redirect_to(request, "pages:dashboard")


def _render_form(
    request: Request,
    current_user: User,
    *,
    form: dict[str, Any],
    user: User | None = None,
    profile: bool = False,
    errors: dict[str, str] | None = None,
    status_code: int = 200,
) -> object:
    if profile:
        title = "My profile"
    else:
        title = "Edit user" if user is not None else "New user"
    return template_response(
        request,
        "users/form.html",
        {
            "title": title,
            "current_user": current_user,
            "user": user,
            "profile": profile,
            "form": form,
            "errors": errors or {},
        },
        status_code=status_code,
    )


@router.get("/users", name="users:list")
async def list_users(
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: UserServiceDependency,
) -> object:
    """Render the user administration table."""

    try:
        users = await service.list_users(Actor.from_user(current_user))
    except ForbiddenError:
        return _admins_only(request)
    return template_response(
        request,
        "users/index.html",
        {"title": "Users", "current_user": current_user, "users": users},
    )


@router.get("/users/new", name="users:new")
async def new_user_form(request: Request, current_user: AuthenticatedSessionUserDependency) -> object:
    if not current_user.is_admin:
        return _admins_only(request)
    form = {"username": "", "email": "", "role": UserRole.USER.value, "password": ""}
    return _render_form(request, current_user, form=form)


@router.post("/users/new", name="users:create")
async def create_user(
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: UserServiceDependency,
) -> object:
    form = await request.form()
    if not csrf_is_valid(request, form):
        return redirect_to(request, "users:new")

    payload = _form_from_submission(form)
    errors = _validate_form(payload, require_password=True, with_role=True)
    if not errors:
        try:
            await service.create_user(
                Actor.from_user(current_user),
                username=payload["username"],
                email=payload["email"],
                password=payload["password"],
                role=UserRole(payload["role"]),
            )
        except ForbiddenError:
            return _admins_only(request)
        except ApplicationError as exc:
            errors["form"] = exc.message

    if errors:
        payload["password"] = ""
        return _render_form(
            request,
            current_user,
            form=payload,
            errors=errors,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    add_flash_message(request.session, "success", f"User {payload['username']} created.")
    return redirect_to(request, "users:list")


@router.get("/users/{user_id}/edit", name="users:edit")
async def edit_user_form(
    user_id: int,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: UserServiceDependency,
) -> object:
    if not current_user.is_admin:
        return _admins_only(request)
    try:
        user = await service.get_user(Actor.from_user(current_user), user_id)
    except NotFoundError as exc:
        add_flash_message(request.session, "error", exc.message)
        return redirect_to(request, "users:list")
    form = {"username": user.username, "email": user.email, "role": user.role.value, "password": ""}
    return _render_form(request, current_user, form=form, user=user)


@router.post("/users/{user_id}/edit", name="users:update")
async def update_user(
    user_id: int,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: UserServiceDependency,
) -> object:
    form = await request.form()
    if not csrf_is_valid(request, form):
        return redirect_to(request, "users:edit", user_id=user_id)
    if not current_user.is_admin:
        return _admins_only(request)

    actor = Actor.from_user(current_user)
    payload = _form_from_submission(form)
    errors = _validate_form(payload, require_password=False, with_role=True)
    if not errors:
        try:
            await service.update_user(
                actor,
                user_id,
                username=payload["username"],
                email=payload["email"],
                role=UserRole(payload["role"]),
            )
        except NotFoundError as exc:
            add_flash_message(request.session, "error", exc.message)
            return redirect_to(request, "users:list")
        except ApplicationError as exc:
            errors["form"] = exc.message

    if errors:
        user = await service.get_user(actor, user_id)
        return _render_form(
            request,
            current_user,
            form=payload,
            user=user,
            errors=errors,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    add_flash_message(request.session, "success", "User updated.")
    return redirect_to(request, "users:list")


@router.post("/users/{user_id}/delete", name="users:delete")
async def delete_user(
    user_id: int,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: UserServiceDependency,
) -> object:
    form = await request.form()
    if not csrf_is_valid(request, form):
        return redirect_to(request, "users:list")

    try:
        await service.delete_user(Actor.from_user(current_user), user_id)
    except ForbiddenError:
        return _admins_only(request)
    except ApplicationError as exc:
        add_flash_message(request.session, "error", exc.message)
    else:
        add_flash_message(request.session, "success", "User and their tasks deleted.")
    return redirect_to(request, "users:list")


@router.get("/profile", name="users:profile")
async def profile_form(request: Request, current_user: AuthenticatedSessionUserDependency) -> object:
    """Let any signed-in user review their own account."""

    form = {
        "username": current_user.username,
        "email": current_user.email,
        "role": current_user.role.value,
        "password": "",
    }
    return _render_form(request, current_user, form=form, user=current_user, profile=True)


@router.post("/profile", name="users:profile:submit")
async def profile_submit(
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: UserServiceDependency,
) -> object:
    form = await request.form()
    if not csrf_is_valid(request, form):
        return redirect_to(request, "users:profile")

    payload = _form_from_submission(form)
    payload["role"] = current_user.role.value
    errors = _validate_form(payload, require_password=False, with_role=False)
    if not errors:
        try:
            await service.update_user(
                Actor.from_user(current_user),
                current_user.id,
                username=payload["username"],
                email=payload["email"],
            )
        except ApplicationError as exc:
            errors["form"] = exc.message

    if errors:
        return _render_form(
            request,
            current_user,
            form=payload,
            user=current_user,
            profile=True,
            errors=errors,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    add_flash_message(request.session, "success", "Profile updated.")
    return redirect_to(request, "users:profile")
