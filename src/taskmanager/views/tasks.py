from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request, status
from starlette.datastructures import FormData

from ..core.permissions import Actor
from ..core.session import add_flash_message
from ..core.templates import template_response
from ..deps import AuthenticatedSessionUserDependency, TaskServiceDependency, UserServiceDependency
from ..errors import ApplicationError, ForbiddenError, NotFoundError
from ..models import Task, TaskStatus, User
from .common import clean_text, csrf_is_valid, redirect_to

router = APIRouter(tags=["pages"])


def _parse_status(raw: object) -> TaskStatus | None:
    try:
        return TaskStatus(clean_text(raw))
    except ValueError:
        return None


def _parse_int(raw: object) -> int | None:
    try:
        return int(clean_text(raw))
    except ValueError:
        return None


def _form_from_task(task: Task) -> dict[str, Any]:
    return {
        "title": task.title,
        "description": task.description or "",
        "status": task.status.value,
        "assigned_user_id": task.assigned_user_id,
    }


def _form_from_submission(form: FormData) -> dict[str, Any]:
    return {
        "title": clean_text(form.get("title")),
        "description": clean_text(form.get("description")),
        "status": clean_text(form.get("status")) or TaskStatus.PENDING.value,
        "assigned_user_id": _parse_int(form.get("assigned_user_id")),
    }


def _validate_admin_form(payload: dict[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not payload["title"]:
        errors["title"] = "Title is required."
    if _parse_status(payload["status"]) is None:
        errors["status"] = "Choose a valid status."
    if payload["assigned_user_id"] is None:
        errors["assigned_user_id"] = "Choose an assignee."
    return errors


def _render_form(
    request: Request,
    current_user: User,
    *,
    form: dict[str, Any],
    users: list[User],
    task: Task | None = None,
    errors: dict[str, str] | None = None,
    status_code: int = 200,
) -> object:
    return template_response(
        request,
        "tasks/form.html",
        {
            "title": "Edit task" if task is not None else "New task",
            "current_user": current_user,
            "task": task,
            "form": form,
            "users": users,
            "errors": errors or {},
        },
        status_code=status_code,
    )


async def _assignable_users(actor: Actor, user_service: UserServiceDependency) -> list[User]:
    if not actor.is_admin:
        return []
    return await user_service.list_users(actor)


@router.get("", name="tasks:list")
async def list_tasks(
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: TaskServiceDependency,
    status_filter: str | None = None,
) -> object:
    """Render the tasks visible to the signed-in user."""

    selected = _parse_status(status_filter)
    tasks = await service.list_tasks(Actor.from_user(current_user), status=selected)
    return template_response(
        request,
        "tasks/index.html",
        {
            "title": "Tasks",
            "current_user": current_user,
            "tasks": tasks,
            "selected_status": selected.value if selected else "",
        },
    )


@router.get("/new", name="tasks:new")
async def new_task_form(
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    user_service: UserServiceDependency,
) -> object:
    actor = Actor.from_user(current_user)
    if not actor.is_admin:
        add_flash_message(request.session, "error", "Only administrators can create tasks.")
        return redirect_to(request, "tasks:list")
    form = {"title": "", "description": "", "status": TaskStatus.PENDING.value, "assigned_user_id": None}
    return _render_form(
        request,
        current_user,
        form=form,
        users=await _assignable_users(actor, user_service),
    )


@router.post("/new", name="tasks:create")
async def create_task(
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: TaskServiceDependency,
    user_service: UserServiceDependency,
) -> object:
    """Create a task from the admin form."""

    form = await request.form()
    if not csrf_is_valid(request, form):
        return redirect_to(request, "tasks:new")

    actor = Actor.from_user(current_user)
    payload = _form_from_submission(form)
    errors = _validate_admin_form(payload)
    if not errors:
        try:
            await service.create_task(
                actor,
                title=payload["title"],
                description=payload["description"] or None,
                status=TaskStatus(payload["status"]),
                assigned_user_id=payload["assigned_user_id"],
            )
        except ForbiddenError as exc:
            add_flash_message(request.session, "error", exc.message)
            return redirect_to(request, "tasks:list")
        except ApplicationError as exc:
            errors["form"] = exc.message

    if errors:
        return _render_form(
            request,
            current_user,
            form=payload,
            users=await _assignable_users(actor, user_service),
            errors=errors,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    add_flash_message(request.session, "success", "Task created.")
    return redirect_to(request, "tasks:list")


@router.get("/{task_id}/edit", name="tasks:edit")
async def edit_task_form(
    task_id: int,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: TaskServiceDependency,
    user_service: UserServiceDependency,
) -> object:
    actor = Actor.from_user(current_user)
    try:
        task = await service.get_task(actor, task_id)
    except NotFoundError as exc:
        add_flash_message(request.session, "error", exc.message)
        return redirect_to(request, "tasks:list")
    return _render_form(
        request,
        current_user,
        form=_form_from_task(task),
        users=await _assignable_users(actor, user_service),
        task=task,
    )


@router.post("/{task_id}/edit", name="tasks:update")
async def update_task(
    task_id: int,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: TaskServiceDependency,
    user_service: UserServiceDependency,
) -> object:
    """Apply the submitted edit; assignees only submit a status."""

    form = await request.form()
    if not csrf_is_valid(request, form):
        return redirect_to(request, "tasks:edit", task_id=task_id)

    actor = Actor.from_user(current_user)
    payload = _form_from_submission(form)
    if actor.is_admin:
        errors = _validate_admin_form(payload)
    else:
        errors = {} if _parse_status(payload["status"]) else {"status": "Choose a valid status."}

    if not errors:
        try:
            if actor.is_admin:
                await service.update_task(
                    actor,
                    task_id,
                    title=payload["title"],
                    description=payload["description"],
                    status=TaskStatus(payload["status"]),
                    assigned_user_id=payload["assigned_user_id"],
                )
            else:
                await service.update_task(actor, task_id, status=TaskStatus(payload["status"]))
        except NotFoundError as exc:
            add_flash_message(request.session, "error", exc.message)
            return redirect_to(request, "tasks:list")
        except ApplicationError as exc:
            errors["form"] = exc.message

    if errors:
        try:
            task = await service.get_task(actor, task_id)
        except NotFoundError as exc:
            add_flash_message(request.session, "error", exc.message)
            return redirect_to(request, "tasks:list")
        return _render_form(
            request,
            current_user,
            form=payload,
            users=await _assignable_users(actor, user_service),
            task=task,
            errors=errors,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    add_flash_message(request.session, "success", "Task updated.")
    return redirect_to(request, "tasks:list")


@router.post("/{task_id}/delete", name="tasks:delete")
async def delete_task(
    task_id: int,
    request: Request,
    current_user: AuthenticatedSessionUserDependency,
    service: TaskServiceDependency,
) -> object:
    form = await request.form()
    if not csrf_is_valid(request, form):
        return redirect_to(request, "tasks:list")

    try:
        await service.delete_task(Actor.from_user(current_user), task_id)
    except ApplicationError as exc:
        add_flash_message(request.session, "error", exc.message)
    else:
        add_flash_message(request.session, "success", "Task deleted.")
    return redirect_to(request, "tasks:list")
