from __future__ import annotations

from fastapi import APIRouter, Request

from ..core.permissions import Actor
from ..core.templates import template_response
from ..deps import SessionUserDependency, TaskServiceDependency
from ..models import TaskStatus
from .common import redirect_to

router = APIRouter(tags=["pages"])


@router.get("/", name="pages:dashboard")
async def dashboard(
    request: Request,
    current_user: SessionUserDependency,
    service: TaskServiceDependency,
) -> object:
    """Summarise the tasks visible to the signed-in user."""

    if current_user is None:
        return redirect_to(request, "auth:login")

    tasks = await service.list_tasks(Actor.from_user(current_user))
    counts = {task_status.value: 0 for task_status in TaskStatus}
    for task in tasks:
        counts[task.status.value] += 1
    return template_response(
        request,
        "pages/dashboard.html",
        {
            "title": "Dashboard",
            "current_user": current_user,
            "tasks": tasks,
            "counts": counts,
            "total": len(tasks),
        },
    )
