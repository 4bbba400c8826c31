"""Routes handling task CRUD operations."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from ...deps import CurrentActorDependency, TaskServiceDependency
from ...models import TaskStatus
from ...schemas import TaskCreate, TaskRead, TaskUpdate

router = APIRouter(prefix="/tasks", tags=["tasks"])

LimitQuery = Annotated[
    int | None,
    Query(
        ge=1,
        le=100,
        description="Maximum number of tasks to return in a single response.",
    ),
]
OffsetQuery = Annotated[
    int,
    Query(
        ge=0,
        description="Number of tasks to skip before collecting results.",
    ),
]
StatusQuery = Annotated[
    TaskStatus | None,
    Query(description="Filter results to tasks matching the supplied status."),
]


@router.get(
    "",
    response_model=list[TaskRead],
    summary="List the tasks visible to the caller",
)
async def list_tasks(
    actor: CurrentActorDependency,
    service: TaskServiceDependency,
    status: StatusQuery = None,
    limit: LimitQuery = None,
    offset: OffsetQuery = 0,
) -> list[TaskRead]:
    tasks = await service.list_tasks(actor, status=status, limit=limit, offset=offset)
    return [TaskRead.model_validate(task) for task in tasks]


@router.get("/{task_id}", response_model=TaskRead, summary="Retrieve a task")
async def read_task(
    task_id: int,
    actor: CurrentActorDependency,
    service: TaskServiceDependency,
) -> TaskRead:
    task = await service.get_task(actor, task_id)
    return TaskRead.model_validate(task)


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task (admin only)",
)
async def create_task(
    payload: TaskCreate,
    actor: CurrentActorDependency,
    service: TaskServiceDependency,
) -> TaskRead:
    task = await service.create_task(
        actor,
        title=payload.title,
        description=payload.description,
        status=payload.status,
        assigned_user_id=payload.assigned_user_id,
    )
    return TaskRead.model_validate(task)


@router.put(
    "/{task_id}",
    response_model=TaskRead,
    summary="Update a task; assignees may only change its status",
)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    actor: CurrentActorDependency,
    service: TaskServiceDependency,
) -> TaskRead:
    task = await service.update_task(
        actor,
        task_id,
        title=payload.title,
        description=payload.description,
        status=payload.status,
        assigned_user_id=payload.assigned_user_id,
    )
    return TaskRead.model_validate(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a task (admin only)",
)
async def delete_task(
    task_id: int,
    actor: CurrentActorDependency,
    service: TaskServiceDependency,
) -> Response:
    await service.delete_task(actor, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
