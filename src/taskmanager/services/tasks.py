"""Service layer encapsulating task-related operations."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.permissions import (
    Action,
    Actor,
    authorize,
    permitted_task_changes,
    task_visibility,
)
from ..errors import NotFoundError, ValidationError
from ..models import Task, TaskStatus, utcnow
from ..repositories import TaskRepository, UserRepository

logger = logging.getLogger(__name__)


class TaskService:
    """High-level business orchestration for ``Task`` entities."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = TaskRepository(session)
        self._user_repository = UserRepository(session)

    @property
    def repository(self) -> TaskRepository:
        """Expose the underlying repository for advanced scenarios."""
        return self._repository

    async def _ensure_assignee_exists(self, user_id: int) -> None:
        if await self._user_repository.get(user_id) is None:
            raise ValidationError(
                "Assigned user does not exist.",
                details={"assignedUserId": user_id},
            )

    async def _reload(self, task_id: int) -> Task:
        task = await self._repository.get_with_assignee(task_id)
        if task is None:  # pragma: no cover - deleted concurrently
            raise NotFoundError("Task not found.")
        return task

    async def add_task(
        self,
        *,
        title: str,
        assigned_user_id: int,
        description: str | None = None,
        status: TaskStatus = TaskStatus.PENDING,
        created_at: datetime | None = None,
    ) -> Task:
        """Create a task for an existing assignee without a policy check."""
        await self._ensure_assignee_exists(assigned_user_id)
        task = Task(
            title=title,
            description=description,
            status=status,
            assigned_user_id=assigned_user_id,
            created_at=created_at or utcnow(),
        )
        await self._repository.add(task)
        await self._session.commit()
        if task.id is None:  # pragma: no cover
            raise ValueError("Task was not persisted correctly")
        logger.info(
            "Task created",
            extra={"task_id": task.id, "assigned_user_id": assigned_user_id},
        )
        return await self._reload(task.id)

    async def create_task(
        self,
        actor: Actor,
        *,
        title: str,
        assigned_user_id: int,
        description: str | None = None,
        status: TaskStatus = TaskStatus.PENDING,
    ) -> Task:
        authorize(actor, Action.CREATE_TASK)
        return await self.add_task(
            title=title,
            description=description,
            status=status,
            assigned_user_id=assigned_user_id,
        )

    async def list_tasks(
        self,
        actor: Actor,
        *,
        status: TaskStatus | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Task]:
        """Return the tasks ``actor`` may see, ordered by id."""
        authorize(actor, Action.LIST_TASKS)
        return await self._repository.list_filtered(
            assigned_user_id=task_visibility(actor),
            status=status,
            limit=limit,
            offset=offset,
        )

    async def get_task(self, actor: Actor, task_id: int) -> Task:
        """Retrieve a task, hiding tasks assigned to someone else from non-admins."""
        task = await self._repository.get_with_assignee(task_id)
        if task is None:
            raise NotFoundError("Task not found.")
        authorize(actor, Action.READ_TASK, owner_id=task.assigned_user_id)
        return task

    async def update_task(
        self,
        actor: Actor,
        task_id: int,
        *,
        title: str | None = None,
        description: str | None = None,
        status: TaskStatus | None = None,
        assigned_user_id: int | None = None,
    ) -> Task:
        """Apply the changes ``actor`` is permitted to make and persist them.

        Non-admin assignees may only move the status; any other requested
        change is dropped and logged.
        """
        task = await self._repository.get_with_assignee(task_id)
        if task is None:
            raise NotFoundError("Task not found.")
        authorize(actor, Action.UPDATE_TASK, owner_id=task.assigned_user_id)

        requested = {
            key: value
            for key, value in {
                "title": title,
                "description": description,
                "status": status,
                "assigned_user_id": assigned_user_id,
            }.items()
            if value is not None
        }
        changes, ignored = permitted_task_changes(actor, requested)
        if ignored:
            logger.info(
                "Ignored task changes outside the actor's permissions",
                extra={"task_id": task_id, "actor_id": actor.id, "fields": sorted(ignored)},
            )

        new_assignee = changes.get("assigned_user_id")
        if new_assignee is not None and new_assignee != task.assigned_user_id:
            await self._ensure_assignee_exists(new_assignee)
        for field, value in changes.items():
            setattr(task, field, value)
        task.updated_at = utcnow()
        await self._session.commit()
        logger.info(
            "Task updated",
            extra={"task_id": task_id, "actor_id": actor.id, "fields": sorted(changes)},
        )
        return await self._reload(task_id)

    async def delete_task(self, actor: Actor, task_id: int) -> None:
        """Delete a task; only admins may do so, and missing ids raise ``NotFoundError``."""
        authorize(actor, Action.DELETE_TASK)
        task = await self._repository.get(task_id)
        if task is None:
            raise NotFoundError("Task not found.")
        await self._repository.delete(task)
        await self._session.commit()
        logger.info("Task deleted", extra={"task_id": task_id, "actor_id": actor.id})


__all__ = ["TaskService"]
