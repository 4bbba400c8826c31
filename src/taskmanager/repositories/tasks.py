"""Repository for interacting with task persistence models."""

from __future__ import annotations

from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Task, TaskStatus
from .base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """Concrete repository encapsulating ``Task`` persistence operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Task)

    def _select(self):
        return (
            select(Task)
            .options(selectinload(Task.assignee))  # type: ignore[arg-type]
            .execution_options(populate_existing=True)
        )

    async def get_with_assignee(self, task_id: int) -> Task | None:
        """Retrieve a task by ID with its assignee loaded."""
        result = await self.session.execute(self._select().where(Task.id == task_id))
        return result.scalar_one_or_none()

    async def list_filtered(
        self,
        *,
        assigned_user_id: int | None = None,
        status: TaskStatus | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Task]:
        """Return tasks matching the provided filters ordered by ID."""
        query = self._select()
        if assigned_user_id is not None:
            query = query.where(Task.assigned_user_id == assigned_user_id)
        if status is not None:
            query = query.where(Task.status == status)
        query = query.order_by(Task.id).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())


__all__ = ["TaskRepository"]
