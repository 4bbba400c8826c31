"""Seed step populating an empty database with demo accounts and tasks."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import TaskStatus, UserRole, utcnow
from ..services import TaskService, UserService
from .session import async_session_maker, init_db

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SeedUser:
    username: str
    email: str
    password: str
    role: UserRole


@dataclass(frozen=True, slots=True)
class SeedTask:
    title: str
    description: str
    status: TaskStatus
    assignee: str
    age_days: int


SEED_USERS: tuple[SeedUser, ...] = (
    SeedUser("admin", "admin@taskmanagement.com", "Admin123!", UserRole.ADMIN),
    SeedUser("user", "user@taskmanagement.com", "User123!", UserRole.USER),
)

SEED_TASKS: tuple[SeedTask, ...] = (
    SeedTask(
        "Implement Authentication",
        "Set up JWT authentication for the API.",
        TaskStatus.COMPLETED,
        "admin",
        5,
    ),
    SeedTask(
        "Create User Dashboard",
        "Design and implement the user dashboard with task overview.",
        TaskStatus.IN_PROGRESS,
        "user",
        3,
    ),
    SeedTask(
        "Add Task Filtering",
        "Allow filtering tasks by status and assignee.",
        TaskStatus.PENDING,
        "user",
        1,
    ),
)


async def seed_database(session: AsyncSession) -> bool:
    """Populate ``session``'s database when it has no users.

    Returns ``True`` when data was inserted and ``False`` when the database
    already held users.
    """
    user_service = UserService(session)
    if await user_service.repository.count() > 0:
        logger.info("Database already seeded; skipping")
        return False

    user_ids: dict[str, int] = {}
    for seed_user in SEED_USERS:
        user = await user_service.register_user(
            username=seed_user.username,
            email=seed_user.email,
            password=seed_user.password,
            role=seed_user.role,
        )
        if user.id is None:  # pragma: no cover
            raise ValueError("Seed user was not persisted correctly")
        user_ids[seed_user.username] = user.id

    task_service = TaskService(session)
    now = utcnow()
    for seed_task in SEED_TASKS:
        await task_service.add_task(
            title=seed_task.title,
            description=seed_task.description,
            status=seed_task.status,
            assigned_user_id=user_ids[seed_task.assignee],
            created_at=now - timedelta(days=seed_task.age_days),
        )

    logger.info(
        "Database seeded",
        extra={"users": len(SEED_USERS), "tasks": len(SEED_TASKS)},
    )
    return True


async def seed() -> None:
    """Create the schema if needed and seed the application database."""
    await init_db()
    async with async_session_maker() as session:
        await seed_database(session)


def main() -> None:
    """Entry-point hook for ``python -m`` execution."""
    asyncio.run(seed())


if __name__ == "__main__":  # pragma: no cover - manual execution entry-point
    main()
