from __future__ import annotations

from datetime import timedelta

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from taskmanager.core.permissions import Actor
from taskmanager.db.seed import SEED_TASKS, seed_database
from taskmanager.models import TaskStatus, UserRole, utcnow
from taskmanager.services import AuthService, TaskService, UserService

pytestmark = pytest.mark.asyncio


async def test_seed_populates_empty_database(session: AsyncSession, settings) -> None:
    assert await seed_database(session) is True

    admin = await AuthService(session, settings).authenticate("admin", "Admin123!")
    user = await AuthService(session, settings).authenticate("user", "User123!")
    assert admin.role is UserRole.ADMIN
    assert admin.email == "admin@taskmanagement.com"
    assert user.role is UserRole.USER
    assert user.email == "user@taskmanagement.com"

    tasks = await TaskService(session).list_tasks(Actor.from_user(admin))
    assert [(task.title, task.status, task.assigned_user_name) for task in tasks] == [
        ("Implement Authentication", TaskStatus.COMPLETED, "admin"),
        ("Create User Dashboard", TaskStatus.IN_PROGRESS, "user"),
        ("Add Task Filtering", TaskStatus.PENDING, "user"),
    ]
    now = utcnow().replace(tzinfo=None)
    for task, seed_task in zip(tasks, SEED_TASKS):
        created_at = task.created_at.replace(tzinfo=None)
        assert abs((now - created_at) - timedelta(days=seed_task.age_days)) < timedelta(minutes=5)


async def test_seed_is_idempotent(session: AsyncSession) -> None:
    assert await seed_database(session) is True
    assert await seed_database(session) is False

    assert await UserService(session).repository.count() == 2
