from __future__ import annotations

import os

os.environ.setdefault("TASKMANAGER_ENVIRONMENT", "test")
os.environ.setdefault("TASKMANAGER_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncIterator, Awaitable, Callable  # noqa: E402
from dataclasses import dataclass  # noqa: E402
from itertools import count  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from taskmanager import models  # noqa: E402,F401
from taskmanager.core.config import Settings, get_settings  # noqa: E402
from taskmanager.core.permissions import Actor  # noqa: E402
from taskmanager.deps import get_db_session  # noqa: E402
from taskmanager.main import create_app  # noqa: E402
from taskmanager.models import Task, TaskStatus, User, UserRole  # noqa: E402
from taskmanager.services import TaskService, UserService  # noqa: E402

DEFAULT_PASSWORD = "StrongPass123!"


@dataclass(slots=True)
class AuthenticatedUser:
    user: User
    username: str
    password: str
    token: str | None

    @property
    def id(self) -> int:
        if self.user.id is None:  # pragma: no cover
            raise RuntimeError("Persisted user is missing an id.")
        return self.user.id

    @property
    def actor(self) -> Actor:
        return Actor.from_user(self.user)

    @property
    def headers(self) -> dict[str, str]:
        if not self.token:
            raise RuntimeError("User has not been authenticated.")
        return {"Authorization": f"Bearer {self.token}"}


UserFactory = Callable[..., Awaitable[AuthenticatedUser]]
TaskFactory = Callable[..., Awaitable[Task]]


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


@pytest_asyncio.fixture
async def app(session: AsyncSession, settings: Settings) -> AsyncIterator[FastAPI]:
    application = create_app(settings)

    async def _override_db_session() -> AsyncIterator[AsyncSession]:
        yield session

    application.dependency_overrides[get_db_session] = _override_db_session
    try:
        yield application
    finally:
        application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def user_factory(session: AsyncSession, client: AsyncClient) -> UserFactory:
    user_service = UserService(session)
    counter = count()

    async def _factory(
        *,
        username: str | None = None,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        role: UserRole = UserRole.USER,
        login: bool = True,
    ) -> AuthenticatedUser:
        index = next(counter)
        actual_username = username or f"user{index}"
        user = await user_service.register_user(
            username=actual_username,
            email=email or f"{actual_username}@example.com",
            password=password,
            role=role,
        )
        token: str | None = None
        if login:
            response = await client.post(
                "/api/auth/login",
                json={"username": actual_username, "password": password},
            )
            assert response.status_code == 200, response.text
            token = response.json()["token"]
        return AuthenticatedUser(user=user, username=actual_username, password=password, token=token)

    return _factory


@pytest_asyncio.fixture
async def admin(user_factory: UserFactory) -> AuthenticatedUser:
    return await user_factory(username="admin", role=UserRole.ADMIN)


@pytest_asyncio.fixture
async def member(user_factory: UserFactory) -> AuthenticatedUser:
    return await user_factory(username="member")


@pytest_asyncio.fixture
async def task_factory(session: AsyncSession) -> TaskFactory:
    task_service = TaskService(session)

    async def _factory(
        assignee: AuthenticatedUser,
        *,
        title: str = "Write release notes",
        description: str | None = None,
        status: TaskStatus = TaskStatus.PENDING,
    ) -> Task:
        return await task_service.add_task(
            title=title,
            description=description,
            status=status,
            assigned_user_id=assignee.id,
        )

    return _factory
