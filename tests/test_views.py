from __future__ import annotations

import re

import pytest
from httpx import AsyncClient

from taskmanager.models import TaskStatus

pytestmark = pytest.mark.asyncio

CSRF_PATTERN = re.compile(r'name="csrf_token" value="([^"]+)"')


async def _csrf_token(client: AsyncClient, path: str) -> str:
    response = await client.get(path)
    assert response.status_code == 200, response.text
    match = CSRF_PATTERN.search(response.text)
    assert match is not None, "Expected a CSRF token in the rendered page"
    return match.group(1)


async def _sign_in(client: AsyncClient, username: str, password: str) -> None:
    token = await _csrf_token(client, "/auth/login")
    response = await client.post(
        "/auth/login",
        data={"username": username, "password": password, "csrf_token": token},
    )
    assert response.status_code == 303, response.text
    assert response.headers["location"].endswith("/")


async def test_anonymous_visitors_are_sent_to_login(client: AsyncClient) -> None:
    dashboard = await client.get("/")
    assert dashboard.status_code == 303
    assert dashboard.headers["location"].endswith("/auth/login")

    tasks = await client.get("/tasks")
    assert tasks.status_code == 303
    assert tasks.headers["location"].endswith("/auth/login")


async def test_login_with_bad_password_rerenders_form(client: AsyncClient, member) -> None:
    token = await _csrf_token(client, "/auth/login")

    response = await client.post(
        "/auth/login",
        data={"username": member.username, "password": "nope", "csrf_token": token},
    )

    assert response.status_code == 400
    assert "Invalid username or password." in response.text


async def test_login_requires_csrf_token(client: AsyncClient, member) -> None:
    response = await client.post(
        "/auth/login",
        data={"username": member.username, "password": member.password},
    )

    assert response.status_code == 400
    assert "The form has expired" in response.text


async def test_dashboard_summarises_visible_tasks(client: AsyncClient, admin, member, task_factory) -> None:
    await task_factory(member, title="Member only", status=TaskStatus.IN_PROGRESS)
    await task_factory(admin, title="Admin only")

    await _sign_in(client, member.username, member.password)
    response = await client.get("/")

    assert response.status_code == 200
    assert "Welcome back, member!" in response.text
    assert "Member only" in response.text
    assert "Admin only" not in response.text


async def test_member_sees_only_own_tasks_and_can_change_status(
    client: AsyncClient,
    session,
    admin,
    member,
    task_factory,
) -> None:
    own = await task_factory(member, title="Member chore")
    foreign = await task_factory(admin, title="Admin chore")
    await _sign_in(client, member.username, member.password)

    listing = await client.get("/tasks")
    assert listing.status_code == 200
    assert "Member chore" in listing.text
    assert "Admin chore" not in listing.text
    assert "New task" not in listing.text

    token = CSRF_PATTERN.search(listing.text).group(1)
    response = await client.post(
        f"/tasks/{own.id}/edit",
        data={"status": "Completed", "title": "Renamed", "csrf_token": token},
    )
    assert response.status_code == 303

    await session.refresh(own)
    assert own.status is TaskStatus.COMPLETED
    assert own.title == "Member chore"

    hidden = await client.post(
        f"/tasks/{foreign.id}/edit",
        data={"status": "Completed", "csrf_token": token},
    )
    assert hidden.status_code == 303
    await session.refresh(foreign)
    assert foreign.status is TaskStatus.PENDING


async def test_admin_creates_and_deletes_tasks(client: AsyncClient, session, admin, member) -> None:
    await _sign_in(client, admin.username, admin.password)
    token = await _csrf_token(client, "/tasks/new")

    created = await client.post(
        "/tasks/new",
        data={
            "title": "Plan retrospective",
            "description": "Book a room.",
            "status": "Pending",
            "assigned_user_id": str(member.id),
            "csrf_token": token,
        },
    )
    assert created.status_code == 303
    listing = await client.get("/tasks")
    assert "Plan retrospective" in listing.text
    assert "Task created." in listing.text

    tasks = await client.get("/api/tasks", headers=admin.headers)
    task_id = tasks.json()[0]["id"]
    deleted = await client.post(f"/tasks/{task_id}/delete", data={"csrf_token": token})
    assert deleted.status_code == 303
    after = await client.get("/api/tasks", headers=admin.headers)
    assert after.json() == []


async def test_task_form_validation_errors(client: AsyncClient, admin, member) -> None:
    await _sign_in(client, admin.username, admin.password)
    token = await _csrf_token(client, "/tasks/new")

    response = await client.post(
        "/tasks/new",
        data={"title": "", "status": "Pending", "assigned_user_id": str(member.id), "csrf_token": token},
    )

    assert response.status_code == 400
    assert "Title is required." in response.text


async def test_invalid_edit_of_deleted_task_redirects_to_list(
    client: AsyncClient,
    admin,
    member,
    task_factory,
) -> None:
    task = await task_factory(member, title="Short lived")
    await _sign_in(client, admin.username, admin.password)
    token = await _csrf_token(client, f"/tasks/{task.id}/edit")
    deleted = await client.delete(f"/api/tasks/{task.id}", headers=admin.headers)
    assert deleted.status_code == 204

    response = await client.post(
        f"/tasks/{task.id}/edit",
        data={"title": "", "status": "Pending", "assigned_user_id": str(member.id), "csrf_token": token},
    )

    assert response.status_code == 303
    assert response.headers["location"].endswith("/tasks")
    listing = await client.get("/tasks")
    assert "Task not found." in listing.text


async def test_forms_without_csrf_are_rejected(client: AsyncClient, admin, member) -> None:
    await _sign_in(client, admin.username, admin.password)

    response = await client.post(
        "/tasks/new",
        data={"title": "Forged", "status": "Pending", "assigned_user_id": str(member.id)},
    )

    assert response.status_code == 303
    tasks = await client.get("/api/tasks", headers=admin.headers)
    assert tasks.json() == []


async def test_user_pages_are_admin_only(client: AsyncClient, member) -> None:
    await _sign_in(client, member.username, member.password)

    response = await client.get("/users")
    assert response.status_code == 303
    assert response.headers["location"].endswith("/")

    dashboard = await client.get("/")
    assert "Only administrators can manage users." in dashboard.text


async def test_admin_manages_users_through_forms(client: AsyncClient, admin) -> None:
    await _sign_in(client, admin.username, admin.password)
    token = await _csrf_token(client, "/users/new")

    created = await client.post(
        "/users/new",
        data={
            "username": "lena",
            "email": "lena@example.com",
            "password": "Lena123!",
            "role": "User",
            "csrf_token": token,
        },
    )
    assert created.status_code == 303

    listing = await client.get("/users")
    assert listing.status_code == 200
    assert "lena@example.com" in listing.text

    duplicate = await client.post(
        "/users/new",
        data={
            "username": "lena",
            "email": "other@example.com",
            "password": "Lena123!",
            "role": "User",
            "csrf_token": token,
        },
    )
    assert duplicate.status_code == 400
    assert "Username is already taken." in duplicate.text


async def test_profile_updates_own_account(client: AsyncClient, member) -> None:
    await _sign_in(client, member.username, member.password)
    token = await _csrf_token(client, "/profile")

    response = await client.post(
        "/profile",
        data={"username": "member-renamed", "email": "renamed@example.com", "role": "Admin", "csrf_token": token},
    )
    assert response.status_code == 303

    profile = await client.get(f"/api/users/{member.id}", headers=member.headers)
    assert profile.json()["username"] == "member-renamed"
    assert profile.json()["email"] == "renamed@example.com"
    assert profile.json()["role"] == "User"


async def test_logout_clears_session(client: AsyncClient, member) -> None:
    await _sign_in(client, member.username, member.password)
    token = await _csrf_token(client, "/")

    response = await client.post("/auth/logout", data={"csrf_token": token})
    assert response.status_code == 303
    assert response.headers["location"].endswith("/auth/login")

    dashboard = await client.get("/")
    assert dashboard.status_code == 303
