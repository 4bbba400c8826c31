from __future__ import annotations

import pytest
from httpx import AsyncClient

from taskmanager.models import TaskStatus, UserRole

pytestmark = pytest.mark.asyncio


async def test_admin_task_crud_flow(client: AsyncClient, admin, member) -> None:
    created = await client.post(
        "/api/tasks",
        json={
            "title": "Prepare sprint review",
            "description": "Collect demo material.",
            "assignedUserId": member.id,
        },
        headers=admin.headers,
    )
    assert created.status_code == 201
    task = created.json()
    assert set(task) == {
        "id",
        "title",
        "description",
        "status",
        "assignedUserId",
        "assignedUserName",
        "createdAt",
        "updatedAt",
    }
    assert task["status"] == "Pending"
    assert task["assignedUserId"] == member.id
    assert task["assignedUserName"] == "member"
    assert task["updatedAt"] is None

    detail = await client.get(f"/api/tasks/{task['id']}", headers=admin.headers)
    assert detail.status_code == 200
    assert detail.json()["title"] == "Prepare sprint review"

    updated = await client.put(
        f"/api/tasks/{task['id']}",
        json={"title": "Run sprint review", "status": "InProgress", "assignedUserId": admin.id},
        headers=admin.headers,
    )
    assert updated.status_code == 200
    body = updated.json()
    assert body["title"] == "Run sprint review"
    assert body["status"] == "InProgress"
    assert body["assignedUserName"] == "admin"
    assert body["updatedAt"] is not None

    deleted = await client.delete(f"/api/tasks/{task['id']}", headers=admin.headers)
    assert deleted.status_code == 204
    missing = await client.get(f"/api/tasks/{task['id']}", headers=admin.headers)
    assert missing.status_code == 404


async def test_list_is_filtered_by_role(client: AsyncClient, admin, member, user_factory, task_factory) -> None:
    other = await user_factory(username="other")
    own = await task_factory(member, title="Member task")
    foreign = await task_factory(other, title="Other task")
    admin_task = await task_factory(admin, title="Admin task")

    as_admin = await client.get("/api/tasks", headers=admin.headers)
    assert [task["id"] for task in as_admin.json()] == [own.id, foreign.id, admin_task.id]

    as_member = await client.get("/api/tasks", headers=member.headers)
    assert as_member.status_code == 200
    assert [task["id"] for task in as_member.json()] == [own.id]
    assert all(task["assignedUserId"] == member.id for task in as_member.json())


async def test_list_supports_status_and_pagination(client: AsyncClient, admin, member, task_factory) -> None:
    first = await task_factory(member, title="First")
    second = await task_factory(member, title="Second", status=TaskStatus.COMPLETED)
    third = await task_factory(member, title="Third", status=TaskStatus.COMPLETED)

    completed = await client.get("/api/tasks", params={"status": "Completed"}, headers=admin.headers)
    assert [task["id"] for task in completed.json()] == [second.id, third.id]

    page = await client.get("/api/tasks", params={"limit": 1, "offset": 1}, headers=member.headers)
    assert [task["id"] for task in page.json()] == [second.id]

    everything = await client.get("/api/tasks", params={"offset": 0}, headers=member.headers)
    assert [task["id"] for task in everything.json()] == [first.id, second.id, third.id]

    invalid = await client.get("/api/tasks", params={"status": "Archived"}, headers=admin.headers)
    assert invalid.status_code == 400


async def test_foreign_task_is_not_found_for_users(client: AsyncClient, admin, member, task_factory) -> None:
    admin_task = await task_factory(admin, title="Secret")

    response = await client.get(f"/api/tasks/{admin_task.id}", headers=member.headers)
    assert response.status_code == 404
    missing = await client.get("/api/tasks/999999", headers=member.headers)
    assert missing.json()["message"] == response.json()["message"]

    update = await client.put(
        f"/api/tasks/{admin_task.id}",
        json={"status": "Completed"},
        headers=member.headers,
    )
    assert update.status_code == 404


async def test_assignee_can_only_change_status(client: AsyncClient, member, task_factory) -> None:
    task = await task_factory(member, title="Keep this title", description="Keep this too")

    response = await client.put(
        f"/api/tasks/{task.id}",
        json={"title": "New title", "description": "New text", "status": "Completed", "assignedUserId": 1},
        headers=member.headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Keep this title"
    assert body["description"] == "Keep this too"
    assert body["status"] == "Completed"
    assert body["assignedUserId"] == member.id


async def test_users_cannot_create_tasks(client: AsyncClient, member) -> None:
    response = await client.post(
        "/api/tasks",
        json={"title": "Sneaky", "assignedUserId": member.id},
        headers=member.headers,
    )

    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


async def test_users_cannot_delete_tasks(client: AsyncClient, member, task_factory) -> None:
    task = await task_factory(member)

    response = await client.delete(f"/api/tasks/{task.id}", headers=member.headers)
    assert response.status_code == 403
    missing = await client.delete("/api/tasks/999999", headers=member.headers)
    assert missing.status_code == 403


async def test_deleting_missing_task_is_not_found(client: AsyncClient, admin) -> None:
    response = await client.delete("/api/tasks/999999", headers=admin.headers)

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


@pytest.mark.parametrize(
    "body",
    [
        {"title": "", "assignedUserId": 1},
        {"description": "no title", "assignedUserId": 1},
        {"title": "No assignee"},
        {"title": "Bad status", "assignedUserId": 1, "status": "Someday"},
    ],
)
async def test_create_task_validation(client: AsyncClient, admin, body: dict[str, object]) -> None:
    response = await client.post("/api/tasks", json=body, headers=admin.headers)

    assert response.status_code == 400


async def test_create_task_with_unknown_assignee(client: AsyncClient, admin) -> None:
    response = await client.post(
        "/api/tasks",
        json={"title": "Nobody's job", "assignedUserId": 424242},
        headers=admin.headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


async def test_reassigning_to_unknown_user_leaves_task_unchanged(
    client: AsyncClient,
    admin,
    member,
    task_factory,
) -> None:
    task = await task_factory(member, title="Keep")

    response = await client.put(
        f"/api/tasks/{task.id}",
        json={"title": "X", "assignedUserId": 99999},
        headers=admin.headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert response.json()["message"] == "Assigned user does not exist."

    stored = await client.get(f"/api/tasks/{task.id}", headers=admin.headers)
    assert stored.json()["title"] == "Keep"
    assert stored.json()["assignedUserId"] == member.id


async def test_timestamps_are_serialised_in_utc(client: AsyncClient, admin, member, task_factory) -> None:
    task = await task_factory(member)

    updated = await client.put(
        f"/api/tasks/{task.id}",
        json={"status": "Completed"},
        headers=admin.headers,
    )
    profile = await client.get(f"/api/users/{member.id}", headers=admin.headers)

    assert updated.status_code == 200
    for value in (updated.json()["createdAt"], updated.json()["updatedAt"], profile.json()["createdAt"]):
        assert value.endswith(("Z", "+00:00")), value


async def test_empty_update_is_rejected(client: AsyncClient, admin, member, task_factory) -> None:
    task = await task_factory(member)

    response = await client.put(f"/api/tasks/{task.id}", json={}, headers=admin.headers)
    assert response.status_code == 400


async def test_snake_case_payloads_are_accepted(client: AsyncClient, admin, member) -> None:
    response = await client.post(
        "/api/tasks",
        json={"title": "Snake", "assigned_user_id": member.id},
        headers=admin.headers,
    )

    assert response.status_code == 201
    assert response.json()["assignedUserId"] == member.id


async def test_seeded_user_scenario(client: AsyncClient, session) -> None:
    from taskmanager.db.seed import seed_database

    await seed_database(session)

    login = await client.post("/api/auth/login", json={"username": "user", "password": "User123!"})
    assert login.status_code == 200
    assert login.json()["user"]["role"] == UserRole.USER.value
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    tasks = await client.get("/api/tasks", headers=headers)
    assert tasks.status_code == 200
    titles = [task["title"] for task in tasks.json()]
    assert titles == ["Create User Dashboard", "Add Task Filtering"]

    created = await client.post(
        "/api/tasks",
        json={"title": "Not allowed", "assignedUserId": login.json()["user"]["id"]},
        headers=headers,
    )
    assert created.status_code == 403
