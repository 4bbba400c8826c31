"""User administration endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from ...deps import CurrentActorDependency, UserServiceDependency
from ...schemas import UserCreate, UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserRead], summary="List all users (admin only)")
async def list_users(actor: CurrentActorDependency, service: UserServiceDependency) -> list[UserRead]:
    users = await service.list_users(actor)
    return [UserRead.model_validate(user) for user in users]


@router.get("/{user_id}", response_model=UserRead, summary="Retrieve a user")
async def read_user(
    user_id: int,
    actor: CurrentActorDependency,
    service: UserServiceDependency,
) -> UserRead:
    user = await service.get_user(actor, user_id)
    return UserRead.model_validate(user)


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user (admin only)",
)
async def create_user(
    payload: UserCreate,
    actor: CurrentActorDependency,
    service: UserServiceDependency,
) -> UserRead:
    user = await service.create_user(
        actor,
        username=payload.username,
        email=str(payload.email),
        password=payload.password,
        role=payload.role,
    )
    return UserRead.model_validate(user)


@router.put("/{user_id}", response_model=UserRead, summary="Update a user")
async def update_user(
    user_id: int,
    payload: UserUpdate,
    actor: CurrentActorDependency,
    service: UserServiceDependency,
) -> UserRead:
    user = await service.update_user(
        actor,
        user_id,
        username=payload.username,
        email=str(payload.email) if payload.email is not None else None,
        role=payload.role,
    )
    return UserRead.model_validate(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a user and their tasks (admin only)",
)
async def delete_user(
    user_id: int,
    actor: CurrentActorDependency,
    service: UserServiceDependency,
) -> Response:
    await service.delete_user(actor, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
