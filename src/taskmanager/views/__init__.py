"""Server-rendered pages sharing the API's services and authorization policy."""

from __future__ import annotations

from fastapi import APIRouter

from . import auth, pages, tasks, users

router = APIRouter(include_in_schema=False)
router.include_router(pages.router)
router.include_router(auth.router, prefix="/auth")
router.include_router(tasks.router, prefix="/tasks")
router.include_router(users.router)

__all__ = ["router"]
