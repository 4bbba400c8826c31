"""Role and ownership rules deciding what an authenticated actor may do.

The rules are expressed as a pure :func:`evaluate` function so they can be
exercised without a database; :func:`authorize` turns a negative decision into
the matching domain error for the HTTP boundary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping

from ..errors import ForbiddenError, NotFoundError
from ..models.user import UserRole

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..models import User

logger = logging.getLogger(__name__)


class Action(str, Enum):
    """Operations guarded by the policy."""

    LIST_TASKS = "tasks:list"
    READ_TASK = "tasks:read"
    CREATE_TASK = "tasks:create"
    UPDATE_TASK = "tasks:update"
    DELETE_TASK = "tasks:delete"
    LIST_USERS = "users:list"
    READ_USER = "users:read"
    CREATE_USER = "users:create"
    UPDATE_USER = "users:update"
    CHANGE_USER_ROLE = "users:change_role"
    DELETE_USER = "users:delete"


class Decision(str, Enum):
    """Outcome of evaluating an action for an actor."""

    ALLOW = "allow"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class Actor:
    """The authenticated principal on whose behalf a request runs."""

    id: int
    role: UserRole
    username: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    @classmethod
    def from_user(cls, user: "User") -> "Actor":
        if user.id is None:
            raise ValueError("Only persisted users can act.")
        return cls(id=user.id, role=user.role, username=user.username)


_ADMIN_ONLY = frozenset(
    {
        Action.CREATE_TASK,
        Action.DELETE_TASK,
        Action.LIST_USERS,
        Action.CREATE_USER,
        Action.CHANGE_USER_ROLE,
        Action.DELETE_USER,
    }
)
# Owner mismatch is reported as missing so task ids do not leak.
_HIDDEN_WHEN_NOT_OWNER = frozenset({Action.READ_TASK, Action.UPDATE_TASK})
_SELF_ONLY = frozenset({Action.READ_USER, Action.UPDATE_USER})

USER_EDITABLE_TASK_FIELDS = frozenset({"status"})


def evaluate(actor: Actor, action: Action, owner_id: int | None = None) -> Decision:
    """Return the decision for ``actor`` performing ``action``.

    ``owner_id`` is the assignee of the task, or the id of the user record,
    the action targets.
    """

    if actor.is_admin:
        return Decision.ALLOW
    if action is Action.LIST_TASKS:
        return Decision.ALLOW
    if action in _ADMIN_ONLY:
        return Decision.FORBIDDEN
    if action in _HIDDEN_WHEN_NOT_OWNER:
        return Decision.ALLOW if owner_id == actor.id else Decision.NOT_FOUND
    if action in _SELF_ONLY:
        return Decision.ALLOW if owner_id == actor.id else Decision.FORBIDDEN
    return Decision.FORBIDDEN


def authorize(actor: Actor, action: Action, owner_id: int | None = None) -> None:
    """Raise the domain error matching a negative :func:`evaluate` decision."""

    decision = evaluate(actor, action, owner_id)
    if decision is not Decision.ALLOW:
        logger.warning(
            "Action denied",
            extra={
                "actor_id": actor.id,
                "action": action.value,
                "owner_id": owner_id,
                "decision": decision.value,
            },
        )
    if decision is Decision.NOT_FOUND:
        raise NotFoundError("Task not found.")
    if decision is Decision.FORBIDDEN:
        raise ForbiddenError()


def task_visibility(actor: Actor) -> int | None:
    """Return the only assignee id whose tasks ``actor`` may list, ``None`` for all."""

    return None if actor.is_admin else actor.id


def permitted_task_changes(
    actor: Actor,
    changes: Mapping[str, Any],
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split ``changes`` into the fields ``actor`` may apply and those to ignore."""

    if actor.is_admin:
        return dict(changes), {}
    applied = {key: value for key, value in changes.items() if key in USER_EDITABLE_TASK_FIELDS}
    ignored = {key: value for key, value in changes.items() if key not in USER_EDITABLE_TASK_FIELDS}
    return applied, ignored


__all__ = [
    "Action",
    "Actor",
    "Decision",
    "USER_EDITABLE_TASK_FIELDS",
    "authorize",
    "evaluate",
    "permitted_task_changes",
    "task_visibility",
]
