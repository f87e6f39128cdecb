"""
User handlers: validate -> authorize -> repository -> envelope.

Passwords are hashed before they reach the repository and are stripped from
every row before it leaves this module.
"""

from __future__ import annotations

import logging
from typing import Any

from auth import security
from auth.policy import Operation, Principal, Role, authorize
from core.errors import NotFound
from core.responses import envelope
from core.validation import parse_id, require_valid

from . import repository, schemas

logger = logging.getLogger(__name__)


def to_user_output(row: dict[str, Any]) -> dict[str, Any]:
    return schemas.UserOutput(
        id=int(row["id"]),
        user_name=str(row["user_name"]),
        email=str(row["email"]),
    ).model_dump()


async def create_user(body: Any) -> dict[str, Any]:
    payload = require_valid(schemas.UserCreateRequest, body)
    role = payload.role or Role.USER
    row = await repository.create(
        user_name=payload.user_name,
        email=payload.email,
        password_hash=security.hash_password(payload.password),
        role=role.value,
    )
    logger.info("user_created user_id=%s role=%s", row["id"], role.value)
    return envelope("User created", to_user_output(row))


async def get_user(raw_id: str) -> dict[str, Any]:
    user_id = parse_id(raw_id)
    row = await repository.find_by_id(user_id)
    if row is None:
        raise NotFound("User not found")
    return to_user_output(row)


async def list_users() -> list[dict[str, Any]]:
    rows = await repository.find_all()
    return [to_user_output(row) for row in rows]


async def update_current_user(principal: Principal | None, body: Any) -> dict[str, Any]:
    payload = require_valid(schemas.UserUpdateRequest, body)
    actor = authorize(principal, Operation.WRITE_OWN)

    patch = payload.model_dump(exclude_none=True)
    if "password" in patch:
        patch["password"] = security.hash_password(patch["password"])

    row = await repository.update_by_id(actor.id, patch)
    if row is None:
        raise NotFound("User not found")
    return envelope("User updated", to_user_output(row))


async def delete_current_user(principal: Principal | None) -> dict[str, Any]:
    actor = authorize(principal, Operation.WRITE_OWN)
    row = await repository.delete_by_id(actor.id)
    if row is None:
        raise NotFound("User not found")
    logger.info("user_deleted user_id=%s", actor.id)
    return envelope("User deleted", to_user_output(row))


def check_token(principal: Principal | None) -> dict[str, Any]:
    actor = authorize(principal, Operation.READ_OWN)
    return {"id": actor.id, "user_name": actor.user_name, "email": actor.email}
