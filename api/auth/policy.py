"""
Authorization policy.

The acting principal is passed explicitly into every handler; `None` means
no authenticated user. Roles are a closed enumeration and are only ever
inspected here.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from core.errors import Forbidden, Unauthenticated


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"

    @classmethod
    def parse(cls, raw: Any) -> "Role":
        try:
            return cls(str(raw or "").strip().lower())
        except ValueError:
            return cls.USER


class Operation(enum.Enum):
    READ_PUBLIC = "read_public"
    READ_OWN = "read_own"
    WRITE_OWN = "write_own"
    ADMIN_WRITE = "admin_write"


@dataclass(frozen=True)
class Principal:
    id: int
    user_name: str
    email: str
    role: Role

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Principal":
        return cls(
            id=int(row["id"]),
            user_name=str(row["user_name"]),
            email=str(row["email"]),
            role=Role.parse(row.get("role")),
        )


def _role_allows(role: Role, operation: Operation) -> bool:
    if role is Role.ADMIN:
        return True
    if role is Role.USER:
        return operation is not Operation.ADMIN_WRITE
    raise AssertionError(f"Unhandled role: {role!r}")


def can_act(principal: Principal | None, operation: Operation, owner_id: int | None = None) -> bool:
    """
    Decide whether `principal` may perform `operation`.

    `owner_id` is the owning user of the target resource for self-scoped
    operations; None means the query itself is already scoped.
    """
    if operation is Operation.READ_PUBLIC:
        return True
    if principal is None:
        return False
    if not _role_allows(principal.role, operation):
        return False
    if operation in (Operation.READ_OWN, Operation.WRITE_OWN) and owner_id is not None:
        return owner_id == principal.id
    return True


def require_principal(principal: Principal | None) -> Principal:
    if principal is None:
        raise Unauthenticated("token not valid")
    return principal


def authorize(principal: Principal | None, operation: Operation, owner_id: int | None = None) -> Principal:
    """
    Raise unless `principal` may perform `operation`; return the principal.
    """
    actor = require_principal(principal)
    if not can_act(actor, operation, owner_id):
        if operation is Operation.ADMIN_WRITE:
            raise Forbidden("You are not admin")
        raise Forbidden("Not allowed")
    return actor
