"""
User persistence (raw SQL).

Email uniqueness is enforced by the `users_email_key` constraint; a
duplicate insert surfaces as `StoreFailure` from `core.db`.
"""

from __future__ import annotations

from typing import Any

try:
    from core import db
except ModuleNotFoundError:
    from api.core import db

# Columns a caller may patch; anything else is dropped before SQL is built.
UPDATABLE_COLUMNS = ("user_name", "email", "password", "role")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def find_by_id(user_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT id, user_name, email, role, password
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def find_by_email(email: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT id, user_name, email, role, password
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def find_all() -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT id, user_name, email, role
        FROM users
        ORDER BY id ASC
        """
    )


async def create(*, user_name: str, email: str, password_hash: str, role: str) -> dict[str, Any]:
    row = await db.fetch_one(
        """
        INSERT INTO users (user_name, email, password, role)
        VALUES ($1, $2, $3, $4)
        RETURNING id, user_name, email, role
        """,
        user_name,
        normalize_email(email),
        password_hash,
        role,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def update_by_id(user_id: int, patch: dict[str, Any]) -> dict[str, Any] | None:
    """
    Apply `patch` in a single UPDATE and return the updated row (or None).
    """
    columns = [c for c in UPDATABLE_COLUMNS if c in patch]
    if not columns:
        return await find_by_id(user_id)

    values = [normalize_email(patch[c]) if c == "email" else patch[c] for c in columns]
    assignments = ", ".join(f"{c} = ${i}" for i, c in enumerate(columns, start=2))
    return await db.fetch_one(
        f"""
        UPDATE users
        SET {assignments}
        WHERE id = $1
        RETURNING id, user_name, email, role
        """,
        user_id,
        *values,
    )


async def delete_by_id(user_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        DELETE FROM users
        WHERE id = $1
        RETURNING id, user_name, email, role
        """,
        user_id,
    )
