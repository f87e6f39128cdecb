"""Shared fixtures: an in-memory store patched over the repositories."""
from __future__ import annotations

import copy
from typing import Any

import pytest
from fastapi.testclient import TestClient

from auth import dependencies as auth_dependencies
from auth import security
from auth.policy import Principal, Role
from cats import repository as cat_repository
from core.errors import StoreFailure
from main import app
from users import repository as user_repository


class FakeStore:
    """Just enough of the PostGIS-backed repositories to drive the handlers."""

    def __init__(self) -> None:
        self.users: dict[int, dict[str, Any]] = {}
        self.cats: dict[int, dict[str, Any]] = {}
        self._next_user = 1
        self._next_cat = 1
        self.calls: list[str] = []

    # users

    def _public_user(self, row: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in row.items() if k != "password"}

    async def user_find_by_id(self, user_id: int) -> dict[str, Any] | None:
        row = self.users.get(user_id)
        return dict(row) if row is not None else None

    async def user_find_by_email(self, email: str) -> dict[str, Any] | None:
        for row in self.users.values():
            if row["email"] == email.strip().lower():
                return dict(row)
        return None

    async def user_find_all(self) -> list[dict[str, Any]]:
        return [self._public_user(row) for row in self.users.values()]

    async def user_create(self, *, user_name: str, email: str, password_hash: str, role: str) -> dict[str, Any]:
        email = email.strip().lower()
        if any(row["email"] == email for row in self.users.values()):
            raise StoreFailure('duplicate key value violates unique constraint "users_email_key"')
        row = {
            "id": self._next_user,
            "user_name": user_name,
            "email": email,
            "role": role,
            "password": password_hash,
        }
        self.users[row["id"]] = row
        self._next_user += 1
        return self._public_user(row)

    async def user_update_by_id(self, user_id: int, patch: dict[str, Any]) -> dict[str, Any] | None:
        row = self.users.get(user_id)
        if row is None:
            return None
        row.update({k: v for k, v in patch.items() if k in user_repository.UPDATABLE_COLUMNS})
        return self._public_user(row)

    async def user_delete_by_id(self, user_id: int) -> dict[str, Any] | None:
        row = self.users.pop(user_id, None)
        if row is None:
            return None
        self.cats = {k: v for k, v in self.cats.items() if v["owner"] != user_id}
        return self._public_user(row)

    # cats

    def _out(self, row: dict[str, Any], populate: bool) -> dict[str, Any]:
        cat = copy.deepcopy(row)
        if populate:
            owner = self.users[row["owner"]]
            cat["owner"] = {"id": owner["id"], "user_name": owner["user_name"], "email": owner["email"]}
        return cat

    async def cat_find_by_id(self, cat_id: int, *, populate: bool = False) -> dict[str, Any] | None:
        row = self.cats.get(cat_id)
        return self._out(row, populate) if row is not None else None

    async def cat_find_all(self, *, populate: bool = False) -> list[dict[str, Any]]:
        return [self._out(row, populate) for row in self.cats.values()]

    async def cat_find_by_owner(self, owner_id: int, *, populate: bool = False) -> list[dict[str, Any]]:
        return [self._out(row, populate) for row in self.cats.values() if row["owner"] == owner_id]

    async def cat_find_within_region(self, polygon: dict[str, Any]) -> list[dict[str, Any]]:
        ring = polygon["coordinates"][0]
        lngs = [p[0] for p in ring]
        lats = [p[1] for p in ring]
        found = []
        for row in self.cats.values():
            if row["location"] is None:
                continue
            lng, lat = row["location"]["coordinates"]
            if min(lngs) <= lng <= max(lngs) and min(lats) <= lat <= max(lats):
                found.append(self._out(row, False))
        return found

    async def cat_create(self, *, owner: int, **fields: Any) -> dict[str, Any]:
        if owner not in self.users:
            raise StoreFailure('insert or update on table "cats" violates foreign key constraint')
        row = {"id": self._next_cat, "owner": owner, **fields}
        self.cats[row["id"]] = row
        self._next_cat += 1
        return self._out(row, False)

    async def cat_update_by_id(
        self,
        cat_id: int,
        patch: dict[str, Any],
        *,
        owner_id: int | None = None,
        populate: bool = False,
    ) -> dict[str, Any] | None:
        row = self.cats.get(cat_id)
        if row is None or (owner_id is not None and row["owner"] != owner_id):
            return None
        row.update({k: v for k, v in patch.items() if k in cat_repository.UPDATABLE_COLUMNS})
        return self._out(row, populate)

    async def cat_delete_by_id(
        self,
        cat_id: int,
        *,
        owner_id: int | None = None,
        populate: bool = False,
    ) -> dict[str, Any] | None:
        self.calls.append(f"delete:{cat_id}")
        row = self.cats.get(cat_id)
        if row is None or (owner_id is not None and row["owner"] != owner_id):
            return None
        out = self._out(row, populate)
        del self.cats[cat_id]
        return out

    # helpers for arranging tests

    def add_user(self, user_name: str, email: str, role: Role = Role.USER, password: str = "secret") -> Principal:
        row = {
            "id": self._next_user,
            "user_name": user_name,
            "email": email,
            "role": role.value,
            "password": security.hash_password(password),
        }
        self.users[row["id"]] = row
        self._next_user += 1
        return Principal.from_row(row)

    def add_cat(self, owner: Principal, name: str = "Miso", location: tuple[float, float] | None = None) -> int:
        row = {
            "id": self._next_cat,
            "cat_name": name,
            "weight": 4.2,
            "filename": "miso.jpg",
            "birthdate": "2020-05-01",
            "location": {"type": "Point", "coordinates": list(location)} if location else None,
            "owner": owner.id,
        }
        self.cats[row["id"]] = row
        self._next_cat += 1
        return row["id"]


@pytest.fixture(autouse=True)
def _fast_bcrypt(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> FakeStore:
    fake = FakeStore()
    for name in ("find_by_id", "find_by_email", "find_all", "create", "update_by_id", "delete_by_id"):
        monkeypatch.setattr(user_repository, name, getattr(fake, f"user_{name}"))
    for name in (
        "find_by_id",
        "find_all",
        "find_by_owner",
        "find_within_region",
        "create",
        "update_by_id",
        "delete_by_id",
    ):
        monkeypatch.setattr(cat_repository, name, getattr(fake, f"cat_{name}"))
    return fake


@pytest.fixture
def client(store: FakeStore):
    # No `with`: the lifespan (and its DB pool) is not started.
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def act_as():
    """Inject the acting principal (or None) without going through tokens."""

    def _act_as(principal: Principal | None) -> None:
        async def _principal() -> Principal | None:
            return principal

        app.dependency_overrides[auth_dependencies.get_principal] = _principal

    yield _act_as
    app.dependency_overrides.clear()
