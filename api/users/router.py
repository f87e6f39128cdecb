"""
User API endpoints.

Static paths (`/users/token`, `/users/current`) are declared before
`/users/{user_id}` so they are not captured as ids.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from auth import dependencies as auth_dependencies
from auth.policy import Principal
from core.errors import ErrorBoundaryRoute
from core.validation import read_body

from . import service

router = APIRouter(route_class=ErrorBoundaryRoute)


@router.get("/users/token")
async def check_token(
    principal: Principal | None = Depends(auth_dependencies.get_principal),
) -> dict:
    return service.check_token(principal)


@router.put("/users/current")
async def update_current_user(
    request: Request,
    principal: Principal | None = Depends(auth_dependencies.get_principal),
) -> dict:
    body, _ = await read_body(request)
    return await service.update_current_user(principal, body)


@router.delete("/users/current")
async def delete_current_user(
    principal: Principal | None = Depends(auth_dependencies.get_principal),
) -> dict:
    return await service.delete_current_user(principal)


@router.get("/users")
async def list_users() -> list:
    return await service.list_users()


@router.post("/users")
async def create_user(request: Request) -> dict:
    body, _ = await read_body(request)
    return await service.create_user(body)


@router.get("/users/{user_id}")
async def get_user(user_id: str) -> dict:
    return await service.get_user(user_id)
