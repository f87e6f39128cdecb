"""
Cat API endpoints.

`/cats/user` and `/cats/area` are declared before `/cats/{cat_id}` so they
are not captured as ids.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from auth import dependencies as auth_dependencies
from auth.policy import Principal
from core.errors import ErrorBoundaryRoute
from core.validation import read_body

from . import service

router = APIRouter(route_class=ErrorBoundaryRoute)


@router.get("/cats/user")
async def list_own_cats(
    principal: Principal | None = Depends(auth_dependencies.get_principal),
) -> list:
    return await service.list_own_cats(principal)


@router.get("/cats/area")
async def list_cats_in_area(request: Request) -> list:
    return await service.list_cats_in_area(dict(request.query_params))


@router.get("/cats")
async def list_cats() -> list:
    return await service.list_cats()


@router.post("/cats")
async def create_cat(
    request: Request,
    principal: Principal | None = Depends(auth_dependencies.get_principal),
) -> dict:
    """
    Create a cat from a JSON or multipart body; a multipart `cat` file is
    stored and used for `filename` (and EXIF location) when absent.
    """
    body, upload = await read_body(request, file_field="cat")
    return await service.create_cat(principal, body, upload)


@router.get("/cats/{cat_id}")
async def get_cat(cat_id: str) -> dict:
    return await service.get_cat(cat_id)


@router.put("/cats/{cat_id}/admin")
async def update_cat_admin(
    cat_id: str,
    request: Request,
    principal: Principal | None = Depends(auth_dependencies.get_principal),
) -> dict:
    body, _ = await read_body(request)
    return await service.update_cat_admin(principal, cat_id, body)


@router.put("/cats/{cat_id}")
async def update_cat(
    cat_id: str,
    request: Request,
    principal: Principal | None = Depends(auth_dependencies.get_principal),
) -> dict:
    body, _ = await read_body(request)
    return await service.update_cat(principal, cat_id, body)


@router.delete("/cats/{cat_id}/admin")
async def delete_cat_admin(
    cat_id: str,
    principal: Principal | None = Depends(auth_dependencies.get_principal),
) -> dict:
    return await service.delete_cat_admin(principal, cat_id)


@router.delete("/cats/{cat_id}")
async def delete_cat(
    cat_id: str,
    principal: Principal | None = Depends(auth_dependencies.get_principal),
) -> dict:
    return await service.delete_cat(principal, cat_id)
