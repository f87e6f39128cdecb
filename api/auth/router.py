"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Request

from core.errors import ErrorBoundaryRoute
from core.validation import read_body

from . import schemas, service

router = APIRouter(route_class=ErrorBoundaryRoute)


@router.post("/auth/login", response_model=schemas.LoginResponse)
async def login(request: Request) -> schemas.LoginResponse:
    body, _ = await read_body(request)
    return await service.login(body)
