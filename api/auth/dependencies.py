"""
Auth dependencies for FastAPI routes.

`get_principal` never rejects a request by itself: it resolves the bearer
token to a `Principal` or None, and the handler's authorization step turns
None into a 403 after the request input has been validated.
"""

from __future__ import annotations

from fastapi import Header

from . import service
from .policy import Principal


def _extract_bearer_token(authorization: str | None) -> str | None:
    raw = (authorization or "").strip()
    if not raw:
        return None

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        return None

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        return None
    return token


async def get_principal(authorization: str | None = Header(default=None)) -> Principal | None:
    token = _extract_bearer_token(authorization)
    if token is None:
        return None
    return await service.principal_from_token(token)
