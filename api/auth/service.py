"""
Auth business logic: login and principal resolution.
"""

from __future__ import annotations

import logging
from typing import Any

from core.errors import Unauthenticated
from core.validation import require_valid
from users import repository as user_repository

from . import schemas, security
from .policy import Principal

logger = logging.getLogger(__name__)


async def login(body: Any) -> schemas.LoginResponse:
    payload = require_valid(schemas.LoginRequest, body)

    user_row = await user_repository.find_by_email(payload.username)
    if user_row is None:
        raise Unauthenticated("Incorrect username/password")

    is_valid = security.verify_password(payload.password, str(user_row.get("password") or ""))
    if not is_valid:
        logger.info("login_failed user_id=%s", user_row["id"])
        raise Unauthenticated("Incorrect username/password")

    token = security.build_access_token(int(user_row["id"]))
    return schemas.LoginResponse(
        message="Login successful",
        token=token,
        user=schemas.LoginUser(
            id=int(user_row["id"]),
            user_name=str(user_row["user_name"]),
            email=str(user_row["email"]),
        ),
    )


async def principal_from_token(access_token: str) -> Principal | None:
    """
    Resolve a bearer token to the acting principal.

    Any token problem (bad signature, expiry, unknown user) yields None;
    handlers decide whether a missing principal is an error.
    """
    try:
        user_id = security.token_subject(access_token)
    except security.AuthSecurityError:
        return None

    user_row = await user_repository.find_by_id(user_id)
    if user_row is None:
        return None
    return Principal.from_row(user_row)
