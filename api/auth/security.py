"""
Auth security helpers: password hashing and access tokens.
"""

from __future__ import annotations

import os
import time
from typing import Any

import bcrypt
import jwt


class AuthSecurityError(RuntimeError):
    pass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return os.environ.get("JWT_SECRET", "dev-change-this-secret").strip() or "dev-change-this-secret"


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG", "HS256").strip() or "HS256"


def access_token_expire_minutes() -> int:
    return _env_int("ACCESS_TOKEN_EXPIRE_MIN", 60)


def bcrypt_rounds() -> int:
    return _env_int("BCRYPT_ROUNDS", 12)


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=bcrypt_rounds())).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_access_token(user_id: int) -> str:
    """
    Sign a short-lived token whose subject is the user id; the user row is
    re-read on every request, so nothing else goes into the claims.
    """
    issued_at = int(time.time())
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": issued_at,
        "exp": issued_at + access_token_expire_minutes() * 60,
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != "access":
        raise AuthSecurityError("Token is not an access token.")

    return payload


def token_subject(token: str) -> int:
    """
    Decode a token and return its user id.
    """
    subject = str(decode_access_token(token).get("sub") or "").strip()
    if not subject.isdigit():
        raise AuthSecurityError("Invalid access token subject.")
    return int(subject)
