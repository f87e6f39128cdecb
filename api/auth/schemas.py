"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    # The username is the account email.
    username: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class LoginUser(BaseModel):
    id: int
    user_name: str
    email: str


class LoginResponse(BaseModel):
    message: str
    token: str
    user: LoginUser
