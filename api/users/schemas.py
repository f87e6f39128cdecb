"""
User API schemas (request rules and response shapes).

Passwords are hashed exactly as sent; only names are whitespace-trimmed.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

from auth.policy import Role

UserName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=100)]


class UserCreateRequest(BaseModel):
    user_name: UserName
    email: EmailStr
    password: str = Field(..., min_length=5, max_length=128)
    role: Role | None = None


class UserUpdateRequest(BaseModel):
    # Role changes are not reachable through self-service updates.
    model_config = ConfigDict(extra="forbid")

    user_name: UserName | None = None
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=5, max_length=128)


class UserOutput(BaseModel):
    id: int
    user_name: str
    email: str
