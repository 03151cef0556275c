"""
User API schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class UserUpdateRequest(BaseModel):
    id: str = Field(..., min_length=1)
    token: str | None = None
    username: str = Field(..., max_length=64)
    password: str = Field(..., max_length=128)
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    email: str = Field(..., max_length=320)
    biography: str | None = Field(default=None, max_length=2000)


class UserDeleteRequest(BaseModel):
    id: str = Field(..., min_length=1)
    token: str | None = None
