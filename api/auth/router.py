"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from . import dependencies, schemas, service

router = APIRouter()


@router.post(
    "/api/auth/register",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.TokenResponse,
)
async def register(payload: schemas.RegisterRequest) -> schemas.TokenResponse:
    return await service.register(payload)


@router.post("/api/auth/login", response_model=schemas.TokenResponse)
async def login(payload: schemas.LoginRequest) -> schemas.TokenResponse:
    return await service.login(payload)


@router.get("/api/auth/me")
async def me(bearer_token: str | None = Depends(dependencies.get_bearer_token)) -> dict:
    return await service.me(bearer_token)
