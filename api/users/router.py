"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter()


@router.get("/api/users/user")
async def get_user(id: str = Query(..., min_length=1)) -> dict | None:
    """
    Public profile of a user, or null when the id is unknown.
    """
    return await service.get_user(id)


@router.put("/api/users/update")
async def update_user(
    payload: schemas.UserUpdateRequest,
    bearer_token: str | None = Depends(auth_dependencies.get_bearer_token),
) -> dict:
    token = auth_dependencies.pick_token(bearer_token, payload.token)
    return await service.update_user(payload, token=token)


@router.delete("/api/users/delete")
async def delete_user(
    payload: schemas.UserDeleteRequest,
    bearer_token: str | None = Depends(auth_dependencies.get_bearer_token),
) -> dict:
    token = auth_dependencies.pick_token(bearer_token, payload.token)
    return await service.delete_user(payload, token=token)


@router.post("/api/users/picture")
async def upload_profile_picture(
    image: UploadFile = File(...),
    token: str | None = Form(default=None),
    id: str | None = Form(default=None),
    bearer_token: str | None = Depends(auth_dependencies.get_bearer_token),
) -> dict:
    return await service.set_profile_picture(
        image,
        token=auth_dependencies.pick_token(bearer_token, token),
        user_id=id,
    )
