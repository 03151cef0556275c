"""
Place API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from auth import dependencies as auth_dependencies
from favorites import service as favorites_service

from . import schemas, service

router = APIRouter()


@router.post("/api/places/create", status_code=status.HTTP_201_CREATED)
async def create_place(
    place: str | None = Form(default=None),
    token: str | None = Form(default=None),
    images: list[UploadFile] = File(default=[]),
    bearer_token: str | None = Depends(auth_dependencies.get_bearer_token),
) -> dict:
    """
    Multipart create: `place` is a JSON object, `images` holds up to 3 files.
    """
    return await service.create_place(
        place,
        token=auth_dependencies.pick_token(bearer_token, token),
        images=images,
    )


@router.put("/api/places/update")
async def replace_place(
    payload: schemas.PlaceUpdateRequest,
    bearer_token: str | None = Depends(auth_dependencies.get_bearer_token),
) -> dict:
    token = auth_dependencies.pick_token(bearer_token, payload.token)
    return await service.replace_place(payload, token=token)


@router.patch("/api/places/update")
async def patch_place(
    payload: schemas.PlaceUpdateRequest,
    bearer_token: str | None = Depends(auth_dependencies.get_bearer_token),
) -> dict:
    token = auth_dependencies.pick_token(bearer_token, payload.token)
    return await service.patch_place(payload, token=token)


@router.delete("/api/places/delete")
async def delete_place(
    payload: schemas.PlaceDeleteRequest,
    bearer_token: str | None = Depends(auth_dependencies.get_bearer_token),
) -> dict:
    token = auth_dependencies.pick_token(bearer_token, payload.token)
    return await service.delete_place(payload, token=token)


@router.get("/api/places/place")
async def get_place(id: str = Query(..., min_length=1)) -> dict | None:
    return await service.get_place(id)


@router.get("/api/places/places")
async def search_places(filters: str | None = Query(default=None, max_length=10000)) -> list[dict]:
    """
    `filters` is a JSON object, e.g. {"category": "flat", "price": {"min": 100, "max": 500}}.
    """
    return await service.search_places(filters)


@router.get("/api/places/image-url")
async def image_url(path: str = Query(..., min_length=1)) -> dict:
    return await service.image_url(path)


@router.post("/api/places/favorite")
async def add_favorite(
    payload: schemas.FavoriteRequest,
    bearer_token: str | None = Depends(auth_dependencies.get_bearer_token),
) -> dict:
    token = auth_dependencies.pick_token(bearer_token, payload.token)
    return await favorites_service.add_favorite(payload.place_id, token=token)
