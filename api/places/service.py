"""
Place business logic: create, read, update, delete, search.

Mutations are allowed for the place's creator or an admin.
"""

from __future__ import annotations

import logging
from uuid import uuid4

import pydantic
from fastapi import UploadFile

from auth import service as auth_service
from core import errors, ids
from uploads import service as upload_service
from users import repository as users_repository

from . import repository, schemas

PLACE_IMAGE_FOLDER = "places"

logger = logging.getLogger(__name__)


def parse_place(raw: str | None) -> schemas.PlaceFields:
    if not (raw or "").strip():
        raise errors.ValidationError("Missing required data: place.")
    try:
        return schemas.PlaceFields.model_validate_json(raw)
    except pydantic.ValidationError as exc:
        raise errors.ValidationError(f"Invalid place data: {_first_error(exc)}") from exc


def parse_filters(raw: str | None) -> schemas.PlaceFilters:
    if not (raw or "").strip():
        return schemas.PlaceFilters()
    try:
        return schemas.PlaceFilters.model_validate_json(raw)
    except pydantic.ValidationError as exc:
        raise errors.ValidationError(f"Invalid filters: {_first_error(exc)}") from exc


def _first_error(exc: pydantic.ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return f"{location}: {first.get('msg', 'invalid value')}"


async def _ensure_can_modify(place_id: str | None, user_id: str, action: str) -> str:
    """
    Return the place's canonical id when `user_id` may change it.

    Non-admins get AuthError for any id they don't own, including unknown or
    malformed ones; admins get NotFoundError for a malformed id.
    """
    parsed = ids.parse_id(place_id)
    if parsed is not None and await repository.is_creator(parsed, user_id=user_id):
        return parsed
    if not await users_repository.is_admin(user_id):
        raise errors.AuthError(f"You are not authorized to {action} this place.")
    if parsed is None:
        raise errors.NotFoundError(f"This place id doesn't exist: {place_id}")
    return parsed


async def create_place(
    raw_place: str | None,
    *,
    token: str | None,
    images: list[UploadFile],
) -> dict:
    place = parse_place(raw_place)
    missing = place.missing_required()
    if missing:
        raise errors.ValidationError(f"Missing required data: {', '.join(missing)}.")

    user_id = auth_service.require_user_id(token)
    image_paths = await upload_service.store_images(images, folder=PLACE_IMAGE_FOLDER)

    place_id = str(uuid4())
    try:
        row = await repository.create_place(
            place_id=place_id,
            creator=user_id,
            fields=place.model_dump(include=set(schemas.EDITABLE_FIELDS)),
            images=image_paths,
        )
    except errors.AppError:
        await upload_service.discard(image_paths)
        raise

    logger.info("place_created place_id=%s creator=%s images=%s", place_id, user_id, len(image_paths))
    return {"ok": True, "id": str(row["id"]), "images": image_paths}


async def replace_place(payload: schemas.PlaceUpdateRequest, *, token: str | None) -> dict:
    """
    Full-row update: every editable column is rewritten from the payload.

    Omitted optional fields become NULL; omitted required fields are rejected.
    """
    user_id = auth_service.require_user_id(token)
    place_id = await _ensure_can_modify(payload.id, user_id, "update")

    missing = payload.missing_required()
    if missing:
        raise errors.ValidationError(f"Missing required data: {', '.join(missing)}.")

    fields = payload.model_dump(include=set(schemas.EDITABLE_FIELDS))
    return await _apply_update(place_id, fields)


async def patch_place(payload: schemas.PlaceUpdateRequest, *, token: str | None) -> dict:
    """
    Partial update: only the fields present in the request body are written.
    """
    user_id = auth_service.require_user_id(token)
    place_id = await _ensure_can_modify(payload.id, user_id, "update")

    fields = payload.model_dump(include=set(schemas.EDITABLE_FIELDS), exclude_unset=True)
    if not fields:
        raise errors.ValidationError("Nothing to update.")

    nulled = payload.missing_required(tuple(name for name in schemas.REQUIRED_FIELDS if name in fields))
    if nulled:
        raise errors.ValidationError(f"Required fields cannot be cleared: {', '.join(nulled)}.")

    return await _apply_update(place_id, fields)


async def _apply_update(place_id: str, fields: dict) -> dict:
    row = await repository.update_place(place_id, fields)
    if row is None:
        raise errors.NotFoundError(f"This place id doesn't exist: {place_id}")
    return {"ok": True, "id": str(row["id"]), "updated": sorted(fields)}


async def delete_place(payload: schemas.PlaceDeleteRequest, *, token: str | None) -> dict:
    user_id = auth_service.require_user_id(token)
    place_id = await _ensure_can_modify(payload.id, user_id, "delete")

    row = await repository.delete_place(place_id)
    if row is None:
        raise errors.NotFoundError(f"This place id doesn't exist: {place_id}")

    await upload_service.discard(list(row.get("images") or []))
    logger.info("place_deleted place_id=%s by=%s", place_id, user_id)
    return {"ok": True, "id": str(row["id"])}


async def get_place(place_id: str) -> dict | None:
    parsed = ids.parse_id(place_id)
    if parsed is None:
        return None
    return await repository.get_place(parsed)


async def search_places(raw_filters: str | None) -> list[dict]:
    return await repository.search_places(parse_filters(raw_filters))


async def image_url(path: str) -> dict:
    return {"url": await upload_service.signed_url(path)}
