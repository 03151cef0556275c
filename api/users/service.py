"""
User profile business logic.

Every mutation is guarded: the caller must be the target user or an admin.
"""

from __future__ import annotations

import logging

from fastapi import UploadFile

from auth import security
from auth import service as auth_service
from core import errors, ids
from uploads import service as upload_service

from . import repository, schemas

PROFILE_PICTURE_FOLDER = "users"

logger = logging.getLogger(__name__)


async def _require_self_or_admin(token: str | None, target_user_id: str | None, action: str) -> str:
    """
    Return the target's canonical id once the caller is cleared to act on it.
    """
    caller_id = auth_service.require_user_id(token)
    if not await auth_service.is_self_or_admin(caller_id, target_user_id):
        raise errors.AuthError(f"You are not authorized to {action} this user.")
    target_id = ids.parse_id(target_user_id)
    if target_id is None:
        raise errors.NotFoundError(f"This user id doesn't exist: {target_user_id}")
    return target_id


async def get_user(user_id: str) -> dict | None:
    parsed = ids.parse_id(user_id)
    if parsed is None:
        return None
    return await repository.get_public_user(parsed)


async def update_user(payload: schemas.UserUpdateRequest, *, token: str | None) -> dict:
    user_id = await _require_self_or_admin(token, payload.id, "update")

    profile = auth_service.normalize_profile(
        username=payload.username,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
    )
    if await repository.username_taken_by_other(profile["username"], user_id=user_id):
        raise errors.ConflictError("Username already in use.")

    biography = (payload.biography or "").strip() or None
    row = await repository.update_user(
        user_id,
        username=profile["username"],
        password_hash=security.hash_password(profile["password"]),
        first_name=profile["first_name"],
        last_name=profile["last_name"],
        email=profile["email"],
        biography=biography,
    )
    if row is None:
        raise errors.NotFoundError(f"This user id doesn't exist: {user_id}")
    return {"ok": True, "id": str(row["id"])}


async def delete_user(payload: schemas.UserDeleteRequest, *, token: str | None) -> dict:
    user_id = await _require_self_or_admin(token, payload.id, "delete")

    row = await repository.delete_user(user_id)
    if row is None:
        raise errors.NotFoundError(f"This user id doesn't exist: {user_id}")

    if row.get("profile_picture"):
        await upload_service.discard([row["profile_picture"]])
    logger.info("user_deleted user_id=%s", user_id)
    return {"ok": True, "id": str(row["id"])}


async def set_profile_picture(
    image: UploadFile,
    *,
    token: str | None,
    user_id: str | None = None,
) -> dict:
    caller_id = auth_service.require_user_id(token)
    target_id = await _require_self_or_admin(token, user_id or caller_id, "update")

    previous = await repository.get_profile_picture(target_id)
    path = await upload_service.store_image(image, folder=PROFILE_PICTURE_FOLDER)

    try:
        row = await repository.set_profile_picture(target_id, path)
    except errors.AppError:
        await upload_service.discard([path])
        raise
    if row is None:
        await upload_service.discard([path])
        raise errors.NotFoundError(f"This user id doesn't exist: {target_id}")

    if previous:
        await upload_service.discard([previous])
    return {"ok": True, "id": str(row["id"]), "profile_picture": path}


async def touch_last_seen(username: str) -> None:
    await repository.touch_last_seen(username)
