"""
Favorites business logic.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from auth import service as auth_service
from core import errors, ids
from places import repository as places_repository

from . import repository

logger = logging.getLogger(__name__)


async def add_favorite(raw_place_id: str | None, *, token: str | None) -> dict:
    raw_place_id = (raw_place_id or "").strip()
    if not (raw_place_id and token):
        raise errors.ValidationError("Missing required data.")

    user_id = auth_service.require_user_id(token)
    place_id = ids.parse_id(raw_place_id)
    if place_id is None or not await places_repository.place_exists(place_id):
        raise errors.NotFoundError(f"This place id doesn't exist: {raw_place_id}")

    row = await repository.add_favorite(favorite_id=str(uuid4()), place_id=place_id, user_id=user_id)
    if row is None:
        raise errors.PersistenceError(f"An error happened while adding place to favorites: {place_id}")

    logger.info("favorite_added place_id=%s user_id=%s", place_id, user_id)
    return {"ok": True, "id": str(row["id"]), "place_id": place_id}
