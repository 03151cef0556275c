"""
Favorite persistence.
"""

from __future__ import annotations

from core import db


async def add_favorite(*, favorite_id: str, place_id: str, user_id: str) -> dict | None:
    # No uniqueness on (user_id, place_id): adding twice stores two rows.
    return await db.fetch_one(
        """
        INSERT INTO favorites (id, place_id, user_id, added_at)
        VALUES ($1, $2, $3, now())
        RETURNING id, place_id, user_id, added_at
        """,
        favorite_id,
        place_id,
        user_id,
    )
