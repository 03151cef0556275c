"""
User persistence helpers (profile reads and writes).
"""

from __future__ import annotations

from core import db

# Never expose password_hash through these reads.
PUBLIC_COLUMNS = """
    id, username, first_name, last_name, email, profile_picture, biography,
    post_count, verified, admin, created_at, last_seen
"""


async def get_public_user(user_id: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {PUBLIC_COLUMNS}
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def is_admin(user_id: str) -> bool:
    row = await db.fetch_one("SELECT admin FROM users WHERE id = $1", user_id)
    return bool((row or {}).get("admin", False))


async def username_taken_by_other(username: str, *, user_id: str) -> bool:
    row = await db.fetch_one(
        "SELECT 1 AS ok FROM users WHERE username = $1 AND id <> $2 LIMIT 1",
        username,
        user_id,
    )
    return row is not None


async def update_user(
    user_id: str,
    *,
    username: str,
    password_hash: str,
    first_name: str,
    last_name: str,
    email: str,
    biography: str | None,
) -> dict | None:
    return await db.fetch_one(
        """
        UPDATE users
        SET username = $1,
            password_hash = $2,
            first_name = $3,
            last_name = $4,
            email = $5,
            biography = $6
        WHERE id = $7
        RETURNING id
        """,
        username,
        password_hash,
        first_name,
        last_name,
        email,
        biography,
        user_id,
    )


async def delete_user(user_id: str) -> dict | None:
    """
    Delete a user. Owned places and favorites go with it (ON DELETE CASCADE).
    """
    return await db.fetch_one(
        "DELETE FROM users WHERE id = $1 RETURNING id, profile_picture",
        user_id,
    )


async def get_profile_picture(user_id: str) -> str | None:
    row = await db.fetch_one("SELECT profile_picture FROM users WHERE id = $1", user_id)
    return (row or {}).get("profile_picture")


async def set_profile_picture(user_id: str, path: str) -> dict | None:
    return await db.fetch_one(
        "UPDATE users SET profile_picture = $1 WHERE id = $2 RETURNING id, profile_picture",
        path,
        user_id,
    )


async def touch_last_seen(username: str) -> None:
    await db.execute(
        "UPDATE users SET last_seen = now() WHERE username = $1",
        username,
    )
