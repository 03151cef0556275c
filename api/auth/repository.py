"""
Auth persistence helpers.
"""

from __future__ import annotations

from core import db


def normalize_username(username: str) -> str:
    return (username or "").strip().lower()


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(
    *,
    user_id: str,
    username: str,
    password_hash: str,
    first_name: str,
    last_name: str,
    email: str,
) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO users (id, username, password_hash, first_name, last_name, email, created_at)
        VALUES ($1, $2, $3, $4, $5, $6, now())
        RETURNING id, username, created_at
        """,
        user_id,
        normalize_username(username),
        password_hash,
        first_name,
        last_name,
        normalize_email(email),
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def username_exists(username: str) -> bool:
    row = await db.fetch_one(
        "SELECT 1 AS ok FROM users WHERE username = $1 LIMIT 1",
        normalize_username(username),
    )
    return row is not None


async def get_credentials_by_username(username: str) -> dict | None:
    return await db.fetch_one(
        """
        SELECT id, username, password_hash
        FROM users
        WHERE username = $1
        """,
        normalize_username(username),
    )
