"""
Auth business logic.
"""

from __future__ import annotations

import logging
import re
from uuid import uuid4

from core import errors, ids
from users import repository as users_repository

from . import repository, schemas, security

USERNAME_PATTERN = re.compile(r"[a-zA-Z0-9_-]{3,16}")
# bcrypt only looks at the first 72 bytes.
MAX_PASSWORD_BYTES = 72

logger = logging.getLogger(__name__)


def is_valid_username(username: str) -> bool:
    return bool(username) and USERNAME_PATTERN.fullmatch(username) is not None


def capitalize_name(name: str) -> str:
    """
    Upper-case the first letter of each part, leave the rest untouched.

    "mary ann" -> "Mary Ann", "mcDonald" -> "McDonald".
    """
    return " ".join(part[:1].upper() + part[1:] for part in (name or "").split())


def normalize_profile(
    *,
    username: str,
    password: str,
    first_name: str,
    last_name: str,
    email: str,
) -> dict[str, str]:
    """
    Apply the registration rules to a set of profile fields.

    Raises ValidationError when a field is empty or the username is malformed.
    """
    profile = {
        "username": repository.normalize_username(username),
        "password": password if (password or "").strip() else "",
        "first_name": capitalize_name(first_name),
        "last_name": capitalize_name(last_name),
        "email": repository.normalize_email(email),
    }
    missing = [key for key, value in profile.items() if not value]
    if missing:
        raise errors.ValidationError(f"Missing required data: {', '.join(missing)}.")
    if not is_valid_username(profile["username"]):
        raise errors.ValidationError("Invalid username.")
    if len(profile["password"].encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise errors.ValidationError(f"Password is too long. Max is {MAX_PASSWORD_BYTES} bytes.")
    return profile


async def register(payload: schemas.RegisterRequest) -> schemas.TokenResponse:
    profile = normalize_profile(
        username=payload.username,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
    )

    if await repository.username_exists(profile["username"]):
        raise errors.ConflictError("Username already in use.")

    user_id = str(uuid4())
    await repository.create_user(
        user_id=user_id,
        username=profile["username"],
        password_hash=security.hash_password(profile["password"]),
        first_name=profile["first_name"],
        last_name=profile["last_name"],
        email=profile["email"],
    )
    logger.info("user_registered user_id=%s", user_id)
    return schemas.TokenResponse(token=security.build_token(user_id))


async def login(payload: schemas.LoginRequest) -> schemas.TokenResponse:
    username = repository.normalize_username(payload.username)
    if not (username and payload.password):
        raise errors.ValidationError("Missing required data.")

    user_row = await repository.get_credentials_by_username(username)
    if user_row is None:
        raise errors.NotFoundError("This username doesn't exist.", status_code=401)

    if not security.verify_password(payload.password, str(user_row.get("password_hash") or "")):
        raise errors.AuthError("Wrong password.")

    return schemas.TokenResponse(token=security.build_token(str(user_row["id"])))


def require_user_id(token: str | None) -> str:
    """
    Resolve the caller's id from a token or fail with AuthError.
    """
    user_id = ids.parse_id(security.user_id_from_token(token))
    if user_id is None:
        raise errors.AuthError("You are not authorized, wrong token.")
    return user_id


async def is_self_or_admin(caller_id: str, target_user_id: str | None) -> bool:
    target_id = ids.parse_id(target_user_id)
    if target_id is not None and ids.parse_id(caller_id) == target_id:
        return True
    return await users_repository.is_admin(caller_id)


async def me(token: str | None) -> dict:
    user_id = require_user_id(token)
    user_row = await users_repository.get_public_user(user_id)
    if user_row is None:
        raise errors.AuthError("User not found.")
    return user_row
