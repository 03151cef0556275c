"""
Auth security helpers.
"""

from __future__ import annotations

import time
from typing import Any

import bcrypt
import jwt

from core.config import env_int, env_str


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return env_str("JWT_SECRET", "dev-change-this-secret")


def jwt_algorithm() -> str:
    return env_str("JWT_ALG", "HS256")


def token_expire_days() -> int:
    return env_int("TOKEN_EXPIRE_DAYS", 14)


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_token(user_id: str) -> str:
    issued_at = now_epoch_s()
    payload = {
        "id": str(user_id),
        "iat": issued_at,
        "exp": issued_at + token_expire_days() * 24 * 60 * 60,
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid token.") from exc

    if not str(payload.get("id") or "").strip():
        raise AuthSecurityError("Token carries no user id.")
    return payload


def user_id_from_token(token: str | None) -> str | None:
    """
    Return the user id a token asserts, or None when it cannot be trusted.
    """
    try:
        payload = decode_token(token or "")
    except AuthSecurityError:
        return None
    return str(payload["id"])
