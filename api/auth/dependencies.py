"""
Auth dependencies for FastAPI routes.

Clients may send the session token either in the request body/form (`token`)
or as `Authorization: Bearer <token>`. The header wins when both are present.
"""

from __future__ import annotations

from fastapi import Header

from core import errors


def _extract_bearer_token(authorization: str | None) -> str | None:
    raw = (authorization or "").strip()
    if not raw:
        return None

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise errors.AuthError("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise errors.AuthError("Authorization must be: Bearer <token>.")
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    return _extract_bearer_token(authorization)


def pick_token(bearer_token: str | None, body_token: str | None) -> str | None:
    return bearer_token or body_token
