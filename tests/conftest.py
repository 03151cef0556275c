"""
Shared fixtures.

The API is exercised through FastAPI's TestClient with the repository
functions swapped for an in-memory store, so no PostgreSQL or S3 is needed.
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from auth import repository as auth_repository
from auth import security
from core import db
from places import repository as places_repository
from favorites import repository as favorites_repository
from realtime import presence
from uploads import storage
from users import repository as users_repository

CREATED_AT = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
PASSWORD = "secret-password"
PASSWORD_HASH = security.hash_password(PASSWORD)


class FakeDatabase:
    """
    Mirrors the repository functions' signatures and return shapes.
    """

    def __init__(self) -> None:
        self.users: dict[str, dict] = {}
        self.places: dict[str, dict] = {}
        self.favorites: list[dict] = []
        self.last_seen: list[str] = []
        self.searches: list = []

    # -- helpers for tests --------------------------------------------------

    def add_user(self, user_id: str, username: str, *, admin: bool = False) -> dict:
        row = {
            "id": user_id,
            "username": username,
            "password_hash": PASSWORD_HASH,
            "first_name": "Test",
            "last_name": "User",
            "email": f"{username}@example.com",
            "profile_picture": None,
            "biography": None,
            "post_count": 0,
            "verified": False,
            "admin": admin,
            "created_at": CREATED_AT,
            "last_seen": None,
        }
        self.users[user_id] = row
        return row

    def add_place(self, place_id: str, creator: str, **fields) -> dict:
        row = {
            "id": place_id,
            "title": "Sunny flat",
            "description": "Two rooms near the park",
            "country": "Turkey",
            "city": "Izmir",
            "county": "Konak",
            "district": "Alsancak",
            "images": [],
            "area": 80.0,
            "rooms": 2,
            "beds": 1,
            "wc": 1,
            "price": 450.0,
            "pets": False,
            "available": True,
            "category": "flat",
            "amenities": ["wifi"],
            "features": ["balcony"],
            "creator": creator,
            "created_at": CREATED_AT,
            "updated_at": None,
        }
        row.update(fields)
        self.places[place_id] = row
        return row

    # -- auth.repository ----------------------------------------------------

    async def create_user(self, *, user_id, username, password_hash, first_name, last_name, email):
        row = self.add_user(user_id, username)
        row.update(
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            email=email,
        )
        return {"id": user_id, "username": username, "created_at": CREATED_AT}

    async def username_exists(self, username):
        return any(u["username"] == username for u in self.users.values())

    async def get_credentials_by_username(self, username):
        for row in self.users.values():
            if row["username"] == username:
                return {k: row[k] for k in ("id", "username", "password_hash")}
        return None

    # -- users.repository ---------------------------------------------------

    async def get_public_user(self, user_id):
        row = self.users.get(user_id)
        if row is None:
            return None
        return {k: v for k, v in row.items() if k != "password_hash"}

    async def is_admin(self, user_id):
        return bool(self.users.get(user_id, {}).get("admin", False))

    async def username_taken_by_other(self, username, *, user_id):
        return any(u["username"] == username and u["id"] != user_id for u in self.users.values())

    async def update_user(self, user_id, **fields):
        row = self.users.get(user_id)
        if row is None:
            return None
        row.update(fields)
        return {"id": user_id}

    async def delete_user(self, user_id):
        row = self.users.pop(user_id, None)
        if row is None:
            return None
        self.places = {k: p for k, p in self.places.items() if p["creator"] != user_id}
        self.favorites = [f for f in self.favorites if f["user_id"] != user_id]
        return {"id": user_id, "profile_picture": row["profile_picture"]}

    async def get_profile_picture(self, user_id):
        return self.users.get(user_id, {}).get("profile_picture")

    async def set_profile_picture(self, user_id, path):
        row = self.users.get(user_id)
        if row is None:
            return None
        row["profile_picture"] = path
        return {"id": user_id, "profile_picture": path}

    async def touch_last_seen(self, username):
        self.last_seen.append(username)

    # -- places.repository --------------------------------------------------

    async def create_place(self, *, place_id, creator, fields, images):
        self.add_place(place_id, creator, images=list(images), **fields)
        self.users[creator]["post_count"] += 1
        return {"id": place_id, "created_at": CREATED_AT}

    async def get_place(self, place_id):
        row = self.places.get(place_id)
        return copy.deepcopy(row) if row is not None else None

    async def place_exists(self, place_id):
        return place_id in self.places

    async def is_creator(self, place_id, *, user_id):
        row = self.places.get(place_id)
        return row is not None and row["creator"] == user_id

    async def update_place(self, place_id, fields):
        row = self.places.get(place_id)
        if row is None:
            return None
        row.update(fields)
        row["updated_at"] = CREATED_AT
        return {"id": place_id, "updated_at": CREATED_AT}

    async def delete_place(self, place_id):
        row = self.places.pop(place_id, None)
        if row is None:
            return None
        creator = self.users.get(row["creator"])
        if creator is not None:
            creator["post_count"] = max(creator["post_count"] - 1, 0)
        return {"id": place_id, "creator": row["creator"], "images": row["images"]}

    async def search_places(self, place_filters):
        self.searches.append(place_filters)
        return [copy.deepcopy(p) for p in self.places.values()]

    # -- favorites.repository -----------------------------------------------

    async def add_favorite(self, *, favorite_id, place_id, user_id):
        row = {"id": favorite_id, "place_id": place_id, "user_id": user_id, "added_at": CREATED_AT}
        self.favorites.append(row)
        return row


class FakeStorage:
    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_after: int | None = None
        self._uploads = 0

    async def upload(self, data, content_type, folder):
        if self.fail_after is not None and self._uploads >= self.fail_after:
            return None
        self._uploads += 1
        key = storage.build_key(folder, content_type)
        self.objects[key] = data
        return key

    async def get_signed_url(self, path):
        if path not in self.objects:
            return None
        return f"https://storage.test/{path}?X-Amz-Expires=600"

    async def delete(self, path):
        self.deleted.append(path)
        return self.objects.pop(path, None) is not None


@pytest.fixture
def fake_db(monkeypatch) -> FakeDatabase:
    fake = FakeDatabase()
    patches = {
        auth_repository: ("create_user", "username_exists", "get_credentials_by_username"),
        users_repository: (
            "get_public_user",
            "is_admin",
            "username_taken_by_other",
            "update_user",
            "delete_user",
            "get_profile_picture",
            "set_profile_picture",
            "touch_last_seen",
        ),
        places_repository: (
            "create_place",
            "get_place",
            "place_exists",
            "is_creator",
            "update_place",
            "delete_place",
            "search_places",
        ),
        favorites_repository: ("add_favorite",),
    }
    for module, names in patches.items():
        for name in names:
            monkeypatch.setattr(module, name, getattr(fake, name))
    return fake


@pytest.fixture
def fake_storage(monkeypatch) -> FakeStorage:
    fake = FakeStorage()
    for name in ("upload", "get_signed_url", "delete"):
        monkeypatch.setattr(storage, name, getattr(fake, name))
    return fake


@pytest.fixture
def registry(monkeypatch) -> presence.PresenceRegistry:
    fresh = presence.PresenceRegistry()
    monkeypatch.setattr(presence, "registry", fresh)
    return fresh


@pytest.fixture
def client(monkeypatch, fake_db, fake_storage, registry):
    async def _noop() -> None:
        return None

    monkeypatch.setattr(db, "init_pool", _noop)
    monkeypatch.setattr(db, "close_pool", _noop)

    from main import app

    with TestClient(app) as test_client:
        yield test_client
