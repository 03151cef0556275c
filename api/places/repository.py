"""
Place persistence (raw SQL).

Creating or deleting a place also moves the creator's `post_count`; both
statements share one transaction.
"""

from __future__ import annotations

from typing import Any

from core import db, errors

from . import filters
from .schemas import EDITABLE_FIELDS, PlaceFilters

PLACE_COLUMNS = """
    id, title, description, country, city, county, district, images,
    area, rooms, beds, wc, price, pets, available, category,
    amenities, features, creator, created_at, updated_at
"""


def _set_clause(fields: dict[str, Any]) -> tuple[str, list[Any]]:
    """
    Render `col = $1, col = $2, ...` for editable columns only.
    """
    unknown = sorted(set(fields) - set(EDITABLE_FIELDS))
    if unknown:
        raise ValueError(f"Columns are not editable: {', '.join(unknown)}")

    columns = [name for name in EDITABLE_FIELDS if name in fields]
    assignments = [f"{name} = ${i}" for i, name in enumerate(columns, start=1)]
    return ", ".join(assignments), [fields[name] for name in columns]


async def create_place(
    *,
    place_id: str,
    creator: str,
    fields: dict[str, Any],
    images: list[str],
) -> dict:
    columns = list(EDITABLE_FIELDS)
    values = [fields.get(name) for name in columns]
    placeholders = ", ".join(f"${i}" for i in range(4, len(columns) + 4))

    async with db.transaction() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO places (id, creator, images, {", ".join(columns)}, created_at)
            VALUES ($1, $2, $3, {placeholders}, now())
            RETURNING id, created_at
            """,
            place_id,
            creator,
            images,
            *values,
        )
        if row is None:
            raise errors.PersistenceError("Failed to insert place.")

        await conn.execute(
            "UPDATE users SET post_count = post_count + 1 WHERE id = $1",
            creator,
        )
        return dict(row)


async def get_place(place_id: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {PLACE_COLUMNS}
        FROM places
        WHERE id = $1
        """,
        place_id,
    )


async def place_exists(place_id: str) -> bool:
    row = await db.fetch_one("SELECT 1 AS ok FROM places WHERE id = $1", place_id)
    return row is not None


async def is_creator(place_id: str, *, user_id: str) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM places
        WHERE id = $1
          AND creator = $2
        LIMIT 1
        """,
        place_id,
        user_id,
    )
    return row is not None


async def update_place(place_id: str, fields: dict[str, Any]) -> dict | None:
    """
    Write exactly the given columns and bump `updated_at`.
    """
    assignments, args = _set_clause(fields)
    if not assignments:
        raise ValueError("update_place called without fields.")

    return await db.fetch_one(
        f"""
        UPDATE places
        SET {assignments},
            updated_at = now()
        WHERE id = ${len(args) + 1}
        RETURNING id, updated_at
        """,
        *args,
        place_id,
    )


async def delete_place(place_id: str) -> dict | None:
    """
    Delete a place and decrement its creator's post count.
    Returns the deleted row's id, creator and images, or None when not found.
    """
    async with db.transaction() as conn:
        row = await conn.fetchrow(
            "DELETE FROM places WHERE id = $1 RETURNING id, creator, images",
            place_id,
        )
        if row is None:
            return None

        await conn.execute(
            "UPDATE users SET post_count = GREATEST(post_count - 1, 0) WHERE id = $1",
            row["creator"],
        )
        return dict(row)


async def search_places(place_filters: PlaceFilters) -> list[dict]:
    where, args = filters.compose_where(filters.build_predicates(place_filters))
    return await db.fetch_all(
        f"""
        SELECT {PLACE_COLUMNS}
        FROM places
        {where}
        ORDER BY created_at DESC, id
        """,
        *args,
    )
