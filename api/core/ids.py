"""
Row ids are uuids; requests carry them as strings.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID


def parse_id(value: Any) -> str | None:
    """
    Canonical (lower-case, hyphenated) form of a uuid, or None when `value`
    is not one. Callers decide what an unusable id means for their endpoint.
    """
    if isinstance(value, UUID):
        return str(value)
    if not isinstance(value, str):
        return None
    try:
        return str(UUID(value.strip()))
    except ValueError:
        return None
