"""
Typed predicate builder for place search.

Filters become a list of `Predicate`s. Column names come from a fixed
allowlist and every value is a bound parameter, so nothing a client sends is
spliced into the SQL text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .schemas import PlaceFilters

EQ = "eq"
ANY_OF = "any_of"
GREATER = "gt"
LESS = "lt"
CONTAINS = "contains"

SEARCHABLE_COLUMNS = frozenset(
    {
        "category",
        "country",
        "city",
        "county",
        "district",
        "area",
        "price",
        "rooms",
        "beds",
        "wc",
        "pets",
        "available",
        "amenities",
        "features",
    }
)

_TEMPLATES = {
    EQ: "{column} = {placeholder}",
    ANY_OF: "{column} = ANY({placeholder}::text[])",
    GREATER: "{column} > {placeholder}",
    LESS: "{column} < {placeholder}",
    # Requested items must be a subset of the stored array.
    CONTAINS: "{column} @> {placeholder}::text[]",
}


@dataclass(frozen=True)
class Predicate:
    column: str
    operator: str
    value: Any

    def __post_init__(self) -> None:
        if self.column not in SEARCHABLE_COLUMNS:
            raise ValueError(f"Column is not searchable: {self.column}")
        if self.operator not in _TEMPLATES:
            raise ValueError(f"Unknown operator: {self.operator}")

    def render(self, position: int) -> str:
        return _TEMPLATES[self.operator].format(column=self.column, placeholder=f"${position}")


def build_predicates(filters: PlaceFilters) -> list[Predicate]:
    """
    Turn filters into predicates, in a fixed order.

    A filter applies whenever its key is present and not null, so
    `{"available": false}` and `{"rooms": 0}` both filter.
    """
    predicates: list[Predicate] = []

    if filters.category is not None:
        predicates.append(Predicate("category", EQ, filters.category))

    for column in ("country", "city", "county", "district"):
        values = getattr(filters, column)
        if values is not None:
            predicates.append(Predicate(column, ANY_OF, list(values)))

    for column in ("area", "price"):
        bounds = getattr(filters, column)
        if bounds is None:
            continue
        if bounds.min is not None:
            predicates.append(Predicate(column, GREATER, bounds.min))
        if bounds.max is not None:
            predicates.append(Predicate(column, LESS, bounds.max))

    for column in ("rooms", "beds", "wc", "pets", "available"):
        value = getattr(filters, column)
        if value is not None:
            predicates.append(Predicate(column, EQ, value))

    for column in ("amenities", "features"):
        values = getattr(filters, column)
        if values is not None:
            predicates.append(Predicate(column, CONTAINS, list(values)))

    return predicates


def compose_where(predicates: list[Predicate], *, first_position: int = 1) -> tuple[str, list[Any]]:
    """
    Render predicates as `WHERE p1 AND p2 ...` plus their bound arguments.

    Returns ("", []) when there is nothing to filter on.
    """
    if not predicates:
        return "", []

    clauses = [p.render(first_position + i) for i, p in enumerate(predicates)]
    return "WHERE " + " AND ".join(clauses), [p.value for p in predicates]
