"""
Place (listing) API schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Columns a client may write, in table order.
EDITABLE_FIELDS = (
    "title",
    "description",
    "country",
    "city",
    "county",
    "district",
    "area",
    "rooms",
    "beds",
    "wc",
    "price",
    "pets",
    "available",
    "category",
    "amenities",
    "features",
)

REQUIRED_FIELDS = ("title", "description", "country", "city", "county", "price", "category")


class PlaceFields(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=10000)
    country: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, max_length=100)
    county: str | None = Field(default=None, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    area: float | None = Field(default=None, ge=0)
    rooms: int | None = Field(default=None, ge=0)
    beds: int | None = Field(default=None, ge=0)
    wc: int | None = Field(default=None, ge=0)
    price: float | None = Field(default=None, ge=0)
    pets: bool | None = None
    available: bool | None = None
    category: str | None = Field(default=None, max_length=100)
    amenities: list[str] | None = None
    features: list[str] | None = None

    def missing_required(self, fields: tuple[str, ...] = REQUIRED_FIELDS) -> list[str]:
        missing = []
        for name in fields:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing


class PlaceUpdateRequest(PlaceFields):
    id: str = Field(..., min_length=1)
    token: str | None = None


class PlaceDeleteRequest(BaseModel):
    id: str = Field(..., min_length=1)
    token: str | None = None


class FavoriteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    place_id: str | None = Field(default=None, alias="placeId")
    token: str | None = None


class NumericRange(BaseModel):
    # Both bounds are exclusive.
    min: float | None = None
    max: float | None = None


class PlaceFilters(BaseModel):
    """
    Search filters; every key is optional and absent keys add no predicate.
    """

    category: str | None = None
    country: list[str] | None = None
    city: list[str] | None = None
    county: list[str] | None = None
    district: list[str] | None = None
    area: NumericRange | None = None
    price: NumericRange | None = None
    rooms: int | None = None
    beds: int | None = None
    wc: int | None = None
    pets: bool | None = None
    available: bool | None = None
    amenities: list[str] | None = None
    features: list[str] | None = None

    @field_validator("country", "city", "county", "district", mode="before")
    @classmethod
    def _one_or_many(cls, value: object) -> object:
        if isinstance(value, str):
            return [value]
        return value
