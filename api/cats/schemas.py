"""
Cat API schemas: one rule set per operation.

Form bodies deliver every value as a string, so `location` also accepts a
JSON-encoded GeoJSON point.
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.geo import LatLng, parse_lat_lng


class Point(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    type: Literal["Point"] = "Point"
    # GeoJSON order: [longitude, latitude]
    coordinates: list[float] = Field(..., min_length=2, max_length=2)

    @field_validator("coordinates")
    @classmethod
    def coordinates_in_range(cls, value: list[float]) -> list[float]:
        lng, lat = value
        if not -180.0 <= lng <= 180.0 or not -90.0 <= lat <= 90.0:
            raise ValueError("Coordinates out of range")
        return value


def _decode_location(value: Any) -> Any:
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return json.loads(value)
        except ValueError as exc:
            raise ValueError("Location must be a GeoJSON point") from exc
    return value


def _not_in_future(value: date | None) -> date | None:
    if value is not None and value > date.today():
        raise ValueError("Birthdate cannot be in the future")
    return value


class CatCreateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, allow_inf_nan=False)

    cat_name: str = Field(..., min_length=1, max_length=100)
    weight: float = Field(..., gt=0)
    filename: str = Field(..., min_length=3)
    birthdate: date
    location: Point | None = None
    owner: int | None = Field(default=None, gt=0)

    @field_validator("location", mode="before")
    @classmethod
    def location_from_json(cls, value: Any) -> Any:
        return _decode_location(value)

    @field_validator("birthdate")
    @classmethod
    def birthdate_not_in_future(cls, value: date | None) -> date | None:
        return _not_in_future(value)


class CatUpdateRequest(BaseModel):
    # No `owner` here: ownership only changes through the admin endpoint.
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid", allow_inf_nan=False)

    cat_name: str | None = Field(default=None, min_length=1, max_length=100)
    weight: float | None = Field(default=None, gt=0)
    filename: str | None = Field(default=None, min_length=3)
    birthdate: date | None = None
    location: Point | None = None

    @field_validator("location", mode="before")
    @classmethod
    def location_from_json(cls, value: Any) -> Any:
        return _decode_location(value)

    @field_validator("birthdate")
    @classmethod
    def birthdate_not_in_future(cls, value: date | None) -> date | None:
        return _not_in_future(value)


class CatAdminUpdateRequest(CatUpdateRequest):
    owner: int | None = Field(default=None, gt=0)


class AreaQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    top_right: LatLng = Field(..., alias="topRight")
    bottom_left: LatLng = Field(..., alias="bottomLeft")

    @field_validator("top_right", "bottom_left", mode="before")
    @classmethod
    def parse_corner(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return parse_lat_lng(value)
            except ValueError as exc:
                raise ValueError(f"Must be 'lat,lng' ({exc})") from exc
        return value
