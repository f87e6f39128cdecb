"""
Geospatial helpers for region queries.

Coordinates arrive as `lat,lng` but GeoJSON wants `[lng, lat]`; everything
returned from here is already in GeoJSON order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float


def parse_lat_lng(raw: str) -> LatLng:
    """
    Parse a `"lat,lng"` query string value.

    Raises ValueError when the value is not two finite-looking numbers.
    """
    parts = [p.strip() for p in (raw or "").split(",")]
    if len(parts) != 2 or not all(parts):
        raise ValueError("expected 'lat,lng'")
    lat, lng = float(parts[0]), float(parts[1])
    if not -90.0 <= lat <= 90.0:
        raise ValueError("latitude out of range")
    if not -180.0 <= lng <= 180.0:
        raise ValueError("longitude out of range")
    return LatLng(lat=lat, lng=lng)


def rectangle_bounds(top_right: LatLng, bottom_left: LatLng) -> dict[str, Any]:
    """
    Build a closed GeoJSON polygon for the rectangle spanned by two corners.

    The remaining corners combine one input's latitude with the other's
    longitude. Corner ordering is not checked: callers must pass a top-right
    corner that really is north-east of the bottom-left one, otherwise the
    ring still closes but describes a different (possibly degenerate) area.
    """
    top_left = [bottom_left.lng, top_right.lat]
    bottom_right = [top_right.lng, bottom_left.lat]
    ring = [
        top_left,
        [top_right.lng, top_right.lat],
        bottom_right,
        [bottom_left.lng, bottom_left.lat],
        top_left,
    ]
    return {"type": "Polygon", "coordinates": [ring]}
