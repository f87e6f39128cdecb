"""Bounding-box polygon construction."""
import pytest

from core.geo import LatLng, parse_lat_lng, rectangle_bounds


def test_rectangle_bounds_closed_ring_in_lng_lat_order() -> None:
    polygon = rectangle_bounds(LatLng(lat=10, lng=20), LatLng(lat=0, lng=5))
    assert polygon["type"] == "Polygon"
    ring = polygon["coordinates"][0]
    assert len(ring) == 5
    assert ring[0] == ring[-1]
    assert ring == [[5, 10], [20, 10], [20, 0], [5, 0], [5, 10]]


def test_rectangle_bounds_corners_mix_latitudes_and_longitudes() -> None:
    ring = rectangle_bounds(LatLng(lat=10, lng=10), LatLng(lat=0, lng=0))["coordinates"][0]
    assert sorted(map(tuple, ring[:4])) == [(0, 0), (0, 10), (10, 0), (10, 10)]


def test_parse_lat_lng() -> None:
    point = parse_lat_lng(" 60.17, 24.94 ")
    assert point == LatLng(lat=60.17, lng=24.94)


@pytest.mark.parametrize("raw", ["", "60", "a,b", "1,2,3", "91,0", "0,181", ",5"])
def test_parse_lat_lng_rejects_bad_values(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_lat_lng(raw)
