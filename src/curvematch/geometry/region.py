# curvematch/geometry/region.py
"""
Search-region geometry for CurveMatch

Turns the two corners of a user-drawn rectangle into Bounds, an approximate
area, and GeoJSON / WKT values for the matching service.

Corners and points are (lat, lon) tuples in degrees. GeoJSON and WKT output
is longitude first.

Area uses an equirectangular approximation on a 6,371 km sphere: cheap, and
good enough for regions of a few hundred km² away from the poles.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from curvematch.errors import RegionTooLargeError
from curvematch.util.format import number_text

EARTH_RADIUS_KM = 6371.0

# internal coordinate type: (lat, lon)
LatLon = Tuple[float, float]


@dataclass(frozen=True)
class Bounds:
    west: float
    south: float
    east: float
    north: float

    @classmethod
    def from_corners(cls, a: LatLon, b: LatLon) -> "Bounds":
        """Normalize two opposite corners, in either order, into Bounds."""
        (lat_a, lon_a), (lat_b, lon_b) = a, b
        return cls(
            west=min(lon_a, lon_b),
            south=min(lat_a, lat_b),
            east=max(lon_a, lon_b),
            north=max(lat_a, lat_b),
        )

    @property
    def southwest(self) -> LatLon:
        return (self.south, self.west)

    @property
    def northeast(self) -> LatLon:
        return (self.north, self.east)

    def to_dict(self) -> dict:
        return {"west": self.west, "south": self.south, "east": self.east, "north": self.north}


def bounds_area(bounds: Bounds) -> float:
    """Approximate area of `bounds` in km²."""
    lat1 = math.radians(bounds.south)
    lat2 = math.radians(bounds.north)
    lon1 = math.radians(bounds.west)
    lon2 = math.radians(bounds.east)

    avg_lat = (lat1 + lat2) / 2
    width = EARTH_RADIUS_KM * (lon2 - lon1) * math.cos(avg_lat)
    height = EARTH_RADIUS_KM * (lat2 - lat1)
    return abs(width * height)


def rectangle_area(corner_a: LatLon, corner_b: LatLon) -> float:
    """Approximate area in km² of the rectangle spanned by two corners."""
    return bounds_area(Bounds.from_corners(corner_a, corner_b))


def check_area(bounds: Bounds, max_area_km2: float) -> float:
    """
    Return the area of `bounds` in km².

    Raises:
      RegionTooLargeError if it exceeds max_area_km2.
    """
    area = bounds_area(bounds)
    if area > max_area_km2:
        raise RegionTooLargeError(area, max_area_km2)
    return area


def bounds_to_polygon(bounds: Bounds) -> dict:
    """
    GeoJSON Polygon geometry for `bounds`.

    The single ring is closed and always has 5 positions:
    sw -> nw -> ne -> se -> sw.
    """
    sw = [bounds.west, bounds.south]
    nw = [bounds.west, bounds.north]
    ne = [bounds.east, bounds.north]
    se = [bounds.east, bounds.south]
    return {"type": "Polygon", "coordinates": [[sw, nw, ne, se, list(sw)]]}


def _feature(geometry: dict) -> dict:
    return {"type": "Feature", "properties": {}, "geometry": geometry}


def bounds_to_feature(bounds: Bounds) -> dict:
    return _feature(bounds_to_polygon(bounds))


def point_to_wkt(point: LatLon) -> str:
    """WKT POINT for a (lat, lon) pair, e.g. (47.5, 8) -> 'POINT(8 47.5)'."""
    lat, lon = point
    return f"POINT({number_text(float(lon))} {number_text(float(lat))})"


def path_to_linestring(path: Sequence[LatLon]) -> dict:
    """GeoJSON LineString geometry for a sequence of (lat, lon) pairs."""
    return {"type": "LineString", "coordinates": [[lon, lat] for lat, lon in path]}


def path_to_feature(path: Sequence[LatLon]) -> dict:
    return _feature(path_to_linestring(path))
