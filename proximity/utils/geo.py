"""Geospatial helpers: haversine distance in miles and radius filtering."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

EARTH_RADIUS_MILES = 3959.0
NEARBY_RADIUS_MILES = 5.0

T = TypeVar("T")


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def as_tuple(self) -> tuple[float, float]:
        return self.latitude, self.longitude


@dataclass(frozen=True)
class AnnotatedRecord(Generic[T]):
    """A record paired with its distance (miles) from a reference point."""

    record: T
    coordinate: Coordinate
    distance: float

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude


def distance_miles(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in miles (haversine)."""

    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = math.radians(b.latitude - a.latitude)
    dlng = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2.0) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2.0) ** 2
    c = 2.0 * math.atan2(math.sqrt(h), math.sqrt(1.0 - h))
    return EARTH_RADIUS_MILES * c


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def to_coordinate(latitude: Any, longitude: Any) -> Coordinate | None:
    """Build a Coordinate, or None when either value is missing or out of range."""

    lat = _as_float(latitude)
    lng = _as_float(longitude)
    if lat is None or lng is None:
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return Coordinate(lat, lng)


def coordinate_of(record: Any) -> Coordinate | None:
    """Read latitude/longitude from a mapping or an object with attributes."""

    if isinstance(record, Coordinate):
        return record
    if isinstance(record, Mapping):
        return to_coordinate(record.get("latitude"), record.get("longitude"))
    return to_coordinate(getattr(record, "latitude", None), getattr(record, "longitude", None))


def filter_nearby(
    origin: Coordinate,
    radius_miles: float,
    records: Iterable[T],
    *,
    locate: Callable[[T], Coordinate | None] = coordinate_of,
) -> list[AnnotatedRecord[T]]:
    """Keep records within ``radius_miles`` of ``origin``, in input order.

    Records whose coordinate is missing or invalid are excluded before any
    distance is computed.
    """

    out: list[AnnotatedRecord[T]] = []
    for record in records:
        coord = locate(record)
        if coord is None:
            continue
        d = distance_miles(origin, coord)
        if d <= radius_miles:
            out.append(AnnotatedRecord(record=record, coordinate=coord, distance=d))
    return out


__all__ = [
    "EARTH_RADIUS_MILES",
    "NEARBY_RADIUS_MILES",
    "AnnotatedRecord",
    "Coordinate",
    "coordinate_of",
    "distance_miles",
    "filter_nearby",
    "to_coordinate",
]
