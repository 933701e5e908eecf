"""
Planar and geographic geometry primitives.

Two unit systems flow through the engine and are never mixed in a single
computation:
  - canvas pixels, converted to metres with a caller-supplied
    pixels-per-metre scale
  - WGS84 [longitude, latitude] degrees (GeoJSON order), measured with
    the haversine formula
"""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence

EARTH_RADIUS_M = 6_371_000


class InsufficientInputError(ValueError):
    """Too few points (or an empty ring) for the requested measurement."""


class Point(NamedTuple):
    x: float
    y: float


def as_point(value) -> Point:
    """Coerce a Point, an (x, y) pair or an {"x", "y"} mapping to a Point."""
    if isinstance(value, Point):
        return value
    if isinstance(value, dict):
        return Point(float(value["x"]), float(value["y"]))
    return Point(float(value[0]), float(value[1]))


# ──────────────────────────────────────────────────────────────────
# PLANAR MEASUREMENTS
# ──────────────────────────────────────────────────────────────────

def polygon_area(points: Sequence) -> float:
    """Polygon area by the shoelace formula, in squared working units.

    Works for open or closed rings and either winding order. Fewer than
    three points is not a zero-area shape: it raises InsufficientInputError.
    """
    pts = [as_point(p) for p in points]
    if len(pts) < 3:
        raise InsufficientInputError(
            f"At least 3 points required for an area, got {len(pts)}"
        )

    total = 0.0
    n = len(pts)
    for i in range(n):
        j = (i + 1) % n
        total += pts[i].x * pts[j].y
        total -= pts[j].x * pts[i].y
    return abs(total) / 2


def euclidean_distance(p1, p2) -> float:
    a, b = as_point(p1), as_point(p2)
    return math.hypot(b.x - a.x, b.y - a.y)


def segment_lengths(points: Sequence) -> list[float]:
    """Length of each consecutive segment of a polyline."""
    pts = [as_point(p) for p in points]
    if len(pts) < 2:
        raise InsufficientInputError(
            f"At least 2 points required for a distance, got {len(pts)}"
        )
    return [euclidean_distance(pts[i], pts[i + 1]) for i in range(len(pts) - 1)]


def polyline_length(points: Sequence) -> float:
    return sum(segment_lengths(points))


# ──────────────────────────────────────────────────────────────────
# SCALE CONVERSION
# ──────────────────────────────────────────────────────────────────

def _check_scale(pixels_per_meter: float) -> None:
    if pixels_per_meter is None or pixels_per_meter <= 0:
        raise ValueError(
            f"pixels_per_meter must be strictly positive, got {pixels_per_meter}"
        )


def pixels_to_meters(pixels: float, pixels_per_meter: float) -> float:
    _check_scale(pixels_per_meter)
    return pixels / pixels_per_meter


def square_pixels_to_square_meters(area_px: float, pixels_per_meter: float) -> float:
    _check_scale(pixels_per_meter)
    return area_px / (pixels_per_meter * pixels_per_meter)


# ──────────────────────────────────────────────────────────────────
# GEOGRAPHIC MEASUREMENTS ([lng, lat] degrees)
# ──────────────────────────────────────────────────────────────────

def great_circle_distance(p1, p2) -> float:
    """Haversine distance in metres between two [lng, lat] points."""
    lng1, lat1 = as_point(p1)
    lng2, lat2 = as_point(p2)
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def initial_bearing(p1, p2) -> float:
    """Forward azimuth from p1 to p2 in degrees, in (-180, 180].

    0 is north, 90 east, 180 south, -90 west.
    """
    lng1, lat1 = as_point(p1)
    lng2, lat2 = as_point(p2)
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lng2 - lng1)

    y = math.sin(d_lambda) * math.cos(phi2)
    x = (
        math.cos(phi1) * math.sin(phi2)
        - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    )
    return math.degrees(math.atan2(y, x))


def ring_centroid(rings: Sequence[Sequence]) -> Point:
    """Mean of the polygon's vertices, closing points excluded.

    `rings` is the GeoJSON Polygon coordinate array (outer ring first).
    """
    xs: list[float] = []
    ys: list[float] = []
    for ring in rings:
        pts = [as_point(p) for p in ring]
        if len(pts) > 1 and pts[0] == pts[-1]:
            pts = pts[:-1]
        xs.extend(p.x for p in pts)
        ys.extend(p.y for p in pts)

    if not xs:
        raise InsufficientInputError("Cannot compute the centroid of an empty polygon")
    return Point(sum(xs) / len(xs), sum(ys) / len(ys))
