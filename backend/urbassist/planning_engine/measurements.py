"""
Site-plan canvas measurements.

The site-plan editor works in canvas pixels. Every calculation here takes an
explicit pixels-per-metre scale and returns a plain dict ready for JSON.
Missing or insufficient input is reported as {"error": "..."} instead of
raising, so the HTTP layer can pass it straight through.
"""

from __future__ import annotations

import logging
from typing import Optional

from urbassist.planning_engine.geometry import (
    InsufficientInputError,
    as_point,
    pixels_to_meters,
    polygon_area,
    segment_lengths,
    square_pixels_to_square_meters,
)

logger = logging.getLogger(__name__)


def calculate_surface(data: dict, pixels_per_meter: float) -> dict:
    """Area of a drawn polygon, or of a width x height rectangle."""
    points = data.get("points") or []
    if len(points) >= 3:
        area_px = polygon_area(points)
        area_m2 = square_pixels_to_square_meters(area_px, pixels_per_meter)
        return {
            "type": "surface",
            "area_pixels": area_px,
            "area_meters": area_m2,
            "formatted": f"{area_m2:.2f} m²",
        }

    dimensions = data.get("dimensions")
    if dimensions:
        area_px = dimensions["width"] * dimensions["height"]
        area_m2 = square_pixels_to_square_meters(area_px, pixels_per_meter)
        return {
            "type": "surface",
            "area_pixels": area_px,
            "area_meters": area_m2,
            "formatted": f"{area_m2:.2f} m²",
        }

    return {"error": "Insufficient data for surface calculation"}


def calculate_distance(data: dict, pixels_per_meter: float) -> dict:
    """Per-segment and total length of a drawn polyline."""
    points = data.get("points") or []
    try:
        lengths_px = segment_lengths(points)
    except InsufficientInputError:
        return {"error": "At least 2 points required for distance calculation"}

    segments = []
    total = 0.0
    for i, length_px in enumerate(lengths_px):
        meters = pixels_to_meters(length_px, pixels_per_meter)
        segments.append({"from": i, "to": i + 1, "distance": meters})
        total += meters

    return {
        "type": "distance",
        "segments": segments,
        "total_distance": total,
        "formatted": f"{total:.2f} m",
    }


def calculate_volume(data: dict, pixels_per_meter: float) -> dict:
    """Volume from canvas dimensions, or from footprint x floors x floor height.

    Footprint-based volumes are already in metres and ignore the scale.
    """
    dimensions = data.get("dimensions") or {}
    depth = dimensions.get("depth")
    if dimensions and depth:
        volume_px = dimensions["width"] * dimensions["height"] * depth
        volume_m3 = volume_px / pixels_per_meter ** 3
        return {
            "type": "volume",
            "volume_pixels": volume_px,
            "volume_meters": volume_m3,
            "formatted": f"{volume_m3:.2f} m³",
        }

    footprint = data.get("building_footprint")
    floors = data.get("building_floors")
    floor_height = data.get("floor_height")
    if footprint and floors and floor_height:
        total_height = floors * floor_height
        volume = footprint * total_height
        return {
            "type": "volume",
            "footprint": footprint,
            "floors": floors,
            "floor_height": floor_height,
            "total_height": total_height,
            "volume_meters": volume,
            "formatted": f"{volume:.2f} m³",
        }

    return {"error": "Insufficient data for volume calculation"}


def calculate_setback(
    data: dict,
    pixels_per_meter: float,
    minimum_required: float,
) -> dict:
    """Distance between the first two points, checked against a minimum setback."""
    points = data.get("points") or []
    if len(points) < 2:
        return {"error": "2 points required for setback calculation"}

    p1, p2 = as_point(points[0]), as_point(points[1])
    distance_px = segment_lengths([p1, p2])[0]
    distance_m = pixels_to_meters(distance_px, pixels_per_meter)
    return {
        "type": "setback",
        "distance_meters": distance_m,
        "formatted": f"{distance_m:.2f} m",
        "compliant": distance_m >= minimum_required,
        "minimum_required": minimum_required,
    }


def calculate_coverage(data: dict) -> dict:
    """Ground coverage ratio (CES) of a footprint on a parcel, both in m²."""
    parcel_area = data.get("parcel_area")
    footprint = data.get("building_footprint")
    if not parcel_area or not footprint:
        return {"error": "Parcel area and building footprint required"}

    ratio = footprint / parcel_area
    percent = ratio * 100
    return {
        "type": "coverage",
        "parcel_area": parcel_area,
        "building_footprint": footprint,
        "coverage_ratio": ratio,
        "coverage_percent": percent,
        "formatted": f"{percent:.1f}%",
        "ces": f"{ratio:.2f}",
    }


CALCULATION_TYPES = ("surface", "distance", "volume", "setback", "coverage")


def run_calculation(
    kind: str,
    data: dict,
    pixels_per_meter: float,
    minimum_setback: Optional[float] = None,
) -> dict:
    """Dispatch a canvas calculation by kind.

    Raises:
        ValueError: unknown calculation kind or non-positive scale.
    """
    if pixels_per_meter is None or pixels_per_meter <= 0:
        raise ValueError(
            f"pixels_per_meter must be strictly positive, got {pixels_per_meter}"
        )

    if kind == "surface":
        return calculate_surface(data, pixels_per_meter)
    if kind == "distance":
        return calculate_distance(data, pixels_per_meter)
    if kind == "volume":
        return calculate_volume(data, pixels_per_meter)
    if kind == "setback":
        if minimum_setback is None:
            from urbassist.config import settings
            minimum_setback = settings.default_setback_minimum_m
        return calculate_setback(data, pixels_per_meter, minimum_setback)
    if kind == "coverage":
        return calculate_coverage(data)

    logger.warning("Unknown calculation type: %s", kind)
    raise ValueError(f"Invalid calculation type: {kind}")
