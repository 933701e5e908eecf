"""
Cadastral parcel merge engine.

A project often spans several cadastral parcels. This module unions their
polygons into one site, measures it, and classifies the boundary edges of a
parcel as front / side / rear relative to the road.

Merging is a left-to-right fold: the first valid geometry seeds the
accumulator and each following parcel is unioned into it. A parcel whose
union fails is logged and skipped so one bad polygon never aborts the batch.
The fold order is fixed by the input order, which keeps results
deterministic.
"""

from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

from pyproj import Geod
from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Polygon, shape
from shapely.geometry.polygon import orient
from shapely.geometry.base import BaseGeometry

from urbassist.config import settings
from urbassist.models.schemas import BoundaryEdge, ParcelGeometry
from urbassist.planning_engine.geometry import (
    great_circle_distance,
    initial_bearing,
    ring_centroid,
)

logger = logging.getLogger(__name__)

_GEOD = Geod(ellps="WGS84")

# Half-width (degrees) of the angular sectors around the road direction
FRONT_SECTOR_DEG = 45
REAR_SECTOR_DEG = 135


# ──────────────────────────────────────────────────────────────────
# GEOMETRY PARSING
# ──────────────────────────────────────────────────────────────────

def _parse_geometry(geometry: Optional[dict]) -> Optional[BaseGeometry]:
    """Shapely geometry for a GeoJSON Polygon/MultiPolygon, None if unusable."""
    if not geometry or geometry.get("type") not in ("Polygon", "MultiPolygon"):
        return None
    if not geometry.get("coordinates"):
        return None
    try:
        geom = shape(geometry)
    except (GEOSException, ValueError, TypeError, IndexError) as e:
        logger.warning("Unparsable parcel geometry: %s", e)
        return None
    if geom.is_empty:
        return None
    return geom


def _oriented(geom: BaseGeometry) -> BaseGeometry:
    """Shells counter-clockwise, holes clockwise, for every polygon part."""
    if isinstance(geom, Polygon):
        return orient(geom, 1.0)
    if isinstance(geom, MultiPolygon):
        return MultiPolygon([orient(p, 1.0) for p in geom.geoms])
    return geom


def geometry_area(geom: BaseGeometry, geodesic: bool = True) -> float:
    """Area in m² for [lng, lat] geometries, or in squared planar units.

    pyproj sums signed ring areas, so rings are oriented first: the result
    does not depend on the input winding.
    """
    if geodesic:
        area, _perimeter = _GEOD.geometry_area_perimeter(_oriented(geom))
        return abs(area)
    return geom.area


# ──────────────────────────────────────────────────────────────────
# MERGE
# ──────────────────────────────────────────────────────────────────

def merge_parcel_geometries(
    parcels: Sequence[ParcelGeometry],
    geodesic: bool = True,
) -> Optional[dict]:
    """Union parcel polygons into a single GeoJSON Feature.

    Parcels without a usable geometry are dropped and counted. Returns None
    when no parcel has a usable geometry.

    The Feature's properties record the provenance of the merge:
    id, section, number ("merged"), area (rounded m²), merged, sourceParcelIds,
    sourceCount, skippedParcelIds, skippedCount.
    """
    valid: list[tuple[ParcelGeometry, BaseGeometry]] = []
    skipped: list[str] = []

    for parcel in parcels:
        geom = _parse_geometry(parcel.geometry)
        if geom is None:
            skipped.append(parcel.id)
            continue
        valid.append((parcel, geom))

    if not valid:
        logger.warning("No valid geometry among %d parcels", len(parcels))
        return None

    first_parcel, merged = valid[0]
    contributing = [first_parcel]

    if len(valid) == 1:
        geometry = first_parcel.geometry
    else:
        for parcel, geom in valid[1:]:
            try:
                result = merged.union(geom)
            except (GEOSException, ValueError) as e:
                logger.warning("Failed to merge parcel %s: %s", parcel.id, e)
                skipped.append(parcel.id)
                continue
            if result.is_empty:
                logger.warning("Union with parcel %s produced an empty geometry", parcel.id)
                skipped.append(parcel.id)
                continue
            merged = result
            contributing.append(parcel)
        geometry = json.loads(json.dumps(merged.__geo_interface__))

    if skipped:
        logger.info(
            "Merged %d parcels, skipped %d: %s",
            len(contributing), len(skipped), ", ".join(skipped),
        )

    return {
        "type": "Feature",
        "geometry": geometry,
        "properties": {
            "id": "+".join(p.id for p in contributing),
            "section": "+".join(_unique_ordered(p.section for p in contributing if p.section)),
            "number": "merged",
            "area": round(geometry_area(merged, geodesic)),
            "merged": True,
            "sourceParcelIds": [p.id for p in contributing],
            "sourceCount": len(contributing),
            "skippedParcelIds": skipped,
            "skippedCount": len(skipped),
        },
    }


def compute_total_area(parcels: Sequence[ParcelGeometry]) -> float:
    """Sum of the stored cadastral areas.

    A quick estimate that ignores overlaps; it can differ from the merged
    polygon's area.
    """
    return sum(p.area or 0 for p in parcels)


def are_adjacent(a: ParcelGeometry, b: ParcelGeometry) -> bool:
    """True when the two parcels share a boundary or overlap."""
    geom_a = _parse_geometry(a.geometry)
    geom_b = _parse_geometry(b.geometry)
    if geom_a is None or geom_b is None:
        return False
    try:
        return geom_a.intersects(geom_b)
    except GEOSException as e:
        logger.warning("Adjacency test failed for %s / %s: %s", a.id, b.id, e)
        return False


def _unique_ordered(items) -> list:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


# ──────────────────────────────────────────────────────────────────
# BOUNDARY EDGE CLASSIFICATION
# ──────────────────────────────────────────────────────────────────

def angular_difference(bearing: float, reference: float) -> float:
    """Symmetric angular distance between two bearings, in [0, 180]."""
    return abs(((bearing - reference + 540) % 360) - 180)


def classify_boundary_edges(
    geometry: Optional[dict],
    road_bearing: Optional[float] = None,
) -> list[BoundaryEdge]:
    """Classify each edge of a parcel's outer ring as front, side or rear.

    Args:
        geometry: GeoJSON Polygon in [lng, lat]. MultiPolygons are not supported.
        road_bearing: bearing (degrees) from the parcel toward the road. When
            None the configured default (south, 180°) is used.

    Returns one BoundaryEdge per ring segment, or [] for unsupported input.
    """
    if not geometry or geometry.get("type") != "Polygon":
        return []
    rings = geometry.get("coordinates") or []
    if not rings or len(rings[0]) < 4:
        return []

    if road_bearing is None:
        road_bearing = settings.default_road_bearing
        logger.info("No road bearing supplied, assuming %.0f°", road_bearing)

    ring = rings[0]
    cx, cy = ring_centroid(rings)

    edges = []
    for i in range(len(ring) - 1):
        start = (float(ring[i][0]), float(ring[i][1]))
        end = (float(ring[i + 1][0]), float(ring[i + 1][1]))
        mid = ((start[0] + end[0]) / 2, (start[1] + end[1]) / 2)

        edge_bearing = initial_bearing((cx, cy), mid)
        diff = angular_difference(edge_bearing, road_bearing)

        if diff < FRONT_SECTOR_DEG:
            edge_type = "front"
        elif diff > REAR_SECTOR_DEG:
            edge_type = "rear"
        else:
            # Edge vector crossed with the centroid -> start vector. The centroid
            # is on the same side of every edge of a convex ring, so both sides
            # of a square share a label: side-right when wound CCW.
            cross = (
                (end[0] - start[0]) * (start[1] - cy)
                - (end[1] - start[1]) * (start[0] - cx)
            )
            edge_type = "side-left" if cross > 0 else "side-right"

        edges.append(BoundaryEdge(
            type=edge_type,
            start_point=start,
            end_point=end,
            length=great_circle_distance(start, end),
        ))

    return edges
