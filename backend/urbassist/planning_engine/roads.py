"""
Road classification and road bearing.

Works on OpenStreetMap ways already fetched from the Overpass API by the
caller (`way["highway"](around:...)` followed by `>;` so the node
coordinates are included). The measured bearing toward the nearest road is
what boundary-edge classification should use instead of its 180° default.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Optional, Sequence

from urbassist.planning_engine.geometry import great_circle_distance, initial_bearing

logger = logging.getLogger(__name__)


# Road reference prefix -> French road class (A7, N7, D123, C4 ...)
_REF_CLASSES = [
    ("A", "autoroute", "Autoroute"),
    ("N", "voie_nationale", "Route nationale"),
    ("D", "voie_departementale", "Route départementale"),
    ("C", "voie_communale", "Voie communale"),
]

# OSM highway tag -> French road class
_HIGHWAY_CLASSES = {
    "motorway": ("autoroute", "Autoroute"),
    "motorway_link": ("autoroute", "Autoroute"),
    "trunk": ("voie_nationale", "Route nationale"),
    "trunk_link": ("voie_nationale", "Route nationale"),
    "primary": ("voie_departementale", "Route départementale"),
    "primary_link": ("voie_departementale", "Route départementale"),
    "secondary": ("voie_departementale", "Route départementale"),
    "secondary_link": ("voie_departementale", "Route départementale"),
    "tertiary": ("voie_communale", "Voie communale"),
    "tertiary_link": ("voie_communale", "Voie communale"),
    "residential": ("voie_communale", "Voie communale"),
    "living_street": ("voie_communale", "Voie communale"),
    "unclassified": ("voie_communale", "Voie communale"),
    "track": ("chemin_rural", "Chemin rural"),
    "path": ("chemin_rural", "Chemin rural"),
    "bridleway": ("chemin_rural", "Chemin rural"),
    "service": ("voie_privee", "Voie privée / Desserte"),
}


def classify_road(highway: str, ref: Optional[str] = None) -> tuple[str, str]:
    """French road classification for an OSM way.

    The road reference wins over the highway tag: a "D123" tagged as
    "tertiary" is still a departmental road.

    Returns (classification, label).
    """
    ref_upper = (ref or "").strip().upper()
    for prefix, classification, label in _REF_CLASSES:
        if re.match(rf"^{prefix}\d", ref_upper):
            return classification, label

    return _HIGHWAY_CLASSES.get(highway, ("inconnu", "Voie non classée"))


def summarize_roads(
    elements: Sequence[dict],
    lat: float,
    lng: float,
    limit: int = 10,
) -> list[dict]:
    """Closest distinct roads around a point, nearest first.

    Args:
        elements: Overpass "elements" array (ways and their nodes)
        lat, lng: reference point, usually the parcel centroid
        limit: maximum number of roads returned

    Each road dict has name, type, classification, classification_label,
    distance (m, rounded), ref and bearing (from the reference point to the
    road's closest node).
    """
    nodes = {
        el["id"]: (el["lon"], el["lat"])
        for el in elements
        if el.get("type") == "node" and "lat" in el and "lon" in el
    }
    origin = (lng, lat)

    roads = []
    seen = set()
    for way in elements:
        if way.get("type") != "way":
            continue
        tags = way.get("tags") or {}
        highway = tags.get("highway")
        if not highway:
            continue

        ref = tags.get("ref") or ""
        name = tags.get("name") or ref or f"Unnamed {highway}"
        key = f"{name}-{highway}"
        if key in seen:
            continue
        seen.add(key)

        way_points = [nodes[nid] for nid in way.get("nodes", []) if nid in nodes]
        closest = _closest_point(origin, way_points)
        if closest is None:
            distance = math.inf
            bearing = None
        else:
            distance = great_circle_distance(origin, closest)
            bearing = round(initial_bearing(origin, closest) % 360, 1)

        classification, label = classify_road(highway, ref)
        roads.append({
            "name": name,
            "type": highway,
            "classification": classification,
            "classification_label": label,
            "distance": round(distance) if math.isfinite(distance) else None,
            "ref": ref or None,
            "bearing": bearing,
            "_sort": distance,
        })

    roads.sort(key=lambda r: r["_sort"])
    for road in roads:
        del road["_sort"]
    return roads[:limit]


def nearest_road_bearing(
    origin: Sequence[float],
    road_points: Sequence[Sequence[float]],
) -> Optional[float]:
    """Bearing in [0, 360) from origin to the closest road point, both [lng, lat].

    Returns None when there are no road points.
    """
    closest = _closest_point(origin, road_points)
    if closest is None:
        logger.debug("No road points supplied, road bearing unknown")
        return None
    return initial_bearing(origin, closest) % 360


def _closest_point(origin, points) -> Optional[tuple[float, float]]:
    best = None
    best_dist = math.inf
    for p in points:
        d = great_circle_distance(origin, p)
        if d < best_dist:
            best, best_dist = (float(p[0]), float(p[1])), d
    return best
