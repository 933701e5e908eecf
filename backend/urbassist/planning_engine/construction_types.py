"""
Construction-type rule table.

Type-specific overrides layered on top of the zone-level PLU rules
(Code de l'urbanisme):
  - Art. R.421-2: small constructions exempt from any authorization
  - Art. R.421-9: declarations for annexes and small constructions
  - Art. R.421-17: extensions of existing buildings
  - Art. R.111-18: pool distance to boundaries

Setback overrides are three-state:
  None -> defer to the PLU zone value
  0    -> explicitly allowed on the plot boundary
  > 0  -> fixed distance in metres, replacing the PLU value

Heights only narrow the PLU baseline (the lower of both wins); setbacks
replace it outright.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional


class ConstructionType(str, Enum):
    MAIN_HOUSE = "main_house"
    EXTENSION = "extension"
    SHED = "shed"
    CARPORT = "carport"
    POOL = "pool"
    ANNEX = "annex"


@dataclass(frozen=True)
class SetbackOverrides:
    front: Optional[float] = None
    side: Optional[float] = None
    rear: Optional[float] = None


@dataclass(frozen=True)
class ConstructionTypeRule:
    label: str
    label_fr: str
    setbacks: SetbackOverrides
    max_height: Optional[float]
    max_ridge_height: Optional[float]
    count_in_ces: bool
    exempt_up_to_m2: Optional[float]
    permit_above_exempt: Optional[str]  # "DP", "PC" or None
    note: str = ""


# ──────────────────────────────────────────────────────────────────
# RULE TABLE
# ──────────────────────────────────────────────────────────────────

CONSTRUCTION_TYPE_RULES: Mapping[ConstructionType, ConstructionTypeRule] = MappingProxyType({
    ConstructionType.MAIN_HOUSE: ConstructionTypeRule(
        label="Main house",
        label_fr="Maison principale",
        setbacks=SetbackOverrides(),
        max_height=None,
        max_ridge_height=None,
        count_in_ces=True,
        exempt_up_to_m2=None,
        permit_above_exempt="PC",
        note="Full PLU setbacks and height rules apply. Permis de construire required.",
    ),
    ConstructionType.EXTENSION: ConstructionTypeRule(
        label="Extension",
        label_fr="Extension",
        setbacks=SetbackOverrides(),
        max_height=None,
        max_ridge_height=None,
        count_in_ces=True,
        exempt_up_to_m2=40,  # DP up to 40 m² in urban zone (R.421-17)
        permit_above_exempt="PC",
        note="DP up to 40 m² in urban zone. PC above 40 m² or when the total exceeds 150 m².",
    ),
    ConstructionType.SHED: ConstructionTypeRule(
        label="Garden shed",
        label_fr="Abri de jardin",
        setbacks=SetbackOverrides(side=0, rear=0),
        max_height=3.5,
        max_ridge_height=4.0,
        count_in_ces=True,
        exempt_up_to_m2=5,  # R.421-2
        permit_above_exempt="DP",
        note="Up to 5 m²: no permit. 5-20 m²: déclaration préalable. May sit on side/rear boundary.",
    ),
    ConstructionType.CARPORT: ConstructionTypeRule(
        label="Carport",
        label_fr="Carport / auvent",
        setbacks=SetbackOverrides(side=0, rear=0),
        max_height=3.0,
        max_ridge_height=3.5,
        count_in_ces=True,
        exempt_up_to_m2=20,
        permit_above_exempt="PC",
        note="Open structure up to 20 m²: déclaration préalable. Above 20 m²: permis de construire.",
    ),
    ConstructionType.POOL: ConstructionTypeRule(
        label="Swimming pool",
        label_fr="Piscine",
        setbacks=SetbackOverrides(front=1, side=1, rear=1),  # R.111-18
        max_height=None,
        max_ridge_height=None,
        count_in_ces=False,
        exempt_up_to_m2=10,
        permit_above_exempt="DP",
        note="Excluded from CES. At least 1 m from every boundary. Above 10 m²: déclaration préalable.",
    ),
    ConstructionType.ANNEX: ConstructionTypeRule(
        label="Annex",
        label_fr="Annexe",
        setbacks=SetbackOverrides(side=0, rear=0),
        max_height=3.5,
        max_ridge_height=4.0,
        count_in_ces=True,
        exempt_up_to_m2=5,
        permit_above_exempt="DP",
        note="Attached or detached annex. Up to 5 m²: no permit. 5-20 m²: DP (R.421-9).",
    ),
})

_missing = set(ConstructionType) - set(CONSTRUCTION_TYPE_RULES)
if _missing:
    raise RuntimeError(
        f"Construction type rule table is missing: {sorted(t.value for t in _missing)}"
    )


# Site-plan editor presets -> rule key
PRESET_TO_CONSTRUCTION_TYPE: Mapping[str, ConstructionType] = MappingProxyType({
    "house-small": ConstructionType.MAIN_HOUSE,
    "house-medium": ConstructionType.MAIN_HOUSE,
    "house-large": ConstructionType.MAIN_HOUSE,
    "extension": ConstructionType.EXTENSION,
    "garage": ConstructionType.MAIN_HOUSE,
    "pool": ConstructionType.POOL,
    "terrace": ConstructionType.MAIN_HOUSE,
    "green": ConstructionType.MAIN_HOUSE,
    "shed-small": ConstructionType.SHED,
    "carport": ConstructionType.CARPORT,
    "annex": ConstructionType.ANNEX,
    "custom": ConstructionType.MAIN_HOUSE,
})


# ──────────────────────────────────────────────────────────────────
# RESOLUTION
# ──────────────────────────────────────────────────────────────────

def get_rule(construction_type: ConstructionType | str) -> ConstructionTypeRule:
    """Look up the rule for a construction type.

    Raises ValueError for a value outside the ConstructionType domain.
    """
    return CONSTRUCTION_TYPE_RULES[ConstructionType(construction_type)]


def construction_type_for_preset(preset_id: str) -> ConstructionType:
    return PRESET_TO_CONSTRUCTION_TYPE.get(preset_id, ConstructionType.MAIN_HOUSE)


def resolve_setback(
    dimension: str,
    construction_type: ConstructionType | str,
    plu_setback: float,
) -> float:
    """Effective setback for one side: the type override, else the PLU value."""
    if dimension not in ("front", "side", "rear"):
        raise ValueError(f"Unknown setback dimension: {dimension}")
    override = getattr(get_rule(construction_type).setbacks, dimension)
    if override is not None:
        return override
    return plu_setback


def resolve_setbacks(
    construction_type: ConstructionType | str,
    plu_front: float,
    plu_side: float,
    plu_rear: float,
) -> dict:
    return {
        "front": resolve_setback("front", construction_type, plu_front),
        "side": resolve_setback("side", construction_type, plu_side),
        "rear": resolve_setback("rear", construction_type, plu_rear),
    }


def resolve_max_height(
    construction_type: ConstructionType | str,
    plu_max_height: float,
) -> float:
    """The more restrictive of the type cap and the PLU maximum height."""
    type_max = get_rule(construction_type).max_height
    if type_max is not None:
        return min(type_max, plu_max_height)
    return plu_max_height


def resolve_max_ridge_height(
    construction_type: ConstructionType | str,
    plu_max_ridge_height: float,
) -> float:
    type_max = get_rule(construction_type).max_ridge_height
    if type_max is not None:
        return min(type_max, plu_max_ridge_height)
    return plu_max_ridge_height


def counts_in_ces(construction_type: ConstructionType | str) -> bool:
    return get_rule(construction_type).count_in_ces


def exemption_for_area(
    construction_type: ConstructionType | str,
    area_m2: float,
) -> Optional[str]:
    """Permit needed for an element of this type and area.

    Returns None when the element is at or under the type's exemption
    threshold, else the permit required above it ("DP" or "PC").
    """
    rule = get_rule(construction_type)
    if rule.exempt_up_to_m2 is not None and area_m2 <= rule.exempt_up_to_m2:
        return None
    return rule.permit_above_exempt


def compute_ces(
    elements: Iterable[tuple[ConstructionType | str, float]],
    parcel_area: float,
) -> dict:
    """Ground coverage ratio (CES) of the site plan elements.

    Args:
        elements: (construction_type, footprint m²) pairs
        parcel_area: parcel area in m²

    Returns dict with counted_footprint, excluded_footprint, ces, ces_percent.
    """
    if parcel_area <= 0:
        raise ValueError(f"Parcel area must be positive, got {parcel_area}")

    counted = 0.0
    excluded = 0.0
    for construction_type, footprint in elements:
        if counts_in_ces(construction_type):
            counted += footprint
        else:
            excluded += footprint

    ces = counted / parcel_area
    return {
        "counted_footprint": round(counted, 2),
        "excluded_footprint": round(excluded, 2),
        "ces": round(ces, 4),
        "ces_percent": round(ces * 100, 1),
    }
