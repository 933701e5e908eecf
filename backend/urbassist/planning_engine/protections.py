"""
Public-utility servitude (SUP) classification.

Splits the protected areas covering a parcel into critical items (heritage,
ABF perimeters, flood / technological / mining risk), which carry legal
obligations, and secondary technical servitudes (power lines, gas, telecoms).

An item is critical when any of these holds:
  1. its type is ABF, FLOOD_ZONE or HERITAGE
  2. its SUP category code starts with a critical code (AC1, PM1 ...)
  3. its name or description mentions a heritage or risk keyword
INFO items are general notices and are dropped.
"""

from __future__ import annotations

import logging
from typing import Iterable, Union

from urbassist.models.schemas import (
    ClassifiedProtection,
    ProcessedProtections,
    ProtectedArea,
)

logger = logging.getLogger(__name__)

CRITICAL_CODES = (
    "AC1",  # Monument historique
    "AC2",  # Site patrimonial remarquable / site classé
    "AC4",  # Périmètre des abords (ABF 500 m)
    "PM1",  # PPRI
    "PM2",  # PPRT
    "PM3",  # Risque minier
)

ABF_CODES = ("AC1", "AC2", "AC4")

CRITICAL_TYPES = ("ABF", "FLOOD_ZONE", "HERITAGE")

CRITICAL_TEXT_PATTERNS = (
    # heritage
    "monument historique",
    "monuments historiques",
    "abf",
    "architecte des bâtiments",
    "architecte des batiments",
    "site classé",
    "site inscrit",
    "site patrimonial",
    "sites patrimoniaux",
    "secteur sauvegardé",
    "patrimoine",
    "patrimonial",
    "périmètre de protection",
    "perimetre de protection",
    "abords",
    # flood / risk
    "p.p.r.i",
    "ppri",
    "inondation",
    "inondable",
    "plan de prévention des risques",
    "plan de prevention des risques",
    "zone à risque",
    "zone a risque",
    "risque naturel",
    "risque technologique",
    "risque minier",
    "aléa",
    "alea",
    "submersion",
    "crue",
)

SUP_LABEL_MAP = {
    "AC1": "Monument Historique (Classé/Inscrit)",
    "AC2": "Site Classé / Site Inscrit",
    "AC3": "Réserve Naturelle",
    "AC4": "Périmètre des Abords (ABF 500m)",
    "PM1": "Zone Inondable (PPRI)",
    "PM2": "Risque Technologique (PPRT)",
    "PM3": "Risque Minier",
    "A1": "Protection des bois et forêts",
    "A4": "Terrains riverains des cours d'eau",
    "A5": "Canalisations Eau / Assainissement",
    "A7": "Alignement voirie",
    "AR": "Archéologie préventive",
    "EL7": "Servitude d'utilité publique aéronautique",
    "I1": "Canalisations de transport de gaz",
    "I1BIS": "Canalisations de produits chimiques",
    "I3": "Canalisations de transport d'hydrocarbures",
    "I4": "Passage Lignes Électriques",
    "I6": "Mines et carrières",
    "I7": "Stockage souterrain",
    "INT1": "Cimetières",
    "PT1": "Télécommunications",
    "PT2": "Servitudes radioélectriques",
    "PT2LH": "Liaisons hertziennes",
    "PT3": "Centre radioélectrique",
    "T1": "Voies ferrées",
    "T4": "Aérodrome",
    "T5": "Dégagement aéronautique",
    "T7": "Routes express / Autoroutes",
}


def contains_critical_text(text: str) -> bool:
    lower = (text or "").lower()
    return any(pattern in lower for pattern in CRITICAL_TEXT_PATTERNS)


def _is_critical(area: ProtectedArea, code: str) -> bool:
    if area.type in CRITICAL_TYPES:
        return True
    if code and code.startswith(CRITICAL_CODES):
        return True
    return contains_critical_text(area.name) or contains_critical_text(area.description or "")


def _requires_abf(item: ClassifiedProtection) -> bool:
    return (
        item.type in ("ABF", "HERITAGE")
        or (item.categorie or "").startswith(ABF_CODES)
        or contains_critical_text(item.name)
    )


def process_protections(
    areas: Iterable[Union[ProtectedArea, dict]],
) -> ProcessedProtections:
    """Classify protected areas into critical and secondary servitudes.

    Critical items are reported with severity "high". Labels come from the
    SUP code table, then the area's own name, then "Autre servitude".
    """
    critical: list[ClassifiedProtection] = []
    secondary: list[ClassifiedProtection] = []

    for area in areas:
        if not isinstance(area, ProtectedArea):
            area = ProtectedArea.model_validate(area)
        if area.type == "INFO":
            continue

        code = (area.categorie or "").strip().upper()
        is_critical = _is_critical(area, code)

        item = ClassifiedProtection(
            type=area.type,
            name=area.name,
            description=area.description,
            severity="high" if is_critical else area.severity,
            source_url=area.source_url,
            constraints=area.constraints,
            categorie=code or None,
            label=(code and SUP_LABEL_MAP.get(code)) or area.name or "Autre servitude",
            is_critical=is_critical,
        )
        (critical if is_critical else secondary).append(item)

    requires_abf = any(_requires_abf(item) for item in critical)
    logger.debug(
        "Protections: %d critical, %d secondary, ABF=%s",
        len(critical), len(secondary), requires_abf,
    )
    return ProcessedProtections(
        critical_items=critical,
        secondary_items=secondary,
        requires_abf=requires_abf,
    )
