"""
Déclaration Préalable / Permis de Construire determination.

Decides which planning authorization a project needs from its type, the
floor area it creates, the existing floor area and the zone context.
Thresholds (Code de l'urbanisme):
  - R.421-1 / R.421-9: new constructions, DP under 20 m², PC from 20 m²
  - R.421-14 / R.421-17: extensions, PC above 40 m² in urban zones
  - L.431-1 / R.431-2: architect mandatory above 150 m² total floor area,
    and for any permit requested by a legal person
  - R.421-12: fences and gates under DP

The decision is an ordered list of rules; the first rule that applies wins.
Outdoor amenities are deliberately not auto-decided (REVIEW): their
treatment depends on local rules.

Explanations are user-facing French text and always restate the areas
they were computed from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Union

from urbassist.models.schemas import (
    Determination,
    DpPcInput,
    DpPcResult,
    ProjectType,
    SubmitterType,
)

logger = logging.getLogger(__name__)

NEW_CONSTRUCTION_DP_MAX_M2 = 20  # strict: 20 m² is already PC
EXTENSION_DP_MAX_M2 = 40
ARCHITECT_THRESHOLD_M2 = 150
POOL_EXEMPT_UNDER_M2 = 10
POOL_DP_MAX_M2 = 100
POOL_SHELTER_MAX_HEIGHT_M = 1.80

# Share of ground footprint x levels counted as surface de plancher:
# headroom under 1.80 m, stair openings and wall thickness are excluded.
# An estimate, not a survey figure.
FLOOR_AREA_COEFFICIENT = 0.79


def _m2(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return f"{text} m²"


def estimate_floor_area_created(
    ground_area_m2: float,
    number_of_levels: int,
    is_garage: bool = False,
) -> float:
    """Approximate surface de plancher created: footprint x levels x 0.79.

    Garages are excluded from surface de plancher and return 0.
    """
    if is_garage or ground_area_m2 <= 0 or number_of_levels < 1:
        return 0.0
    return round(ground_area_m2 * number_of_levels * FLOOR_AREA_COEFFICIENT, 2)


# ──────────────────────────────────────────────────────────────────
# RULES
# ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DecisionRule:
    name: str
    applies: Callable[[DpPcInput], bool]
    decide: Callable[[DpPcInput], DpPcResult]


def _change_of_use(inp: DpPcInput) -> DpPcResult:
    return DpPcResult(
        determination=Determination.PC,
        explanation=(
            "Un projet avec changement de destination ou modification de façade "
            "est soumis au permis de construire, quelle que soit la surface."
        ),
        detail="change_of_use_or_facade",
    )


def _outdoor(inp: DpPcInput) -> DpPcResult:
    return DpPcResult(
        determination=Determination.REVIEW,
        explanation=(
            "Pour un aménagement extérieur (clôture, terrasse, etc.), le type "
            "d'autorisation dépend des règles locales. Vérification recommandée "
            "auprès de votre mairie."
        ),
        detail="outdoor",
    )


def _swimming_pool(inp: DpPcInput) -> DpPcResult:
    area = inp.floor_area_created
    shelter = inp.shelter_height or 0

    if area < POOL_EXEMPT_UNDER_M2:
        return DpPcResult(
            determination=Determination.NONE,
            explanation=(
                f"La piscine fait {_m2(area)} (moins de {_m2(POOL_EXEMPT_UNDER_M2)}). "
                "Aucune autorisation n'est requise."
            ),
            detail="pool<10",
        )

    if area <= POOL_DP_MAX_M2:
        if shelter > POOL_SHELTER_MAX_HEIGHT_M:
            return DpPcResult(
                determination=Determination.PC,
                explanation=(
                    f"La piscine fait {_m2(area)} avec un abri de {shelter:g} m "
                    f"(plus de {POOL_SHELTER_MAX_HEIGHT_M:.2f} m de haut). "
                    "Un permis de construire est nécessaire."
                ),
                detail="pool_shelter>1.80",
            )
        return DpPcResult(
            determination=Determination.DP,
            explanation=(
                f"La piscine fait {_m2(area)} (entre {_m2(POOL_EXEMPT_UNDER_M2)} "
                f"et {_m2(POOL_DP_MAX_M2)}). Une déclaration préalable est requise."
            ),
            detail="pool_10-100",
        )

    return DpPcResult(
        determination=Determination.PC,
        explanation=(
            f"La piscine fait {_m2(area)} (plus de {_m2(POOL_DP_MAX_M2)}). "
            "Un permis de construire est nécessaire."
        ),
        detail="pool>100",
    )


def _facade_change(inp: DpPcInput) -> DpPcResult:
    return DpPcResult(
        determination=Determination.PC,
        explanation=(
            "Une modification de façade ou un changement de destination "
            "nécessite un permis de construire."
        ),
        detail="facade_change_type",
    )


def _fence(inp: DpPcInput) -> DpPcResult:
    return DpPcResult(
        determination=Determination.DP,
        explanation=(
            "L'édification d'une clôture ou d'un portail est soumise à une "
            "déclaration préalable (article R.421-12 du Code de l'urbanisme)."
        ),
        detail="fence_gate",
    )


def _outdoor_other(inp: DpPcInput) -> DpPcResult:
    return DpPcResult(
        determination=Determination.REVIEW,
        explanation=(
            "Pour cet aménagement extérieur, le type d'autorisation dépend de la "
            "nature exacte des travaux et des règles locales. Contactez votre "
            "mairie pour vérification."
        ),
        detail="outdoor_other",
    )


def _new_construction(inp: DpPcInput) -> DpPcResult:
    created = inp.floor_area_created
    existing = inp.existing_floor_area
    total = existing + created
    areas = (
        f"Surface de plancher créée : {_m2(created)}, surface existante : "
        f"{_m2(existing)}, surface totale après travaux : {_m2(total)}."
    )

    if created < NEW_CONSTRUCTION_DP_MAX_M2:
        return DpPcResult(
            determination=Determination.DP,
            explanation=(
                f"{areas} La surface créée est inférieure à "
                f"{_m2(NEW_CONSTRUCTION_DP_MAX_M2)} : une déclaration préalable suffit."
            ),
            detail="new<20",
        )

    if total > ARCHITECT_THRESHOLD_M2:
        return DpPcResult(
            determination=Determination.ARCHITECT_REQUIRED,
            explanation=(
                f"{areas} Un permis de construire est nécessaire et, la surface "
                f"totale dépassant {_m2(ARCHITECT_THRESHOLD_M2)}, le recours à un "
                "architecte est obligatoire."
            ),
            detail="new_total>150",
            architect_required=True,
        )

    return DpPcResult(
        determination=Determination.PC,
        explanation=(
            f"{areas} La surface créée atteint ou dépasse "
            f"{_m2(NEW_CONSTRUCTION_DP_MAX_M2)} : un permis de construire est nécessaire."
        ),
        detail="new>=20",
    )


def _existing_extension(inp: DpPcInput) -> DpPcResult:
    created = inp.floor_area_created
    existing = inp.existing_floor_area
    total = existing + created
    ground = inp.ground_area_extension
    zone = "en zone urbaine" if inp.in_urban_zone else "hors zone urbaine"
    areas = (
        f"Surface de plancher créée : {_m2(created)} ({zone}), surface existante : "
        f"{_m2(existing)}, surface totale après travaux : {_m2(total)}."
    )

    ground_over = ground is not None and ground > EXTENSION_DP_MAX_M2
    floor_over = inp.in_urban_zone and created > EXTENSION_DP_MAX_M2
    total_over = total > ARCHITECT_THRESHOLD_M2

    reasons = []
    if ground_over:
        reasons.append(
            f"l'emprise au sol de l'extension ({_m2(ground)}) dépasse "
            f"{_m2(EXTENSION_DP_MAX_M2)}"
        )
    if floor_over:
        reasons.append(
            f"la surface de plancher créée ({_m2(created)}) dépasse "
            f"{_m2(EXTENSION_DP_MAX_M2)} en zone urbaine"
        )
    if total_over:
        reasons.append(
            f"la surface totale après travaux ({_m2(total)}) dépasse "
            f"{_m2(ARCHITECT_THRESHOLD_M2)}"
        )

    if not reasons:
        return DpPcResult(
            determination=Determination.DP,
            explanation=(
                f"{areas} L'extension reste sous les seuils "
                f"({_m2(EXTENSION_DP_MAX_M2)} créés, {_m2(ARCHITECT_THRESHOLD_M2)} au "
                "total) : une déclaration préalable suffit."
            ),
            detail="ext<=40",
        )

    if total_over:
        detail = "ext>40_total>150" if (ground_over or floor_over) else "ext_total>150"
        return DpPcResult(
            determination=Determination.ARCHITECT_REQUIRED,
            explanation=(
                f"{areas} Un permis de construire est nécessaire car "
                f"{' et '.join(reasons)}. Le recours à un architecte est obligatoire."
            ),
            detail=detail,
            architect_required=True,
        )

    return DpPcResult(
        determination=Determination.PC,
        explanation=(
            f"{areas} Un permis de construire est nécessaire car "
            f"{' et '.join(reasons)}."
        ),
        detail="ext>40",
    )


def _is(project_type: ProjectType) -> Callable[[DpPcInput], bool]:
    return lambda inp: inp.project_type == project_type


DECISION_RULES: tuple[DecisionRule, ...] = (
    DecisionRule("change_of_use_or_facade", lambda inp: inp.change_of_use_or_facade, _change_of_use),
    DecisionRule("outdoor", _is(ProjectType.OUTDOOR), _outdoor),
    DecisionRule("swimming_pool", _is(ProjectType.SWIMMING_POOL), _swimming_pool),
    DecisionRule("facade_change", _is(ProjectType.FACADE_CHANGE), _facade_change),
    DecisionRule("outdoor_fence", _is(ProjectType.OUTDOOR_FENCE), _fence),
    DecisionRule("outdoor_other", _is(ProjectType.OUTDOOR_OTHER), _outdoor_other),
    DecisionRule("new_construction", _is(ProjectType.NEW_CONSTRUCTION), _new_construction),
    DecisionRule("existing_extension", _is(ProjectType.EXISTING_EXTENSION), _existing_extension),
)


# ──────────────────────────────────────────────────────────────────
# ENTRY POINT
# ──────────────────────────────────────────────────────────────────

def _apply_company_architect(result: DpPcResult, submitter_type: SubmitterType) -> DpPcResult:
    """A legal person must always use an architect for a building permit."""
    if submitter_type != SubmitterType.COMPANY or result.determination != Determination.PC:
        return result
    return DpPcResult(
        determination=Determination.ARCHITECT_REQUIRED,
        explanation=(
            f"{result.explanation} En tant qu'entreprise (personne morale), le "
            "recours à un architecte est obligatoire pour un permis de construire."
        ),
        detail=f"{result.detail}_company" if result.detail else "company",
        architect_required=True,
    )


def calculate_dp_pc(inp: Union[DpPcInput, dict]) -> DpPcResult:
    """Determine DP / PC / ARCHITECT_REQUIRED / REVIEW for a project."""
    if not isinstance(inp, DpPcInput):
        inp = DpPcInput.model_validate(inp)

    for rule in DECISION_RULES:
        if rule.applies(inp):
            logger.debug("DP/PC rule %s matched for %s", rule.name, inp.project_type.value)
            return _apply_company_architect(rule.decide(inp), inp.submitter_type)

    logger.warning("No DP/PC rule for project type %s", inp.project_type)
    return DpPcResult(
        determination=Determination.REVIEW,
        explanation=(
            "Impossible de déterminer automatiquement le type d'autorisation. "
            "Vérification recommandée."
        ),
        detail="unknown",
    )
