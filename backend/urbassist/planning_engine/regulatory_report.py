"""
"Analyse de la réglementation" report.

Turns the per-rule compliance checks of a PLU analysis into the sections of
the export template: project situation, one table per regulation chapter
(regulation / conformité / recommandations) and a conclusion naming the
dossier type (DP, PC or architect required).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence, Union

from urbassist.models.schemas import (
    AnalysisResult,
    Determination,
    DpPcResult,
    RegulatoryReport,
    ReportConclusion,
    ReportDetermination,
    ReportRow,
    ReportSituation,
)

logger = logging.getLogger(__name__)

REPORT_TITLE = "ANALYSE DE LA RÉGLEMENTATION"

CHARACTERISTIC_CATEGORIES = ("Height", "Setback", "Coverage", "Distance", "Architectural", "Zone")
PARKING_CATEGORIES = ("Parking",)
GREEN_SPACE_CATEGORIES = ("Green Space",)
USAGE_CATEGORIES = ("Usage", "Land Use")
ACCESS_CATEGORIES = ("Access", "Networks")
RISK_CATEGORIES = ("Risk", "PPRN")


# ──────────────────────────────────────────────────────────────────
# PLACEHOLDER ROWS
# ──────────────────────────────────────────────────────────────────

_NO_CHARACTERISTICS = [ReportRow(
    regulation="Analyse non disponible. Uploadez un document PLU ou sélectionnez une adresse.",
    conformite="—",
    recommandations="Complétez l'analyse depuis l'onglet AI Analysis.",
)]
_NO_PARKING = [ReportRow(regulation="Non renseigné (voir PLU)", conformite="—")]
_NO_GREEN_SPACE = [ReportRow(regulation="Non réglementé", conformite="OUI")]
_DEFAULT_USAGE = [
    ReportRow(
        regulation="Le projet fait-il partie des destinations ou sous-destinations interdites ?",
        conformite="NON",
    ),
    ReportRow(
        regulation=(
            "Existe-t-il des interdictions ou limitations de certains usages "
            "pouvant affecter le projet ?"
        ),
        conformite="NON",
    ),
]
_DEFAULT_ACCESS = [
    ReportRow(
        regulation=(
            "Conditions de desserte des terrains par les voies et d'accès aux "
            "voies ouvertes au public"
        ),
        conformite="OUI",
    ),
    ReportRow(
        regulation=(
            "Conditions de desserte par les réseaux (eau, électricité, "
            "assainissement, télécommunication)"
        ),
        conformite="OUI",
    ),
]
_DEFAULT_PPRN = [ReportRow(regulation="Plan de prévention des risques naturels", conformite="OUI")]

JUSTIFICATIONS = {
    "ARCHITECT_REQUIRED": "Projet soumis à l'obligation de recourir à un architecte (L.431-1).",
    "PC": (
        "Nouvelles constructions d'emprise au sol supérieure à 20 m² ou "
        "extension dépassant les seuils DP."
    ),
    "DP": "Projet relevant de la déclaration préalable (seuils et zone respectés).",
}

DEFAULT_RECOMMENDATION = "Consultez le PLU complet et la mairie pour valider tous les points."


def to_conformite(status: str) -> str:
    """Map an analysis status onto the report's conformity column."""
    if status in ("compliant", "info"):
        return "OUI"
    if status == "violation":
        return "NON"
    return "À vérifier"


def _rows(results: Sequence[AnalysisResult], categories: Iterable[str]) -> list[ReportRow]:
    wanted = set(categories)
    return [
        ReportRow(
            regulation=r.requirement,
            conformite=to_conformite(r.status),
            recommandations=r.recommendation,
        )
        for r in results
        if r.category in wanted
    ]


def _yes_no(flag: Optional[bool]) -> str:
    if flag is None:
        return "Non renseigné"
    return "OUI" if flag else "NON"


def report_determination_from_result(result: DpPcResult) -> Optional[ReportDetermination]:
    """Dossier type for the report from a DP/PC engine verdict.

    A project needing no authorization is reported as DP. A REVIEW verdict
    gives no explicit determination so the report infers one from the checks.
    """
    if result.determination == Determination.REVIEW:
        return None
    if result.determination == Determination.NONE:
        return ReportDetermination(type="DP", justification=result.explanation)
    return ReportDetermination(type=result.determination.value, justification=result.explanation)


def build_report_from_analysis(
    results: Sequence[Union[AnalysisResult, dict]],
    address: str = "",
    zone_name: str = "",
    determination: Optional[ReportDetermination] = None,
    in_subdivision: bool = False,
    heritage_zone: Optional[bool] = None,
) -> RegulatoryReport:
    """Build the regulatory report from analysis results.

    Args:
        results: compliance checks, each with category, status, requirement
        address: project address, "—" when empty
        zone_name: PLU zone; falls back to the first result's zone label
        determination: explicit dossier type; inferred from violations when None
        in_subdivision: parcel lies in a lotissement
        heritage_zone: parcel lies in an ABF perimeter, None when unknown
    """
    results = [
        r if isinstance(r, AnalysisResult) else AnalysisResult.model_validate(r)
        for r in results
    ]

    zone = zone_name or next((r.zone_label for r in results if r.zone_label), None) or "—"

    caracteristiques = _rows(results, CHARACTERISTIC_CATEGORIES) or list(_NO_CHARACTERISTICS)
    stationnement = _rows(results, PARKING_CATEGORIES) or list(_NO_PARKING)
    environnement = _rows(results, GREEN_SPACE_CATEGORIES) or list(_NO_GREEN_SPACE)
    usage = _rows(results, USAGE_CATEGORIES) or list(_DEFAULT_USAGE)
    acces = _rows(results, ACCESS_CATEGORIES) or list(_DEFAULT_ACCESS)
    pprn = _rows(results, RISK_CATEGORIES) or list(_DEFAULT_PPRN)

    has_violation = any(r.status == "violation" for r in results)
    if determination is not None:
        type_dossier = determination.type
        justification = determination.justification or JUSTIFICATIONS[type_dossier]
    else:
        type_dossier = "PC" if has_violation else "DP"
        justification = JUSTIFICATIONS[type_dossier]

    if has_violation:
        message = "Votre projet semble ne pas être « Conforme » à la réglementation en vigueur."
    else:
        message = "Votre projet semble conforme aux points analysés. Vérifiez auprès de votre mairie."

    recommendation = next(
        (r.recommendation for r in results if r.recommendation),
        DEFAULT_RECOMMENDATION,
    )

    logger.debug(
        "Report for zone %s: %d checks, dossier %s", zone, len(results), type_dossier,
    )

    return RegulatoryReport(
        title=REPORT_TITLE,
        situation=ReportSituation(
            project_address=address or "—",
            zone_name=zone,
            lotissement="OUI" if in_subdivision else "NON",
            zone_abf=_yes_no(heritage_zone),
        ),
        usage_des_sols=usage,
        caracteristiques=caracteristiques,
        traitement_environnemental=environnement,
        stationnement=stationnement,
        acces_voiries=acces,
        pprn=pprn,
        conclusion=ReportConclusion(
            conforme=not has_violation,
            message=message,
            recommendation=recommendation,
            type_dossier=type_dossier,
            justification=justification,
        ),
        generated_at=datetime.now(timezone.utc).isoformat(),
    )
