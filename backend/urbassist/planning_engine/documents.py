"""
Document checklists for planning applications.

DPC = pièces de la Déclaration Préalable, PC = pièces du Permis de Construire.
Each piece carries the code of its counterpart in the other procedure.
"""

from __future__ import annotations

from typing import Optional, Union

from urbassist.models.schemas import AuthorizationDocument, Determination


def _doc(code, dual_code, label, description, tag=None) -> AuthorizationDocument:
    return AuthorizationDocument(
        code=code, dual_code=dual_code, label=label, description=description, tag=tag,
    )


# ──────────────────────────────────────────────────────────────────
# DÉCLARATION PRÉALABLE
# ──────────────────────────────────────────────────────────────────

DP_DOCUMENTS: tuple[AuthorizationDocument, ...] = (
    _doc("DPC 1", "PC 1", "Plan de situation", "Localise le terrain dans la commune"),
    _doc("DPC 2", "PC 2", "Plan de masse", "Vue d'ensemble du terrain et des constructions"),
    _doc("DPC 3", "PC 3", "Plan en coupe", "Coupe du terrain et de la construction"),
    _doc("DPC 4", "PC 5", "Plan des façades et des toitures", "Élévations et toitures du projet"),
    _doc("DPC 5", "PC 6", "Représentation de l'aspect extérieur", "Vue en perspective ou 3D du projet"),
    _doc("DPC 6", "PC 6", "Document graphique", "Insertion du projet dans son environnement"),
    _doc("DPC 7", "PC 7", "Photographie de l'environnement proche", "Photos du terrain et des abords immédiats"),
    _doc("DPC 8", "PC 8", "Photographie de l'environnement lointain", "Photos du paysage environnant"),
    _doc("DPC 8.1", "PC 4", "Notice descriptive du projet", "Description détaillée du projet et de son insertion"),
)

# Heritage (ABF) zones only
DPC11_DOCUMENT = _doc(
    "DPC 11",
    None,
    "Notice relative aux modalités d'exécution des travaux",
    "Requis en zone ABF / Patrimoine, détaille les modalités d'exécution",
    tag="ABF",
)


# ──────────────────────────────────────────────────────────────────
# PERMIS DE CONSTRUIRE
# ──────────────────────────────────────────────────────────────────

PC_DOCUMENTS: tuple[AuthorizationDocument, ...] = (
    _doc("PC 1", "DPC 1", "Plan de situation", "Localise le terrain dans la commune"),
    _doc("PC 2", "DPC 2", "Plan de masse", "Vue d'ensemble du terrain et des constructions"),
    _doc("PC 3", "DPC 3", "Plan en coupe", "Coupe du terrain et de la construction"),
    _doc("PC 4", "DPC 8.1", "Notice descriptive du projet", "Description du terrain, du projet et des matériaux"),
    _doc("PC 5", "DPC 4", "Plan des façades et des toitures", "Élévations et toitures du projet"),
    _doc("PC 6", "DPC 6", "Document graphique", "Insertion du projet dans son environnement"),
    _doc("PC 7", "DPC 7", "Photographie de l'environnement proche", "Photos du terrain et des abords immédiats"),
    _doc("PC 8", "DPC 8", "Photographie de l'environnement lointain", "Photos du paysage environnant"),
)

# PC 5 is split in two for work on an existing building
PC5_EXISTING = _doc(
    "PC 5a",
    "DPC 4a",
    "Plan des façades et toitures, état existant",
    "Élévations et toitures de la construction existante avant travaux",
    tag="Existant",
)
PC5_PROPOSED = _doc(
    "PC 5b",
    "DPC 4b",
    "Plan des façades et toitures, état projeté",
    "Élévations et toitures du projet après travaux",
    tag="Projeté",
)

PC_ADDITIONAL_NOTES = (
    "Pour les maisons individuelles : attestation thermique RE 2020 pouvant être requise",
    "Pour les maisons individuelles : attestation sismique PCMI 13 pouvant être requise",
)


def _is_permit(determination: Union[Determination, str, None]) -> bool:
    if determination is None:
        return False
    value = determination.value if isinstance(determination, Determination) else str(determination)
    return value.upper() in (Determination.PC.value, Determination.ARCHITECT_REQUIRED.value)


def documents_for_type(
    determination: Union[Determination, str, None],
) -> list[AuthorizationDocument]:
    """Base checklist: the PC list for PC / ARCHITECT_REQUIRED, else the DP list."""
    if _is_permit(determination):
        return list(PC_DOCUMENTS)
    return list(DP_DOCUMENTS)


def documents_for_project(
    determination: Union[Determination, str, None],
    has_abf: bool = False,
    is_existing_structure: bool = False,
) -> list[AuthorizationDocument]:
    """Checklist adjusted for the project's context.

    - DP in an ABF zone: DPC 11 is appended.
    - PC on an existing structure: PC 5 becomes PC 5a (existing) + PC 5b (proposed).
    - PC in an ABF zone: PC 4 is tagged ABF; DPC 11 is not added.
    """
    if not _is_permit(determination):
        docs = list(DP_DOCUMENTS)
        if has_abf:
            docs.append(DPC11_DOCUMENT)
        return docs

    docs: list[AuthorizationDocument] = []
    for doc in PC_DOCUMENTS:
        if doc.code == "PC 5" and is_existing_structure:
            docs.extend([PC5_EXISTING, PC5_PROPOSED])
        elif doc.code == "PC 4" and has_abf:
            docs.append(doc.model_copy(update={
                "tag": "ABF",
                "description": (
                    "La notice descriptive sera complétée avec les informations "
                    "nécessaires pour l'ABF"
                ),
            }))
        else:
            docs.append(doc)
    return docs


def additional_notes(determination: Optional[Union[Determination, str]]) -> list[str]:
    """Extra reminders shown under a PC checklist for single-family houses."""
    return list(PC_ADDITIONAL_NOTES) if _is_permit(determination) else []
