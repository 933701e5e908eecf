from __future__ import annotations

from urbassist.models.schemas import (
    BoundaryEdge,
    Determination,
    DpPcInput,
    DpPcResult,
    ParcelGeometry,
    ProjectType,
    RegulatoryReport,
    SubmitterType,
)

__all__ = [
    "BoundaryEdge",
    "Determination",
    "DpPcInput",
    "DpPcResult",
    "ParcelGeometry",
    "ProjectType",
    "RegulatoryReport",
    "SubmitterType",
]
