from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from urbassist.config import settings
from urbassist.models.schemas import (
    BoundaryEdge,
    CalculationRequest,
    ConstructionResolveRequest,
    DecisionRequest,
    DecisionResponse,
    DpPcInput,
    EdgeClassificationRequest,
    MergeRequest,
    ProcessedProtections,
    ProtectionsRequest,
    RegulatoryReport,
    ReportRequest,
    RoadSummaryRequest,
)
from urbassist.planning_engine import construction_types as ct
from urbassist.planning_engine.documents import additional_notes, documents_for_project
from urbassist.planning_engine.dp_pc import calculate_dp_pc
from urbassist.planning_engine.measurements import run_calculation
from urbassist.planning_engine.parcel_merge import (
    classify_boundary_edges,
    compute_total_area,
    merge_parcel_geometries,
)
from urbassist.planning_engine.protections import process_protections
from urbassist.planning_engine.regulatory_report import build_report_from_analysis
from urbassist.planning_engine.roads import summarize_roads

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ──────────────────────────────────────────────────────────────────
# SITE-PLAN CALCULATIONS
# ──────────────────────────────────────────────────────────────────

@router.post("/calculate")
async def calculate(request: CalculationRequest):
    """Canvas measurement: surface, distance, volume, setback or coverage."""
    scale = request.scale if request.scale is not None else settings.default_pixels_per_meter

    minimum_setback = None
    if request.type == "setback" and request.construction_type and request.plu_setback is not None:
        minimum_setback = ct.resolve_setback(
            request.setback_dimension, request.construction_type, request.plu_setback,
        )

    try:
        result = run_calculation(
            request.type,
            request.data.model_dump(exclude_none=True),
            scale,
            minimum_setback=minimum_setback,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"success": True, "calculation": result, "scale": scale}


# ──────────────────────────────────────────────────────────────────
# CADASTRE
# ──────────────────────────────────────────────────────────────────

@router.post("/cadastre/merge")
async def merge_parcels(request: MergeRequest):
    """Union several adjacent cadastral parcels into one site."""
    if len(request.parcels) < 2:
        raise HTTPException(status_code=400, detail="At least 2 parcels are required to merge")

    merged = merge_parcel_geometries(request.parcels, geodesic=request.geodesic)
    if merged is None:
        raise HTTPException(status_code=400, detail="No parcel has a valid geometry")

    return {
        "merged": merged,
        "cadastral_total_area": compute_total_area(request.parcels),
    }


@router.post("/cadastre/edges", response_model=list[BoundaryEdge])
async def boundary_edges(request: EdgeClassificationRequest):
    """Front / side / rear classification of a parcel's boundary."""
    return classify_boundary_edges(request.geometry, request.road_bearing)


@router.post("/cadastre/roads")
async def nearby_roads(request: RoadSummaryRequest):
    """Closest classified roads from Overpass elements, nearest first."""
    roads = summarize_roads(request.elements, request.lat, request.lng, limit=request.limit)
    primary = roads[0] if roads else None
    return {
        "roads": roads,
        "primary_road": primary,
        "road_bearing": primary["bearing"] if primary else None,
    }


# ──────────────────────────────────────────────────────────────────
# CONSTRUCTION TYPES
# ──────────────────────────────────────────────────────────────────

@router.get("/construction-types")
async def list_construction_types():
    """Rule table for every construction type."""
    return {
        key.value: {
            "label": rule.label,
            "label_fr": rule.label_fr,
            "setbacks": {
                "front": rule.setbacks.front,
                "side": rule.setbacks.side,
                "rear": rule.setbacks.rear,
            },
            "max_height": rule.max_height,
            "max_ridge_height": rule.max_ridge_height,
            "count_in_ces": rule.count_in_ces,
            "exempt_up_to_m2": rule.exempt_up_to_m2,
            "permit_above_exempt": rule.permit_above_exempt,
            "note": rule.note,
        }
        for key, rule in ct.CONSTRUCTION_TYPE_RULES.items()
    }


@router.post("/construction-types/resolve")
async def resolve_construction_type(request: ConstructionResolveRequest):
    """Effective setbacks and heights once type overrides meet PLU values."""
    plu = request.plu_setbacks
    result = {
        "construction_type": request.construction_type.value,
        "setbacks": ct.resolve_setbacks(request.construction_type, plu.front, plu.side, plu.rear),
        "max_height": None,
        "max_ridge_height": None,
        "count_in_ces": ct.counts_in_ces(request.construction_type),
    }
    if request.plu_max_height is not None:
        result["max_height"] = ct.resolve_max_height(
            request.construction_type, request.plu_max_height,
        )
    if request.plu_max_ridge_height is not None:
        result["max_ridge_height"] = ct.resolve_max_ridge_height(
            request.construction_type, request.plu_max_ridge_height,
        )
    return result


# ──────────────────────────────────────────────────────────────────
# AUTHORIZATION
# ──────────────────────────────────────────────────────────────────

@router.post("/decision", response_model=DecisionResponse)
async def decision(request: DecisionRequest):
    """DP / PC determination with the matching document checklist."""
    inp = DpPcInput.model_validate(request.model_dump(exclude={"has_abf", "is_existing_structure"}))
    result = calculate_dp_pc(inp)
    logger.info(
        "Decision for %s (%.2f m² created): %s",
        inp.project_type.value, inp.floor_area_created, result.determination.value,
    )
    return DecisionResponse(
        determination=result.determination,
        explanation=result.explanation,
        detail=result.detail,
        architect_required=result.architect_required,
        documents=documents_for_project(
            result.determination,
            has_abf=request.has_abf,
            is_existing_structure=request.is_existing_structure,
        ),
        notes=additional_notes(result.determination),
    )


@router.post("/protections/classify", response_model=ProcessedProtections)
async def classify_protections(request: ProtectionsRequest):
    """Split protected areas into critical and secondary servitudes."""
    return process_protections(request.areas)


@router.post("/regulatory/report", response_model=RegulatoryReport)
async def regulatory_report(request: ReportRequest):
    """Build the "analyse de la réglementation" report from analysis results."""
    heritage_zone = request.heritage_zone
    if heritage_zone is None and request.protected_areas is not None:
        heritage_zone = process_protections(request.protected_areas).requires_abf

    return build_report_from_analysis(
        request.results,
        address=request.address,
        zone_name=request.zone_name,
        determination=request.determination,
        in_subdivision=request.in_subdivision,
        heritage_zone=heritage_zone,
    )
