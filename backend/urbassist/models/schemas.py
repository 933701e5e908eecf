from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from urbassist.planning_engine.construction_types import ConstructionType


# ──────────────────────────────────────────────────────────────────
# PARCELS
# ──────────────────────────────────────────────────────────────────

class ParcelGeometry(BaseModel):
    """One cadastral parcel as returned by the cadastre lookup."""
    model_config = {"frozen": True}

    id: str
    section: str = ""
    number: str = ""
    area: float = 0  # m², authoritative cadastral value
    geometry: Optional[dict] = None  # GeoJSON Polygon / MultiPolygon, [lng, lat]
    commune: Optional[str] = None


EdgeType = Literal["front", "side-left", "side-right", "rear"]


class BoundaryEdge(BaseModel):
    model_config = {"frozen": True}

    type: EdgeType
    start_point: tuple[float, float]
    end_point: tuple[float, float]
    length: float  # metres


# ──────────────────────────────────────────────────────────────────
# DP / PC DETERMINATION
# ──────────────────────────────────────────────────────────────────

class ProjectType(str, Enum):
    NEW_CONSTRUCTION = "new_construction"
    EXISTING_EXTENSION = "existing_extension"
    OUTDOOR = "outdoor"
    SWIMMING_POOL = "swimming_pool"
    FACADE_CHANGE = "facade_change"
    OUTDOOR_FENCE = "outdoor_fence"
    OUTDOOR_OTHER = "outdoor_other"


class SubmitterType(str, Enum):
    INDIVIDUAL = "individual"
    COMPANY = "company"


class Determination(str, Enum):
    NONE = "NONE"
    DP = "DP"
    PC = "PC"
    ARCHITECT_REQUIRED = "ARCHITECT_REQUIRED"
    REVIEW = "REVIEW"


class DpPcInput(BaseModel):
    project_type: ProjectType
    floor_area_created: float = Field(ge=0)
    existing_floor_area: float = Field(default=0, ge=0)
    ground_area_extension: Optional[float] = Field(default=None, ge=0)
    change_of_use_or_facade: bool = False
    in_urban_zone: bool = True
    submitter_type: SubmitterType = SubmitterType.INDIVIDUAL
    shelter_height: Optional[float] = Field(default=None, ge=0)  # pool shelter, m


class DpPcResult(BaseModel):
    determination: Determination
    explanation: str
    detail: Optional[str] = None
    architect_required: bool = False


class AuthorizationDocument(BaseModel):
    model_config = {"frozen": True}

    code: str
    dual_code: Optional[str] = None
    label: str
    description: Optional[str] = None
    tag: Optional[str] = None


# ──────────────────────────────────────────────────────────────────
# PROTECTED AREAS (SUP)
# ──────────────────────────────────────────────────────────────────

class ProtectedArea(BaseModel):
    type: str
    name: str = ""
    description: Optional[str] = None
    severity: Optional[str] = None
    source_url: Optional[str] = None
    constraints: Optional[list[str]] = None
    categorie: Optional[str] = None


class ClassifiedProtection(ProtectedArea):
    label: str
    is_critical: bool


class ProcessedProtections(BaseModel):
    critical_items: list[ClassifiedProtection] = []
    secondary_items: list[ClassifiedProtection] = []
    requires_abf: bool = False


# ──────────────────────────────────────────────────────────────────
# REGULATORY REPORT
# ──────────────────────────────────────────────────────────────────

class AnalysisResult(BaseModel):
    """One compliance check produced by the PLU analysis collaborators."""
    category: str
    title: str = ""
    status: str
    value: str = ""
    requirement: str = ""
    recommendation: Optional[str] = None
    zone_label: Optional[str] = None


DossierType = Literal["DP", "PC", "ARCHITECT_REQUIRED"]


class ReportDetermination(BaseModel):
    type: DossierType
    justification: Optional[str] = None


class ReportRow(BaseModel):
    regulation: str
    conformite: str
    recommandations: Optional[str] = None


class ReportSituation(BaseModel):
    project_address: str
    zone_name: str
    regulation_type: str = "PLU"
    lotissement: str = "NON"
    zone_abf: str = "Non renseigné"


class ReportConclusion(BaseModel):
    conforme: bool
    message: str
    recommendation: str
    type_dossier: DossierType
    justification: str


class RegulatoryReport(BaseModel):
    title: str
    situation: ReportSituation
    usage_des_sols: list[ReportRow]
    caracteristiques: list[ReportRow]
    traitement_environnemental: list[ReportRow]
    stationnement: list[ReportRow]
    acces_voiries: list[ReportRow]
    pprn: list[ReportRow]
    conclusion: ReportConclusion
    generated_at: str


# ──────────────────────────────────────────────────────────────────
# API REQUESTS
# ──────────────────────────────────────────────────────────────────

class CanvasPoint(BaseModel):
    x: float
    y: float


class CanvasDimensions(BaseModel):
    width: float
    height: float
    depth: Optional[float] = None


class CalculationData(BaseModel):
    points: Optional[list[CanvasPoint]] = None
    dimensions: Optional[CanvasDimensions] = None
    parcel_area: Optional[float] = None
    building_footprint: Optional[float] = None
    building_floors: Optional[int] = None
    floor_height: Optional[float] = None


class CalculationRequest(BaseModel):
    type: str
    data: CalculationData = CalculationData()
    scale: Optional[float] = Field(default=None, gt=0)  # pixels per metre
    construction_type: Optional[ConstructionType] = None
    plu_setback: Optional[float] = None
    setback_dimension: Literal["front", "side", "rear"] = "side"


class MergeRequest(BaseModel):
    parcels: list[ParcelGeometry]
    geodesic: bool = True


class EdgeClassificationRequest(BaseModel):
    geometry: dict
    road_bearing: Optional[float] = None


class RoadSummaryRequest(BaseModel):
    lat: float
    lng: float
    elements: list[dict] = []
    limit: int = 10


class SetbackValues(BaseModel):
    front: float = 0
    side: float = 0
    rear: float = 0


class ConstructionResolveRequest(BaseModel):
    construction_type: ConstructionType
    plu_setbacks: SetbackValues = SetbackValues()
    plu_max_height: Optional[float] = None
    plu_max_ridge_height: Optional[float] = None


class DecisionRequest(DpPcInput):
    has_abf: bool = False
    is_existing_structure: bool = False


class DecisionResponse(BaseModel):
    determination: Determination
    explanation: str
    detail: Optional[str] = None
    architect_required: bool = False
    documents: list[AuthorizationDocument] = []
    notes: list[str] = []


class ProtectionsRequest(BaseModel):
    areas: list[ProtectedArea]


class ReportRequest(BaseModel):
    results: list[AnalysisResult] = []
    address: str = ""
    zone_name: str = ""
    determination: Optional[ReportDetermination] = None
    in_subdivision: bool = False
    heritage_zone: Optional[bool] = None
    protected_areas: Optional[list[ProtectedArea]] = None
