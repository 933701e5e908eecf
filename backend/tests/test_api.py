"""HTTP tests for the planning API."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient
from shapely.geometry import box

from urbassist.main import app

SQUARE_100PX = [{"x": 0, "y": 0}, {"x": 100, "y": 0}, {"x": 100, "y": 100}, {"x": 0, "y": 100}]


@pytest.fixture
def client():
    return TestClient(app)


def _parcel(parcel_id: str, x_offset: float = 0) -> dict:
    geom = box(2.35 + x_offset, 48.85, 2.3505 + x_offset, 48.8505)
    return {
        "id": parcel_id,
        "section": "AB",
        "number": parcel_id,
        "area": 2000,
        "geometry": json.loads(json.dumps(geom.__geo_interface__)),
    }


class TestService:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_root_lists_endpoints(self, client):
        assert "decision" in client.get("/").json()["endpoints"]


class TestCalculate:
    def test_default_scale(self, client):
        resp = client.post("/api/calculate", json={"type": "surface", "data": {"points": SQUARE_100PX}})
        assert resp.status_code == 200
        body = resp.json()
        assert body["scale"] == 100.0
        assert body["calculation"]["area_meters"] == pytest.approx(1.0)

    def test_explicit_scale(self, client):
        resp = client.post(
            "/api/calculate",
            json={"type": "surface", "data": {"points": SQUARE_100PX}, "scale": 50},
        )
        assert resp.json()["calculation"]["area_meters"] == pytest.approx(4.0)

    def test_unknown_type(self, client):
        resp = client.post("/api/calculate", json={"type": "perimeter", "data": {}})
        assert resp.status_code == 400

    def test_zero_scale_rejected(self, client):
        resp = client.post("/api/calculate", json={"type": "surface", "data": {}, "scale": 0})
        assert resp.status_code == 422

    def test_insufficient_data_passes_through(self, client):
        resp = client.post("/api/calculate", json={"type": "distance", "data": {"points": []}})
        assert resp.status_code == 200
        assert "error" in resp.json()["calculation"]

    def test_setback_with_construction_type(self, client):
        points = [{"x": 0, "y": 0}, {"x": 50, "y": 0}]
        resp = client.post("/api/calculate", json={
            "type": "setback",
            "data": {"points": points},
            "construction_type": "shed",
            "plu_setback": 5,
            "setback_dimension": "side",
        })
        calc = resp.json()["calculation"]
        assert calc["minimum_required"] == 0
        assert calc["compliant"] is True


class TestCadastre:
    def test_merge(self, client):
        resp = client.post("/api/cadastre/merge", json={"parcels": [_parcel("A"), _parcel("B", 0.0005)]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["merged"]["properties"]["sourceCount"] == 2
        assert body["cadastral_total_area"] == 4000

    def test_merge_needs_two_parcels(self, client):
        resp = client.post("/api/cadastre/merge", json={"parcels": [_parcel("A")]})
        assert resp.status_code == 400

    def test_merge_without_geometry(self, client):
        resp = client.post("/api/cadastre/merge", json={"parcels": [{"id": "A"}, {"id": "B"}]})
        assert resp.status_code == 400

    def test_edges(self, client):
        resp = client.post("/api/cadastre/edges", json={"geometry": _parcel("A")["geometry"], "road_bearing": 180})
        edges = resp.json()
        assert len(edges) == 4
        assert sorted(e["type"] for e in edges).count("front") == 1

    def test_roads(self, client):
        elements = [
            {"type": "node", "id": 1, "lat": 48.851, "lon": 2.35},
            {"type": "way", "id": 2, "nodes": [1], "tags": {"highway": "residential", "name": "Rue Haute"}},
        ]
        resp = client.post("/api/cadastre/roads", json={"lat": 48.85, "lng": 2.35, "elements": elements})
        body = resp.json()
        assert body["primary_road"]["name"] == "Rue Haute"
        assert body["road_bearing"] == pytest.approx(0.0)

    def test_roads_empty(self, client):
        body = client.post("/api/cadastre/roads", json={"lat": 48.85, "lng": 2.35}).json()
        assert body["roads"] == []
        assert body["road_bearing"] is None


class TestConstructionTypes:
    def test_list(self, client):
        body = client.get("/api/construction-types").json()
        assert body["shed"]["max_height"] == 3.5
        assert body["pool"]["count_in_ces"] is False

    def test_resolve(self, client):
        resp = client.post("/api/construction-types/resolve", json={
            "construction_type": "shed",
            "plu_setbacks": {"front": 5, "side": 4, "rear": 4},
            "plu_max_height": 12,
        })
        body = resp.json()
        assert body["setbacks"] == {"front": 5, "side": 0, "rear": 0}
        assert body["max_height"] == 3.5
        assert body["max_ridge_height"] is None

    def test_resolve_unknown_type(self, client):
        resp = client.post("/api/construction-types/resolve", json={"construction_type": "tower"})
        assert resp.status_code == 422


class TestDecision:
    def test_architect_required(self, client):
        resp = client.post("/api/decision", json={
            "project_type": "new_construction",
            "floor_area_created": 25,
            "existing_floor_area": 130,
        })
        body = resp.json()
        assert body["determination"] == "ARCHITECT_REQUIRED"
        assert body["architect_required"] is True
        assert body["documents"][0]["code"] == "PC 1"

    def test_dp_in_abf_zone(self, client):
        resp = client.post("/api/decision", json={
            "project_type": "new_construction",
            "floor_area_created": 12,
            "has_abf": True,
        })
        body = resp.json()
        assert body["determination"] == "DP"
        assert body["documents"][-1]["code"] == "DPC 11"

    def test_permit_carries_house_notes(self, client):
        resp = client.post("/api/decision", json={
            "project_type": "new_construction",
            "floor_area_created": 40,
        })
        body = resp.json()
        assert body["determination"] == "PC"
        assert any("RE 2020" in note for note in body["notes"])
        assert any("PCMI 13" in note for note in body["notes"])

    def test_declaration_has_no_notes(self, client):
        resp = client.post("/api/decision", json={
            "project_type": "new_construction",
            "floor_area_created": 12,
        })
        assert resp.json()["notes"] == []

    def test_negative_area(self, client):
        resp = client.post("/api/decision", json={"project_type": "outdoor", "floor_area_created": -3})
        assert resp.status_code == 422


class TestProtectionsAndReport:
    def test_classify(self, client):
        resp = client.post("/api/protections/classify", json={"areas": [
            {"type": "SUP", "name": "Église", "categorie": "AC1"},
            {"type": "SUP", "name": "Ligne", "categorie": "I4"},
            {"type": "INFO", "name": "Note"},
        ]})
        body = resp.json()
        assert len(body["critical_items"]) == 1
        assert len(body["secondary_items"]) == 1
        assert body["requires_abf"] is True

    def test_report(self, client):
        resp = client.post("/api/regulatory/report", json={
            "results": [{"category": "Height", "status": "violation", "requirement": "9 m max"}],
            "address": "1 rue de la Paix, Paris",
            "protected_areas": [{"type": "ABF", "name": "Abords MH"}],
        })
        body = resp.json()
        assert body["conclusion"]["type_dossier"] == "PC"
        assert body["situation"]["zone_abf"] == "OUI"
        assert body["situation"]["project_address"] == "1 rue de la Paix, Paris"

    def test_report_explicit_heritage_flag_wins(self, client):
        resp = client.post("/api/regulatory/report", json={
            "heritage_zone": False,
            "protected_areas": [{"type": "ABF", "name": "Abords MH"}],
        })
        assert resp.json()["situation"]["zone_abf"] == "NON"
