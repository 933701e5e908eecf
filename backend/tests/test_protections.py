"""Tests for public-utility servitude classification."""

from __future__ import annotations

from urbassist.models.schemas import ProtectedArea
from urbassist.planning_engine.protections import (
    contains_critical_text,
    process_protections,
)


def _area(type_: str = "SUP", name: str = "", **kwargs) -> ProtectedArea:
    return ProtectedArea(type=type_, name=name, **kwargs)


class TestClassification:
    def test_info_items_dropped(self):
        result = process_protections([_area("INFO", "Règles générales")])
        assert result.critical_items == []
        assert result.secondary_items == []

    def test_critical_type(self):
        result = process_protections([_area("FLOOD_ZONE", "Secteur rouge")])
        assert len(result.critical_items) == 1
        assert result.critical_items[0].is_critical is True

    def test_critical_code_normalized(self):
        result = process_protections([_area(categorie=" ac1 ", name="Église Saint-Pierre")])
        item = result.critical_items[0]
        assert item.categorie == "AC1"
        assert item.label == "Monument Historique (Classé/Inscrit)"

    def test_code_prefix_match(self):
        result = process_protections([_area(categorie="PM1-a", name="Secteur R1")])
        assert len(result.critical_items) == 1
        assert result.critical_items[0].label == "Secteur R1"

    def test_critical_by_description_keyword(self):
        area = _area(name="Servitude", description="Terrain situé en zone inondable")
        assert process_protections([area]).critical_items[0].name == "Servitude"

    def test_technical_servitude_secondary(self):
        result = process_protections([_area(categorie="I4", name="Ligne HT", severity="low")])
        item = result.secondary_items[0]
        assert item.label == "Passage Lignes Électriques"
        assert item.severity == "low"
        assert item.is_critical is False

    def test_critical_severity_forced_high(self):
        result = process_protections([_area("ABF", "Périmètre MH", severity="medium")])
        assert result.critical_items[0].severity == "high"

    def test_unlabelled_servitude(self):
        assert process_protections([_area(categorie="ZZ9")]).secondary_items[0].label == "Autre servitude"

    def test_accepts_dicts(self):
        result = process_protections([{"type": "HERITAGE", "name": "Site"}])
        assert len(result.critical_items) == 1


class TestRequiresAbf:
    def test_abf_perimeter(self):
        assert process_protections([_area(categorie="AC4", name="Abords")]).requires_abf is True

    def test_heritage_type(self):
        assert process_protections([_area("HERITAGE", "Site")]).requires_abf is True

    def test_flood_risk_alone(self):
        result = process_protections([_area("FLOOD_ZONE", "Secteur rouge", categorie="PM1")])
        assert result.requires_abf is False

    def test_secondary_only(self):
        assert process_protections([_area(categorie="PT1", name="Télécom")]).requires_abf is False


class TestKeywords:
    def test_case_insensitive(self):
        assert contains_critical_text("MONUMENT HISTORIQUE") is True

    def test_empty(self):
        assert contains_critical_text("") is False
