"""Tests for the regulatory report builder."""

from __future__ import annotations

from datetime import datetime

import pytest

from urbassist.models.schemas import (
    AnalysisResult,
    Determination,
    DpPcResult,
    ReportDetermination,
)
from urbassist.planning_engine.regulatory_report import (
    JUSTIFICATIONS,
    REPORT_TITLE,
    build_report_from_analysis,
    report_determination_from_result,
    to_conformite,
)


def _result(category: str, status: str = "compliant", **kwargs) -> AnalysisResult:
    return AnalysisResult(
        category=category,
        title=kwargs.pop("title", category),
        status=status,
        requirement=kwargs.pop("requirement", f"{category} requirement"),
        **kwargs,
    )


class TestConformite:
    @pytest.mark.parametrize("status,expected", [
        ("compliant", "OUI"),
        ("info", "OUI"),
        ("violation", "NON"),
        ("warning", "À vérifier"),
        ("", "À vérifier"),
    ])
    def test_mapping(self, status, expected):
        assert to_conformite(status) == expected


class TestBuckets:
    def test_characteristics(self):
        report = build_report_from_analysis([
            _result("Height"),
            _result("Setback", "violation", recommendation="Reculer de 1 m"),
            _result("Zone", "info"),
            _result("Parking"),
        ])
        assert [r.conformite for r in report.caracteristiques] == ["OUI", "NON", "OUI"]
        assert report.caracteristiques[1].recommandations == "Reculer de 1 m"
        assert len(report.stationnement) == 1

    def test_placeholders_when_empty(self):
        report = build_report_from_analysis([])
        assert report.caracteristiques[0].conformite == "—"
        assert report.stationnement[0].regulation == "Non renseigné (voir PLU)"
        assert report.traitement_environnemental[0].regulation == "Non réglementé"
        assert len(report.usage_des_sols) == 2
        assert len(report.acces_voiries) == 2
        assert report.pprn[0].conformite == "OUI"

    def test_green_space(self):
        report = build_report_from_analysis([_result("Green Space", "violation")])
        assert report.traitement_environnemental[0].conformite == "NON"

    def test_risk_and_access_results_replace_defaults(self):
        report = build_report_from_analysis([_result("PPRN", "warning"), _result("Access")])
        assert [r.conformite for r in report.pprn] == ["À vérifier"]
        assert len(report.acces_voiries) == 1

    def test_dict_results(self):
        report = build_report_from_analysis([
            {"category": "Height", "status": "compliant", "requirement": "9 m max"},
        ])
        assert report.caracteristiques[0].regulation == "9 m max"


class TestSituation:
    def test_defaults(self):
        report = build_report_from_analysis([])
        assert report.title == REPORT_TITLE
        assert report.situation.project_address == "—"
        assert report.situation.zone_name == "—"
        assert report.situation.regulation_type == "PLU"
        assert report.situation.lotissement == "NON"
        assert report.situation.zone_abf == "Non renseigné"

    def test_zone_from_results(self):
        report = build_report_from_analysis([_result("Height"), _result("Setback", zone_label="UB")])
        assert report.situation.zone_name == "UB"

    def test_explicit_zone_wins(self):
        report = build_report_from_analysis([_result("Height", zone_label="UB")], zone_name="UA")
        assert report.situation.zone_name == "UA"

    def test_flags(self):
        report = build_report_from_analysis([], in_subdivision=True, heritage_zone=False)
        assert report.situation.lotissement == "OUI"
        assert report.situation.zone_abf == "NON"


class TestConclusion:
    def test_violation_infers_pc(self):
        report = build_report_from_analysis([_result("Height", "violation")])
        assert report.conclusion.conforme is False
        assert report.conclusion.type_dossier == "PC"
        assert report.conclusion.justification == JUSTIFICATIONS["PC"]

    def test_no_violation_infers_dp(self):
        report = build_report_from_analysis([_result("Height"), _result("Parking", "warning")])
        assert report.conclusion.conforme is True
        assert report.conclusion.type_dossier == "DP"

    def test_explicit_determination_wins(self):
        report = build_report_from_analysis(
            [],
            determination=ReportDetermination(type="ARCHITECT_REQUIRED"),
        )
        assert report.conclusion.type_dossier == "ARCHITECT_REQUIRED"
        assert "L.431-1" in report.conclusion.justification

    def test_supplied_justification(self):
        report = build_report_from_analysis(
            [], determination=ReportDetermination(type="DP", justification="Abri de 12 m²"),
        )
        assert report.conclusion.justification == "Abri de 12 m²"

    def test_first_recommendation(self):
        report = build_report_from_analysis([
            _result("Height"),
            _result("Coverage", recommendation="Réduire l'emprise"),
            _result("Setback", recommendation="Reculer"),
        ])
        assert report.conclusion.recommendation == "Réduire l'emprise"

    def test_generated_at_is_utc_iso(self):
        report = build_report_from_analysis([])
        assert datetime.fromisoformat(report.generated_at).tzinfo is not None


class TestDeterminationFromResult:
    def _verdict(self, determination: Determination) -> DpPcResult:
        return DpPcResult(determination=determination, explanation="x")

    def test_pc(self):
        assert report_determination_from_result(self._verdict(Determination.PC)).type == "PC"

    def test_none_reported_as_dp(self):
        assert report_determination_from_result(self._verdict(Determination.NONE)).type == "DP"

    def test_review_has_no_determination(self):
        assert report_determination_from_result(self._verdict(Determination.REVIEW)) is None

    def test_explanation_carried(self):
        det = report_determination_from_result(self._verdict(Determination.ARCHITECT_REQUIRED))
        assert det.justification == "x"
