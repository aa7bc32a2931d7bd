from __future__ import annotations

import pytest

from legalrisk.core.scoring import (
    build_risk_matrix,
    controls_effectiveness,
    effective_strengths,
    inherent_risk,
    priority_for_score,
    residual_risk,
    target_risk,
    wizard_risk_level,
    wizard_risk_score,
)
from legalrisk.core.summary import summarize
from legalrisk.models import ControlInput, RiskInput


@pytest.mark.parametrize(
    ("score", "expected"),
    [(25, "CRITICAL"), (15, "CRITICAL"), (14, "HIGH"), (10, "HIGH"), (9, "MEDIUM"), (5, "MEDIUM"), (4, "LOW"), (1, "LOW")],
)
def test_priority_thresholds(score: int, expected: str) -> None:
    assert priority_for_score(score) == expected


def test_inherent_risk_defaults_unknown_levels_to_three() -> None:
    assert inherent_risk("LIKELY", "MAJOR") == 16
    assert inherent_risk("RARE", "INSIGNIFICANT") == 1
    assert inherent_risk("bogus", None) == 9


def test_residual_risk_reduction_and_cap() -> None:
    assert residual_risk(16, []) is None
    assert residual_risk(16, ["MODERATE"]) == 14
    assert residual_risk(16, ["STRONG", "STRONG"]) == 10
    # 3 + 3 + 3 + 3 = 12 exceeds floor(0.8 * 10) = 8
    assert residual_risk(10, ["STRONG"] * 4) == 2
    assert residual_risk(1, ["STRONG"]) == 1
    assert residual_risk(2, ["WEAK"]) == 1


def test_effective_strengths_only_counts_implemented_or_operational() -> None:
    controls = [
        {"control_strength": "STRONG", "status": "PLANNED"},
        {"control_strength": "MODERATE", "status": "IMPLEMENTED"},
        {"strength": "WEAK", "status": "OPERATIONAL"},
        {"control_strength": "STRONG", "status": "INEFFECTIVE"},
    ]
    assert effective_strengths(controls) == ["MODERATE", "WEAK"]
    assert controls_effectiveness(c["status"] for c in controls) == 50
    assert controls_effectiveness([]) == 0


def test_target_risk_requires_both_levels() -> None:
    assert target_risk("UNLIKELY", "MINOR") == 4
    assert target_risk("UNLIKELY", None) is None


def test_wizard_score_and_level() -> None:
    worst = {
        "contratos_escritos": False,
        "politica_privacidad": False,
        "asesor_legal": 1,
        "litigios_previos": 5,
        "capacitacion_legal": False,
        "seguros": [],
    }
    assert wizard_risk_score(worst) == 100
    assert wizard_risk_level(100) == "critical"

    best = {
        "contratos_escritos": True,
        "politica_privacidad": True,
        "asesor_legal": 4,
        "litigios_previos": 0,
        "capacitacion_legal": True,
        "seguros": ["Responsabilidad civil"],
    }
    assert wizard_risk_score(best) == 0
    assert wizard_risk_level(0) == "low"

    assert wizard_risk_score({**best, "seguros": ["Ninguno"]}) == 20
    assert wizard_risk_level(20) == "low"
    assert wizard_risk_level(21) == "medium"
    assert wizard_risk_level(50) == "medium"
    assert wizard_risk_level(75) == "high"
    assert wizard_risk_level(76) == "critical"


def test_risk_matrix_layout() -> None:
    cells = build_risk_matrix(
        [
            {"id": 1, "likelihood": "ALMOST_CERTAIN", "impact": "CATASTROPHIC"},
            {"id": 2, "likelihood": "ALMOST_CERTAIN", "impact": "CATASTROPHIC"},
            {"id": 3, "likelihood": "RARE", "impact": "MINOR"},
        ]
    )
    assert len(cells) == 25
    assert cells[0]["likelihood"] == "ALMOST_CERTAIN"
    assert cells[0]["impact"] == "INSIGNIFICANT"
    top_right = cells[4]
    assert top_right["score"] == 25
    assert top_right["level"] == "critical"
    assert top_right["riskIds"] == [1, 2]
    rare_minor = next(c for c in cells if c["likelihood"] == "RARE" and c["impact"] == "MINOR")
    assert rare_minor["count"] == 1
    assert rare_minor["level"] == "low"


def test_summarize_sorts_by_inherent_risk() -> None:
    risks = [
        RiskInput(title="Bajo", likelihood="RARE", impact="MINOR", id="a"),
        RiskInput(
            title="Alto",
            likelihood="LIKELY",
            impact="MAJOR",
            id="b",
            controls=(ControlInput(title="Seguro", control_strength="STRONG", status="OPERATIONAL"),),
        ),
    ]
    payload = summarize(None, risks)
    assert [r["id"] for r in payload["risks"]] == ["b", "a"]
    assert payload["risks"][0]["residual_risk"] == 13
    assert payload["by_priority"] == {"CRITICAL": 1, "LOW": 1}
    assert "wizard" not in payload


def test_wizard_score_treats_non_list_insurance_as_missing() -> None:
    covered = {"seguros": ["Ciberseguridad"]}
    assert wizard_risk_score(covered) == 0
    assert wizard_risk_score({"seguros": 5}) == 20
    assert wizard_risk_score({"seguros": True}) == 20
    assert wizard_risk_score({"seguros": "Ciberseguridad"}) == 20
