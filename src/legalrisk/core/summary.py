from __future__ import annotations

from collections import Counter
from typing import Any, Mapping

from ..models import RiskInput
from .scoring import (
    build_risk_matrix,
    controls_effectiveness,
    inherent_risk,
    is_effective_control,
    priority_for_score,
    residual_risk,
    wizard_risk_level,
    wizard_risk_score,
)


def score_risk(risk: RiskInput) -> dict[str, Any]:
    inherent = inherent_risk(risk.likelihood, risk.impact)
    strengths = [c.control_strength for c in risk.controls if is_effective_control(c.status)]
    return {
        "id": risk.id,
        "title": risk.title,
        "likelihood": risk.likelihood,
        "impact": risk.impact,
        "inherent_risk": inherent,
        "residual_risk": residual_risk(inherent, strengths),
        "priority": priority_for_score(inherent),
        "controls_effectiveness": controls_effectiveness(c.status for c in risk.controls),
    }


def summarize(answers: Mapping[str, Any] | None, risks: list[RiskInput]) -> dict[str, Any]:
    scored = [score_risk(r) for r in risks]
    scored.sort(key=lambda item: item["inherent_risk"], reverse=True)
    payload: dict[str, Any] = {
        "risks": scored,
        "by_priority": dict(Counter(item["priority"] for item in scored)),
        "matrix": build_risk_matrix(scored),
    }
    if answers is not None:
        score = wizard_risk_score(answers)
        payload["wizard"] = {"risk_score": score, "level": wizard_risk_level(score)}
    return payload
