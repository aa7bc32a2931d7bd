from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from .vocab import EFFECTIVE_CONTROL_STATUSES, IMPACTS, LIKELIHOODS

LIKELIHOOD_VALUES: dict[str, int] = {name: idx for idx, name in enumerate(LIKELIHOODS, start=1)}
IMPACT_VALUES: dict[str, int] = {name: idx for idx, name in enumerate(IMPACTS, start=1)}
STRENGTH_REDUCTION: dict[str, int] = {"WEAK": 1, "MODERATE": 2, "STRONG": 3}

DEFAULT_LEVEL = 3
MAX_REDUCTION_RATIO = 0.8
MAX_WIZARD_SCORE = 100


def likelihood_value(name: str | None) -> int:
    return LIKELIHOOD_VALUES.get(str(name or "").upper(), DEFAULT_LEVEL)


def impact_value(name: str | None) -> int:
    return IMPACT_VALUES.get(str(name or "").upper(), DEFAULT_LEVEL)


def inherent_risk(likelihood: str | None, impact: str | None) -> int:
    return likelihood_value(likelihood) * impact_value(impact)


def priority_for_score(score: int) -> str:
    if score >= 15:
        return "CRITICAL"
    if score >= 10:
        return "HIGH"
    if score >= 5:
        return "MEDIUM"
    return "LOW"


def risk_level(score: int | float) -> str:
    if score <= 4:
        return "low"
    if score <= 9:
        return "medium"
    if score <= 16:
        return "high"
    return "critical"


def is_effective_control(status: str | None) -> bool:
    return str(status or "").upper() in EFFECTIVE_CONTROL_STATUSES


def residual_risk(inherent: int, strengths: Iterable[str]) -> int | None:
    """Residual score after applying effective controls.

    ``strengths`` holds the strength of each effective control. Returns None when
    there are none. The total reduction never exceeds 80% of the inherent score
    and the result never drops below 1.
    """
    values = [STRENGTH_REDUCTION.get(str(s or "").upper(), 0) for s in strengths]
    if not values:
        return None
    cap = math.floor(inherent * MAX_REDUCTION_RATIO)
    reduction = min(sum(values), cap)
    return max(1, inherent - reduction)


def effective_strengths(controls: Iterable[Mapping[str, Any]]) -> list[str]:
    return [
        str(c.get("control_strength") or c.get("strength") or "")
        for c in controls
        if is_effective_control(c.get("status"))
    ]


def controls_effectiveness(statuses: Iterable[str | None]) -> int:
    items = list(statuses)
    if not items:
        return 0
    effective = sum(1 for s in items if is_effective_control(s))
    return round(effective / len(items) * 100)


def target_risk(target_likelihood: str | None, target_impact: str | None) -> int | None:
    if not target_likelihood or not target_impact:
        return None
    return likelihood_value(target_likelihood) * impact_value(target_impact)


def wizard_risk_score(answers: Mapping[str, Any]) -> int:
    score = 0
    if answers.get("contratos_escritos") is False:
        score += 15
    if answers.get("politica_privacidad") is False:
        score += 20
    if answers.get("asesor_legal") in (1, 2):
        score += 10
    litigios = answers.get("litigios_previos")
    if isinstance(litigios, (int, float)) and not isinstance(litigios, bool) and litigios >= 3:
        score += 25
    if answers.get("capacitacion_legal") is False:
        score += 10
    seguros = answers.get("seguros")
    if not isinstance(seguros, (list, tuple)) or not seguros or "Ninguno" in seguros:
        score += 20
    return min(score, MAX_WIZARD_SCORE)


def wizard_risk_level(score: int) -> str:
    if score <= 20:
        return "low"
    if score <= 50:
        return "medium"
    if score <= 75:
        return "high"
    return "critical"


def build_risk_matrix(risks: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """5x5 grid, highest likelihood row first, impact ascending within a row."""
    buckets: dict[tuple[str, str], list[Any]] = {}
    for risk in risks:
        key = (str(risk.get("likelihood") or ""), str(risk.get("impact") or ""))
        buckets.setdefault(key, []).append(risk.get("id"))

    cells: list[dict[str, Any]] = []
    for likelihood in reversed(LIKELIHOODS):
        for impact in IMPACTS:
            score = LIKELIHOOD_VALUES[likelihood] * IMPACT_VALUES[impact]
            ids = buckets.get((likelihood, impact), [])
            cells.append(
                {
                    "likelihood": likelihood,
                    "impact": impact,
                    "score": score,
                    "level": risk_level(score),
                    "count": len(ids),
                    "riskIds": ids,
                }
            )
    return cells
