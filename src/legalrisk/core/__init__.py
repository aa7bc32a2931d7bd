from .scoring import (
    build_risk_matrix,
    inherent_risk,
    priority_for_score,
    residual_risk,
    risk_level,
    wizard_risk_level,
    wizard_risk_score,
)

__all__ = [
    "build_risk_matrix",
    "inherent_risk",
    "priority_for_score",
    "residual_risk",
    "risk_level",
    "wizard_risk_level",
    "wizard_risk_score",
]
