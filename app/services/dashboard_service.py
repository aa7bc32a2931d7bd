from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from legalrisk.core.scoring import build_risk_matrix, is_effective_control
from legalrisk.core.vocab import CONTROL_STATUSES, CONTROL_STRENGTHS, PRIORITIES, RISK_STATUSES

from app.models import RiskEvent, User
from app.services.protocol_service import protocol_stats, user_protocols
from app.services.risk_register import get_active_register, profile_for, register_risks
from app.services.wizard_service import latest_assessment
from app.utils.serialize import business_profile_out, iso, professional_profile_out, register_out


def _risk_row(risk: RiskEvent) -> dict[str, Any]:
    controls = list(risk.controls)
    return {
        "id": risk.id,
        "title": risk.title,
        "category": risk.category,
        "priority": risk.priority,
        "likelihood": risk.likelihood,
        "impact": risk.impact,
        "inherentRisk": risk.inherent_risk,
        "residualRisk": risk.residual_risk,
        "status": risk.status,
        "controlsCount": len(controls),
        "controlsImplemented": sum(1 for c in controls if is_effective_control(c.status)),
    }


def risk_metrics(risks: list[RiskEvent]) -> dict[str, Any]:
    """Average inherent/residual risk and the relative reduction between them.

    The residual average covers only risks that have a residual value; with none
    it falls back to the inherent average.
    """
    total = len(risks)
    avg_inherent = sum(r.inherent_risk for r in risks) / total if total else 0.0
    controlled = [r.residual_risk for r in risks if r.residual_risk is not None]
    avg_residual = sum(controlled) / len(controlled) if controlled else avg_inherent
    reduction = (avg_inherent - avg_residual) / avg_inherent * 100 if avg_inherent else 0.0
    return {
        "totalRisks": total,
        "averageInherentRisk": round(avg_inherent, 1),
        "averageResidualRisk": round(avg_residual, 1),
        "riskReduction": round(reduction),
    }


def control_effectiveness(risks: list[RiskEvent]) -> dict[str, Any]:
    controls = [c for r in risks for c in r.controls]
    effective = sum(1 for c in controls if is_effective_control(c.status))
    by_status = Counter(c.status for c in controls)
    by_strength = Counter(c.control_strength for c in controls)
    return {
        "total": len(controls),
        "effective": effective,
        "byStatus": {s: by_status.get(s, 0) for s in CONTROL_STATUSES},
        "byStrength": {s: by_strength.get(s, 0) for s in CONTROL_STRENGTHS},
        "percentage": round(effective / len(controls) * 100) if controls else 0,
    }


def _sorted_by_inherent(risks: list[RiskEvent]) -> list[RiskEvent]:
    return sorted(risks, key=lambda r: (r.inherent_risk, r.created_at, r.id), reverse=True)


def overview(db: Session, user: User) -> dict[str, Any]:
    profile = profile_for(user)
    items = user_protocols(db, user)
    in_progress = sorted((p for p in items if p.status == "IN_PROGRESS"), key=lambda p: p.progress, reverse=True)
    assessment = latest_assessment(db, user)

    data: dict[str, Any] = {
        "user": {"name": user.name, "email": user.email, "profileType": user.profile_type},
        "profile": (
            business_profile_out(profile) if user.profile_type == "BUSINESS" else professional_profile_out(profile)
        )
        if profile is not None
        else None,
        "protocolStats": protocol_stats(items),
        "protocolsInProgress": [
            {
                "id": p.id,
                "title": p.protocol.title if p.protocol else "",
                "progress": p.progress,
                "status": p.status,
                "startedAt": iso(p.started_at),
            }
            for p in in_progress[:3]
        ],
        "riskScore": assessment.overall_risk_score if assessment else None,
        "riskLevel": assessment.risk_level if assessment else None,
    }

    register = get_active_register(db, user)
    if register is None:
        data["hasRegister"] = False
        return data

    risks = register_risks(db, register)
    priorities = Counter(r.priority for r in risks)
    effectiveness = control_effectiveness(risks)
    summary = risk_metrics(risks)
    summary.update(
        {
            "criticalRisks": priorities.get("CRITICAL", 0),
            "highRisks": priorities.get("HIGH", 0),
            "mediumRisks": priorities.get("MEDIUM", 0),
            "lowRisks": priorities.get("LOW", 0),
            "totalControls": effectiveness["total"],
            "implementedControls": effectiveness["effective"],
            "controlImplementationRate": effectiveness["percentage"],
        }
    )
    data.update(
        {
            "hasRegister": True,
            "register": register_out(register),
            "summary": summary,
            "topPriorityRisks": [_risk_row(r) for r in _sorted_by_inherent(risks)[:5]],
        }
    )
    return data


def report_data(db: Session, user: User) -> dict[str, Any]:
    """Aggregates behind the reports page and the PDF/Excel exports."""
    register = get_active_register(db, user)
    if register is None:
        return {"hasData": False, "message": "No hay registro de riesgos activo"}

    risks = register_risks(db, register)
    priorities = Counter(r.priority for r in risks)
    statuses = Counter(r.status for r in risks)
    categories = Counter(r.category or "Sin categoría" for r in risks)
    trends = Counter(r.created_at.strftime("%Y-%m") for r in risks if r.created_at)

    return {
        "hasData": True,
        "register": register_out(register),
        "summary": risk_metrics(risks),
        "riskMatrix": build_risk_matrix(
            {"id": r.id, "likelihood": r.likelihood, "impact": r.impact} for r in risks
        ),
        "priorityDistribution": {p: priorities.get(p, 0) for p in PRIORITIES},
        "statusDistribution": {s: statuses.get(s, 0) for s in RISK_STATUSES},
        "categoryDistribution": dict(sorted(categories.items(), key=lambda kv: (-kv[1], kv[0]))),
        "topRisks": [_risk_row(r) for r in _sorted_by_inherent(risks)[:10]],
        "risks": [_risk_row(r) | {"description": r.description} for r in _sorted_by_inherent(risks)],
        "riskTrends": dict(sorted(trends.items())),
        "controlEffectiveness": control_effectiveness(risks),
        "protocolStats": protocol_stats(user_protocols(db, user)),
        "generatedAt": datetime.utcnow().isoformat(),
    }
