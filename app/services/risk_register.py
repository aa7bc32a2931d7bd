from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from legalrisk.core.scoring import inherent_risk, is_effective_control, priority_for_score, residual_risk

from app.config import get_settings
from app.models import RiskEvent, RiskRegister, RiskScenario, User
from app.schemas import RiskCreateIn, RiskUpdateIn
from app.utils.jsonx import to_json

logger = logging.getLogger(__name__)


def profile_for(user: User):
    if user.profile_type == "BUSINESS" and user.business_profile is not None:
        return user.business_profile
    if user.profile_type == "PROFESSIONAL" and user.professional_profile is not None:
        return user.professional_profile
    return user.business_profile or user.professional_profile


def get_active_register(db: Session, user: User) -> RiskRegister | None:
    return (
        db.execute(
            select(RiskRegister)
            .where(RiskRegister.user_id == user.id, RiskRegister.status == "ACTIVE")
            .order_by(RiskRegister.created_at.desc(), RiskRegister.id.desc())
            .limit(1)
        )
        .scalars()
        .first()
    )


def get_or_create_active_register(db: Session, user: User) -> RiskRegister:
    register = get_active_register(db, user)
    if register is not None:
        return register

    settings = get_settings()
    profile = profile_for(user)
    now = datetime.utcnow()
    register = RiskRegister(
        user_id=user.id,
        profile_type=user.profile_type,
        profile_id=profile.id if profile is not None else None,
        title=f"Registro de Riesgos - {now.strftime('%d/%m/%Y')}",
        description="Registro principal de riesgos",
        jurisdiction=getattr(profile, "jurisdiction", None) or settings.default_jurisdiction,
        status="ACTIVE",
        next_review_date=now + timedelta(days=settings.register_review_days),
    )
    db.add(register)
    db.flush()
    logger.info("Created risk register %s for user %s", register.id, user.id)
    return register


def get_user_risk(db: Session, user: User, risk_id: int) -> RiskEvent | None:
    return (
        db.execute(
            select(RiskEvent)
            .join(RiskRegister, RiskEvent.register_id == RiskRegister.id)
            .where(RiskEvent.id == risk_id, RiskRegister.user_id == user.id)
        )
        .scalars()
        .first()
    )


def risk_stats(risks: list[RiskEvent]) -> dict[str, Any]:
    priorities = Counter(r.priority for r in risks)
    return {
        "total": len(risks),
        "critical": priorities.get("CRITICAL", 0),
        "high": priorities.get("HIGH", 0),
        "medium": priorities.get("MEDIUM", 0),
        "low": priorities.get("LOW", 0),
        "byStatus": dict(Counter(r.status for r in risks)),
    }


def register_risks(db: Session, register: RiskRegister) -> list[RiskEvent]:
    return list(
        db.execute(
            select(RiskEvent)
            .where(RiskEvent.register_id == register.id)
            .order_by(RiskEvent.inherent_risk.desc(), RiskEvent.created_at.desc(), RiskEvent.id.desc())
        )
        .scalars()
        .all()
    )


def list_risks(
    db: Session,
    user: User,
    *,
    priority: str | None = None,
    status: str | None = None,
    category: str | None = None,
    search: str | None = None,
) -> tuple[RiskRegister | None, list[RiskEvent], dict[str, Any]]:
    """Filtered risks of the active register plus stats over the whole register."""
    register = get_active_register(db, user)
    if register is None:
        return None, [], risk_stats([])

    stmt = select(RiskEvent).where(RiskEvent.register_id == register.id)
    if priority:
        stmt = stmt.where(RiskEvent.priority == priority.upper())
    if status:
        stmt = stmt.where(RiskEvent.status == status.upper())
    if category:
        stmt = stmt.where(RiskEvent.category == category)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(RiskEvent.title.ilike(pattern), RiskEvent.description.ilike(pattern)))
    stmt = stmt.order_by(RiskEvent.inherent_risk.desc(), RiskEvent.created_at.desc(), RiskEvent.id.desc())
    risks = list(db.execute(stmt).scalars().all())
    return register, risks, risk_stats(register_risks(db, register))


def create_risk(db: Session, user: User, data: RiskCreateIn) -> RiskEvent:
    register = get_or_create_active_register(db, user)
    scenario = db.get(RiskScenario, data.scenario_id) if data.scenario_id else None
    score = inherent_risk(data.likelihood, data.impact)
    risk = RiskEvent(
        register_id=register.id,
        scenario_id=scenario.id if scenario else None,
        title=data.title.strip(),
        description=data.description,
        category=data.category or "General",
        source_type="SCENARIO" if scenario else "MANUAL",
        identified_by=user.name or user.email,
        likelihood=data.likelihood,
        impact=data.impact,
        inherent_risk=score,
        priority=priority_for_score(score),
        status="IDENTIFIED",
        triggers_json=to_json(data.triggers),
        consequences_json=to_json(data.consequences),
        affected_assets_json=to_json(data.affected_assets),
    )
    db.add(risk)
    db.commit()
    db.refresh(risk)
    return risk


def recalculate_residual_risk(risk: RiskEvent) -> None:
    """Refresh residual values from the risk's effective controls.

    With no effective controls the residual fields are cleared.
    """
    strengths = [c.control_strength for c in risk.controls if is_effective_control(c.status)]
    residual = residual_risk(risk.inherent_risk, strengths)
    if residual is None:
        risk.residual_risk = None
        risk.residual_likelihood = None
        risk.residual_impact = None
        return
    risk.residual_risk = residual
    risk.residual_likelihood = risk.likelihood
    risk.residual_impact = risk.impact


def update_risk(db: Session, risk: RiskEvent, data: RiskUpdateIn) -> RiskEvent:
    changes = data.model_dump(exclude_unset=True)
    for key in ("title", "description", "category", "likelihood", "impact", "status"):
        if changes.get(key) is not None:
            setattr(risk, key, changes[key])
    for key, column in (
        ("triggers", "triggers_json"),
        ("consequences", "consequences_json"),
        ("affected_assets", "affected_assets_json"),
    ):
        if changes.get(key) is not None:
            setattr(risk, column, to_json(changes[key]))

    risk.inherent_risk = inherent_risk(risk.likelihood, risk.impact)
    risk.priority = priority_for_score(risk.inherent_risk)
    recalculate_residual_risk(risk)
    db.commit()
    db.refresh(risk)
    return risk


def delete_risk(db: Session, risk: RiskEvent) -> None:
    db.delete(risk)
    db.commit()
