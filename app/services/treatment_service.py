from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from legalrisk.core.scoring import target_risk

from app.models import RiskEvent, TreatmentPlan
from app.schemas import TreatmentCreateIn, TreatmentUpdateIn
from app.utils.jsonx import to_json

logger = logging.getLogger(__name__)


class TreatmentPlanExists(Exception):
    pass


def _actions_json(actions) -> str:
    return to_json([a.model_dump() for a in actions])


def create_plan(db: Session, risk: RiskEvent, data: TreatmentCreateIn) -> TreatmentPlan:
    if risk.treatment_plan is not None:
        raise TreatmentPlanExists(f"risk {risk.id} already has a treatment plan")

    computed = target_risk(data.target_likelihood, data.target_impact)
    plan = TreatmentPlan(
        strategy=data.strategy,
        justification=data.justification,
        actions_json=_actions_json(data.actions),
        total_budget=data.total_budget,
        timeline=data.timeline,
        target_likelihood=data.target_likelihood,
        target_impact=data.target_impact,
        target_risk=computed if computed is not None else data.target_risk,
        status="DRAFT",
        progress=0,
    )
    risk.treatment_plan = plan
    risk.treatment_strategy = data.strategy
    risk.status = "TREATING"
    db.commit()
    db.refresh(plan)
    return plan


def get_plan(risk: RiskEvent, plan_id: int) -> TreatmentPlan | None:
    plan = risk.treatment_plan
    if plan is None or plan.id != plan_id:
        return None
    return plan


def update_plan(db: Session, risk: RiskEvent, plan: TreatmentPlan, data: TreatmentUpdateIn) -> TreatmentPlan:
    changes = data.model_dump(exclude_unset=True)
    now = datetime.utcnow()

    for key in (
        "strategy",
        "justification",
        "total_budget",
        "timeline",
        "target_likelihood",
        "target_impact",
        "target_risk",
        "progress",
    ):
        if key not in changes:
            continue
        if key in {"strategy", "progress"} and changes[key] is None:
            continue
        setattr(plan, key, changes[key])
    if data.actions is not None:
        plan.actions_json = _actions_json(data.actions)
    if data.strategy:
        risk.treatment_strategy = data.strategy

    computed = target_risk(plan.target_likelihood, plan.target_impact)
    if computed is not None and ("target_likelihood" in changes or "target_impact" in changes):
        plan.target_risk = computed

    status = changes.get("status")
    if status:
        plan.status = status
        if status == "APPROVED" and plan.approved_at is None:
            plan.approved_at = now
            if data.approved_by:
                plan.approved_by = data.approved_by
        if status == "IN_PROGRESS" and plan.started_at is None:
            plan.started_at = now
        if status == "COMPLETED":
            if plan.completed_at is None:
                plan.completed_at = now
            plan.progress = 100
            risk.status = "MONITORING"

    db.commit()
    db.refresh(plan)
    return plan


def delete_plan(db: Session, risk: RiskEvent) -> None:
    risk.treatment_plan = None
    risk.treatment_strategy = None
    risk.status = "EVALUATED"
    db.commit()
    logger.info("Removed treatment plan of risk %s", risk.id)
