from __future__ import annotations

from datetime import datetime
from typing import Any

from legalrisk.core.scoring import controls_effectiveness, is_effective_control

from app.models import (
    BusinessProfile,
    ControlReview,
    ProfessionalProfile,
    Protocol,
    RiskControl,
    RiskEvent,
    RiskRegister,
    RiskScenario,
    TreatmentPlan,
    User,
    UserProtocol,
)
from app.utils.jsonx import json_dict, json_list


def iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def user_out(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "profileType": user.profile_type,
        "createdAt": iso(user.created_at),
    }


def professional_profile_out(profile: ProfessionalProfile | None) -> dict[str, Any] | None:
    if profile is None:
        return None
    return {
        "id": profile.id,
        "profession": profile.profession,
        "practiceAreas": json_list(profile.practice_areas_json),
        "yearsExperience": profile.years_experience,
        "jurisdiction": profile.jurisdiction,
        "workEnvironment": profile.work_environment,
        "activities": json_list(profile.activities_json),
        "riskExposure": json_list(profile.risk_exposure_json),
    }


def business_profile_out(profile: BusinessProfile | None) -> dict[str, Any] | None:
    if profile is None:
        return None
    return {
        "id": profile.id,
        "businessType": profile.business_type,
        "companySize": profile.company_size,
        "revenueRange": profile.revenue_range,
        "jurisdiction": profile.jurisdiction,
        "businessActivities": json_list(profile.business_activities_json),
        "riskExposure": json_list(profile.risk_exposure_json),
    }


def protocol_out(protocol: Protocol, *, with_content: bool = True) -> dict[str, Any]:
    data = {
        "id": protocol.id,
        "code": protocol.code,
        "title": protocol.title,
        "description": protocol.description,
        "type": protocol.type,
        "category": protocol.category,
        "priority": protocol.priority,
        "estimatedDays": protocol.estimated_days,
        "complexity": protocol.complexity,
        "professions": json_list(protocol.professions_json),
        "businessTypes": json_list(protocol.business_types_json),
        "jurisdictions": json_list(protocol.jurisdictions_json),
    }
    if with_content:
        data["content"] = json_dict(protocol.content_json)
    return data


def user_protocol_out(item: UserProtocol, *, with_content: bool = False) -> dict[str, Any]:
    return {
        "id": item.id,
        "status": item.status,
        "progress": item.progress,
        "notes": item.notes,
        "customizations": json_dict(item.customizations_json),
        "assignedAt": iso(item.assigned_at),
        "startedAt": iso(item.started_at),
        "completedAt": iso(item.completed_at),
        "protocol": protocol_out(item.protocol, with_content=with_content) if item.protocol else None,
    }


def review_out(review: ControlReview) -> dict[str, Any]:
    return {
        "id": review.id,
        "reviewDate": iso(review.review_date),
        "effectiveness": review.effectiveness,
        "notes": review.notes,
        "reviewer": review.reviewer,
    }


def control_out(control: RiskControl) -> dict[str, Any]:
    latest = control.reviews[0] if control.reviews else None
    return {
        "id": control.id,
        "riskEventId": control.risk_event_id,
        "title": control.title,
        "description": control.description,
        "type": control.type,
        "category": control.category,
        "controlStrength": control.control_strength,
        "status": control.status,
        "owner": control.owner,
        "reviewFrequency": control.review_frequency,
        "estimatedCost": control.estimated_cost,
        "estimatedEffort": control.estimated_effort,
        "implementationDate": iso(control.implementation_date),
        "lastReviewedAt": iso(control.last_reviewed_at),
        "isCustom": bool(control.is_custom),
        "protocol": {"id": control.protocol.id, "title": control.protocol.title} if control.protocol else None,
        "latestReview": review_out(latest) if latest else None,
        "createdAt": iso(control.created_at),
    }


def treatment_plan_out(plan: TreatmentPlan | None) -> dict[str, Any] | None:
    if plan is None:
        return None
    return {
        "id": plan.id,
        "riskEventId": plan.risk_event_id,
        "strategy": plan.strategy,
        "justification": plan.justification,
        "actions": json_list(plan.actions_json),
        "totalBudget": plan.total_budget,
        "timeline": plan.timeline,
        "targetLikelihood": plan.target_likelihood,
        "targetImpact": plan.target_impact,
        "targetRisk": plan.target_risk,
        "status": plan.status,
        "progress": plan.progress,
        "approvedBy": plan.approved_by,
        "approvedAt": iso(plan.approved_at),
        "startedAt": iso(plan.started_at),
        "completedAt": iso(plan.completed_at),
        "createdAt": iso(plan.created_at),
        "updatedAt": iso(plan.updated_at),
    }


def scenario_out(scenario: RiskScenario | None) -> dict[str, Any] | None:
    if scenario is None:
        return None
    return {
        "id": scenario.id,
        "code": scenario.code,
        "title": scenario.title,
        "description": scenario.description,
        "category": scenario.category,
        "likelihood": scenario.likelihood,
        "impact": scenario.impact,
        "riskScore": scenario.risk_score,
        "triggers": json_list(scenario.triggers_json),
        "consequences": json_list(scenario.consequences_json),
        "mitigationStrategies": json_list(scenario.mitigation_json),
    }


def register_out(register: RiskRegister | None) -> dict[str, Any] | None:
    if register is None:
        return None
    return {
        "id": register.id,
        "title": register.title,
        "description": register.description,
        "jurisdiction": register.jurisdiction,
        "status": register.status,
        "lastReviewedAt": iso(register.last_reviewed_at),
        "nextReviewDate": iso(register.next_review_date),
        "createdAt": iso(register.created_at),
    }


def risk_out(risk: RiskEvent, *, detail: bool = False) -> dict[str, Any]:
    controls = list(risk.controls)
    data: dict[str, Any] = {
        "id": risk.id,
        "registerId": risk.register_id,
        "scenarioId": risk.scenario_id,
        "title": risk.title,
        "description": risk.description,
        "category": risk.category,
        "sourceType": risk.source_type,
        "identifiedBy": risk.identified_by,
        "likelihood": risk.likelihood,
        "impact": risk.impact,
        "inherentRisk": risk.inherent_risk,
        "residualLikelihood": risk.residual_likelihood,
        "residualImpact": risk.residual_impact,
        "residualRisk": risk.residual_risk,
        "priority": risk.priority,
        "status": risk.status,
        "treatmentStrategy": risk.treatment_strategy,
        "triggers": json_list(risk.triggers_json),
        "consequences": json_list(risk.consequences_json),
        "affectedAssets": json_list(risk.affected_assets_json),
        "controlsCount": len(controls),
        "createdAt": iso(risk.created_at),
        "updatedAt": iso(risk.updated_at),
    }
    if detail:
        data["register"] = register_out(risk.register)
        data["scenario"] = scenario_out(risk.scenario)
        data["controls"] = [control_out(c) for c in controls]
        data["treatmentPlan"] = treatment_plan_out(risk.treatment_plan)
        data["controlsImplemented"] = sum(1 for c in controls if is_effective_control(c.status))
        data["controlsEffectiveness"] = controls_effectiveness(c.status for c in controls)
    return data
