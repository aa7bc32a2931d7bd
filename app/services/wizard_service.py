from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from legalrisk.core.scoring import wizard_risk_level, wizard_risk_score
from legalrisk.core.vocab import (
    BUSINESS_TYPE_LABELS,
    BUSINESS_TYPES,
    COMPANY_SIZES,
    JURISDICTIONS,
    PROFESSION_LABELS,
    PROFESSIONS,
    REVENUE_RANGES,
    WORK_ENVIRONMENTS,
)

from app.models import (
    Activity,
    AssessmentAnswer,
    BusinessProfile,
    ProfessionalProfile,
    Protocol,
    RiskArea,
    RiskAssessment,
    User,
)
from app.schemas import WizardCompleteIn
from app.services.protocol_service import assign_protocol
from app.utils.jsonx import json_list, to_json

logger = logging.getLogger(__name__)

ASSESSMENT_QUESTIONS: list[dict[str, Any]] = [
    {
        "id": "contratos_escritos",
        "question": "¿Utilizas contratos escritos con todos tus clientes y proveedores?",
        "type": "boolean",
        "weight": 3,
    },
    {
        "id": "politica_privacidad",
        "question": "¿Tienes una política de privacidad y protección de datos implementada?",
        "type": "boolean",
        "weight": 4,
    },
    {
        "id": "asesor_legal",
        "question": "¿Con qué frecuencia consultas con un asesor legal?",
        "type": "scale",
        "weight": 3,
        "options": [
            {"value": 1, "label": "Nunca"},
            {"value": 2, "label": "Raramente"},
            {"value": 3, "label": "Ocasionalmente"},
            {"value": 4, "label": "Frecuentemente"},
            {"value": 5, "label": "Regularmente"},
        ],
    },
    {
        "id": "litigios_previos",
        "question": "¿Has tenido litigios o disputas legales en los últimos 3 años?",
        "type": "scale",
        "weight": 5,
        "options": [
            {"value": 1, "label": "Ninguno"},
            {"value": 2, "label": "1-2 casos"},
            {"value": 3, "label": "3-5 casos"},
            {"value": 4, "label": "6-10 casos"},
            {"value": 5, "label": "Más de 10 casos"},
        ],
    },
    {
        "id": "capacitacion_legal",
        "question": "¿Capacitas a tu equipo en temas de cumplimiento legal?",
        "type": "boolean",
        "weight": 2,
    },
    {
        "id": "seguros",
        "question": "¿Qué seguros comerciales tienes actualmente?",
        "type": "checklist",
        "weight": 3,
        "options": [
            "Responsabilidad civil",
            "Responsabilidad profesional",
            "Ciberseguridad",
            "Propiedad",
            "Vehículos",
            "Ninguno",
        ],
    },
    {
        "id": "documentos_actualizados",
        "question": "¿Tus documentos legales (contratos, políticas) están actualizados?",
        "type": "scale",
        "weight": 4,
        "options": [
            {"value": 1, "label": "Desactualizados (>3 años)"},
            {"value": 2, "label": "Algo desactualizados (1-3 años)"},
            {"value": 3, "label": "Actualizados (<1 año)"},
            {"value": 4, "label": "Revisados regularmente"},
            {"value": 5, "label": "Revisión continua con asesor"},
        ],
    },
]

PRACTICE_AREAS: dict[str, list[str]] = {
    "LAWYER": [
        "Derecho Civil",
        "Derecho Penal",
        "Derecho Laboral",
        "Derecho Comercial",
        "Derecho Tributario",
        "Derecho de Familia",
        "Derecho Administrativo",
        "Propiedad Intelectual",
    ],
    "DOCTOR": [
        "Medicina General",
        "Cardiología",
        "Pediatría",
        "Ginecología",
        "Traumatología",
        "Dermatología",
        "Psiquiatría",
        "Cirugía",
    ],
    "ARCHITECT": [
        "Diseño Residencial",
        "Diseño Comercial",
        "Diseño Industrial",
        "Urbanismo",
        "Restauración",
        "Interiorismo",
    ],
    "ENGINEER": ["Estructuras", "Electrónica", "Mecánica", "Sistemas", "Industrial", "Ambiental"],
    "ACCOUNTANT": [
        "Auditoría",
        "Impuestos",
        "Asesoramiento Financiero",
        "Contabilidad",
        "Liquidación de Sueldos",
    ],
    "CONSULTANT": ["Estrategia", "Gestión", "Tecnología", "RR.HH.", "Marketing", "Finanzas"],
}

# Used by the wizard when the catalog has no activities for the chosen profile.
FALLBACK_ACTIVITIES = [
    {"id": "contratos", "label": "Contratos con clientes/proveedores"},
    {"id": "empleados", "label": "Contratación de empleados"},
    {"id": "datos_personales", "label": "Manejo de datos personales"},
    {"id": "propiedad_intelectual", "label": "Propiedad intelectual"},
    {"id": "importacion_exportacion", "label": "Importación/Exportación"},
    {"id": "servicios_financieros", "label": "Servicios financieros"},
    {"id": "publicidad", "label": "Publicidad y marketing"},
    {"id": "ventas_online", "label": "Ventas online"},
    {"id": "inmuebles", "label": "Compra/venta de inmuebles"},
    {"id": "sociedades", "label": "Constitución de sociedades"},
]

RISK_EXPOSURES = [
    {"id": "laboral", "label": "Riesgos laborales", "description": "Despidos, discriminación, accidentes"},
    {"id": "contractual", "label": "Riesgos contractuales", "description": "Incumplimientos, cláusulas abusivas"},
    {"id": "datos", "label": "Protección de datos", "description": "GDPR, privacidad, filtraciones"},
    {"id": "propiedad", "label": "Propiedad intelectual", "description": "Marcas, patentes, derechos de autor"},
    {"id": "fiscal", "label": "Riesgos fiscales", "description": "Impuestos, sanciones tributarias"},
    {"id": "regulatorio", "label": "Cumplimiento regulatorio", "description": "Licencias, permisos"},
    {
        "id": "responsabilidad",
        "label": "Responsabilidad civil",
        "description": "Daños a terceros, productos defectuosos",
    },
    {"id": "ambiental", "label": "Riesgos ambientales", "description": "Contaminación, residuos peligrosos"},
]

SEVERITY_ORDER = {"HIGH": 0, "MEDIUM": 1, "LOW": 2}


def wizard_options() -> dict[str, Any]:
    return {
        "professions": [{"value": p, "label": PROFESSION_LABELS[p]} for p in PROFESSIONS],
        "practiceAreas": PRACTICE_AREAS,
        "businessTypes": [{"value": b, "label": BUSINESS_TYPE_LABELS[b]} for b in BUSINESS_TYPES],
        "companySizes": list(COMPANY_SIZES),
        "revenueRanges": list(REVENUE_RANGES),
        "workEnvironments": list(WORK_ENVIRONMENTS),
        "jurisdictions": list(JURISDICTIONS),
        "businessActivities": FALLBACK_ACTIVITIES,
        "riskExposure": RISK_EXPOSURES,
    }


def all_answered(answers: dict[str, Any]) -> bool:
    for question in ASSESSMENT_QUESTIONS:
        value = answers.get(question["id"])
        if question["type"] == "checklist":
            if not isinstance(value, list) or not value:
                return False
        elif value is None:
            return False
    return True


def score_answers(answers: dict[str, Any]) -> dict[str, Any]:
    score = wizard_risk_score(answers)
    return {"riskScore": score, "level": wizard_risk_level(score), "allAnswered": all_answered(answers)}


def _applies(row, profile_type: str, value: str) -> bool:
    column = row.professions_json if profile_type == "PROFESSIONAL" else row.business_types_json
    return value in json_list(column)


def activities_for(db: Session, profile_type: str, value: str) -> dict[str, Any]:
    """Catalog activities and risk areas that list the profession or business type."""
    activities = [
        a
        for a in db.execute(select(Activity).where(Activity.is_active.is_(True))).scalars().all()
        if _applies(a, profile_type, value)
    ]
    activities.sort(key=lambda a: (a.category, a.order))
    areas = [
        r
        for r in db.execute(select(RiskArea).where(RiskArea.is_active.is_(True))).scalars().all()
        if _applies(r, profile_type, value)
    ]
    areas.sort(key=lambda r: (SEVERITY_ORDER.get(r.severity, 9), r.order))
    return {
        "activities": [
            {
                "id": a.code,
                "label": a.label,
                "description": a.description,
                "category": a.category,
            }
            for a in activities
        ],
        "riskAreas": [
            {
                "id": r.code,
                "label": r.label,
                "description": r.description,
                "severity": r.severity,
                "examples": json_list(r.examples_json),
            }
            for r in areas
        ],
    }


def _upsert_profile(db: Session, user: User, data: WizardCompleteIn):
    if data.profile_type == "PROFESSIONAL":
        profile = user.professional_profile
        if profile is None:
            profile = ProfessionalProfile(user=user)
            db.add(profile)
        profile.profession = data.profession
        profile.practice_areas_json = to_json(data.practice_areas)
        profile.years_experience = data.years_experience
        profile.jurisdiction = data.jurisdiction
        profile.work_environment = data.work_environment
        profile.activities_json = to_json(data.activities)
        profile.risk_exposure_json = to_json(data.risk_exposure)
    else:
        profile = user.business_profile
        if profile is None:
            profile = BusinessProfile(user=user)
            db.add(profile)
        profile.business_type = data.business_type
        profile.company_size = data.company_size
        profile.revenue_range = data.revenue_range
        profile.jurisdiction = data.jurisdiction
        profile.business_activities_json = to_json(data.activities)
        profile.risk_exposure_json = to_json(data.risk_exposure)
    db.flush()
    return profile


def complete_wizard(db: Session, user: User, data: WizardCompleteIn) -> dict[str, Any]:
    """Persist the wizard outcome: profile, scored assessment and assigned protocols."""
    profile = _upsert_profile(db, user, data)
    user.profile_type = data.profile_type

    score = wizard_risk_score(data.answers)
    now = datetime.utcnow()
    assessment = RiskAssessment(
        user_id=user.id,
        profile_type=data.profile_type,
        profile_id=profile.id,
        title=f"Evaluación inicial - {now.strftime('%d/%m/%Y')}",
        status="COMPLETED",
        overall_risk_score=score,
        risk_level=wizard_risk_level(score),
        completed_at=now,
    )
    for question_id, answer in data.answers.items():
        assessment.answers.append(AssessmentAnswer(question_id=question_id, answer_json=to_json(answer)))
    db.add(assessment)
    db.flush()

    assigned: list[str] = []
    for code in dict.fromkeys(data.selected_protocols):
        protocol = db.execute(select(Protocol).where(Protocol.code == code)).scalars().first()
        if protocol is None:
            logger.warning("Skipping unknown protocol code %r for user %s", code, user.id)
            continue
        _, created = assign_protocol(db, user, protocol)
        if created:
            assigned.append(code)

    db.commit()
    logger.info(
        "Wizard completed for user %s: score=%s protocols=%s", user.id, score, len(assigned)
    )
    return {
        "profileId": profile.id,
        "assessmentId": assessment.id,
        "riskScore": score,
        "level": assessment.risk_level,
        "assignedProtocols": assigned,
    }


def latest_assessment(db: Session, user: User) -> RiskAssessment | None:
    return (
        db.execute(
            select(RiskAssessment)
            .where(RiskAssessment.user_id == user.id, RiskAssessment.status == "COMPLETED")
            .order_by(RiskAssessment.completed_at.desc(), RiskAssessment.id.desc())
            .limit(1)
        )
        .scalars()
        .first()
    )
