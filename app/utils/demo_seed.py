from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from legalrisk.core.scoring import inherent_risk, priority_for_score

from app.models import BusinessProfile, RiskControl, RiskEvent, User
from app.security import hash_password
from app.services.risk_register import get_or_create_active_register, recalculate_residual_risk
from app.utils.jsonx import to_json

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@legalrisk.local"
DEMO_PASSWORD = "demo1234"


@dataclass(slots=True)
class DemoControl:
    title: str
    description: str
    type: str
    category: str
    strength: str
    status: str = "OPERATIONAL"


@dataclass(slots=True)
class DemoRisk:
    title: str
    description: str
    category: str
    likelihood: str
    impact: str
    triggers: list[str] = field(default_factory=list)
    consequences: list[str] = field(default_factory=list)
    affected_assets: list[str] = field(default_factory=list)
    controls: list[DemoControl] = field(default_factory=list)


DEMO_RISKS: list[DemoRisk] = [
    DemoRisk(
        title="Demanda por responsabilidad profesional (mala praxis)",
        description=(
            "Riesgo de demandas civiles o penales por errores u omisiones en la práctica profesional "
            "que causen daño a clientes"
        ),
        category="Responsabilidad Profesional",
        likelihood="POSSIBLE",
        impact="MAJOR",
        triggers=["Incumplimiento de plazos legales", "Omisión de información crítica", "Negligencia en procedimientos"],
        consequences=["Demanda civil por daños y perjuicios", "Pérdida de matrícula profesional", "Daño reputacional grave"],
        affected_assets=["Reputación profesional", "Patrimonio personal", "Continuidad del negocio"],
        controls=[
            DemoControl(
                "Seguro de responsabilidad profesional",
                "Póliza de seguro que cubra demandas por mala praxis con cobertura mínima de USD 500,000",
                "CORRECTIVE",
                "LEGAL",
                "STRONG",
            ),
            DemoControl(
                "Protocolo de documentación de casos",
                "Procedimiento estandarizado para documentar interacciones, decisiones y entregables",
                "PREVENTIVE",
                "ADMINISTRATIVE",
                "MODERATE",
                "IMPLEMENTED",
            ),
            DemoControl(
                "Revisión por pares",
                "Revisión de casos complejos por colegas antes de presentaciones críticas",
                "PREVENTIVE",
                "ADMINISTRATIVE",
                "MODERATE",
                "PLANNED",
            ),
        ],
    ),
    DemoRisk(
        title="Filtración de datos personales o sensibles",
        description=(
            "Acceso no autorizado, pérdida o divulgación de información confidencial de clientes o empleados"
        ),
        category="Protección de Datos",
        likelihood="LIKELY",
        impact="MAJOR",
        triggers=["Ataque cibernético (ransomware, phishing)", "Pérdida o robo de dispositivos"],
        consequences=["Multas de la autoridad de protección de datos", "Demandas por violación de privacidad"],
        affected_assets=["Datos de clientes", "Sistemas informáticos", "Reputación"],
        controls=[
            DemoControl(
                "Política de privacidad y seguridad de datos",
                "Documento formal con procedimientos de manejo de datos personales",
                "DIRECTIVE",
                "ADMINISTRATIVE",
                "MODERATE",
            ),
            DemoControl(
                "Encriptación de datos sensibles",
                "Encriptación AES-256 de bases de datos y archivos con información confidencial",
                "PREVENTIVE",
                "TECHNICAL",
                "STRONG",
                "IN_PROGRESS",
            ),
            DemoControl(
                "Backups encriptados diarios",
                "Respaldo automático cifrado de datos con retención de 30 días",
                "CORRECTIVE",
                "TECHNICAL",
                "MODERATE",
                "IMPLEMENTED",
            ),
        ],
    ),
    DemoRisk(
        title="Incumplimiento contractual con clientes",
        description="Falta de cumplimiento de obligaciones acordadas en contratos de servicios",
        category="Contractual",
        likelihood="POSSIBLE",
        impact="MODERATE",
        triggers=["Sobrecarga de trabajo", "Falta de claridad en alcance del servicio"],
        consequences=["Demanda por incumplimiento contractual", "Obligación de devolver honorarios"],
        affected_assets=["Ingresos", "Relaciones con clientes"],
        controls=[
            DemoControl(
                "Contratos modelo personalizados",
                "Plantillas de contratos con cláusulas claras sobre alcance, plazos y limitaciones",
                "PREVENTIVE",
                "LEGAL",
                "STRONG",
            ),
        ],
    ),
    DemoRisk(
        title="Reclamos laborales de empleados",
        description="Demandas de trabajadores por despido injustificado, acoso o condiciones de trabajo",
        category="Laboral",
        likelihood="UNLIKELY",
        impact="MAJOR",
        triggers=["Despido sin causa justificada", "Falta de contrato formal"],
        consequences=["Juicio laboral con indemnizaciones", "Multas por inspecciones laborales"],
        affected_assets=["Patrimonio", "Clima laboral"],
        controls=[
            DemoControl(
                "Manual del empleado",
                "Documento con políticas laborales, código de conducta y procedimientos disciplinarios",
                "DIRECTIVE",
                "ADMINISTRATIVE",
                "MODERATE",
                "PLANNED",
            ),
        ],
    ),
    DemoRisk(
        title="Incumplimiento normativo o regulatorio",
        description="Violación de regulaciones sectoriales, fiscales o administrativas por falta de actualización",
        category="Regulatorio",
        likelihood="POSSIBLE",
        impact="MODERATE",
        triggers=["Cambios en legislación sin conocimiento", "Falta de capacitación del equipo"],
        consequences=["Multas y sanciones económicas", "Suspensión de actividades"],
        affected_assets=["Licencias", "Continuidad operativa"],
    ),
]


def ensure_demo_user(db: Session) -> User:
    user = db.execute(select(User).where(User.email == DEMO_EMAIL)).scalars().first()
    if user is None:
        user = User(email=DEMO_EMAIL, name="Usuario Demo", password_hash=hash_password(DEMO_PASSWORD))
        db.add(user)
        db.flush()
    if user.business_profile is None:
        user.business_profile = BusinessProfile(
            business_type="CONSULTING",
            company_size="SMALL",
            revenue_range="BETWEEN_100K_500K",
            jurisdiction="AR",
            business_activities_json=to_json(["contratos", "empleados", "datos_personales"]),
            risk_exposure_json=to_json(["contractual", "datos", "laboral"]),
        )
    user.profile_type = "BUSINESS"
    db.flush()
    return user


def seed_demo(db: Session) -> dict[str, int]:
    """Create the demo user with example risks; risks already present by title are skipped."""
    user = ensure_demo_user(db)
    register = get_or_create_active_register(db, user)
    existing = {r.title for r in register.risk_events}
    now = datetime.utcnow()

    created_risks = 0
    created_controls = 0
    for item in DEMO_RISKS:
        if item.title in existing:
            continue
        score = inherent_risk(item.likelihood, item.impact)
        risk = RiskEvent(
            title=item.title,
            description=item.description,
            category=item.category,
            source_type="MANUAL",
            identified_by="Seed",
            likelihood=item.likelihood,
            impact=item.impact,
            inherent_risk=score,
            priority=priority_for_score(score),
            status="EVALUATED",
            triggers_json=to_json(item.triggers),
            consequences_json=to_json(item.consequences),
            affected_assets_json=to_json(item.affected_assets),
        )
        for control in item.controls:
            risk.controls.append(
                RiskControl(
                    title=control.title,
                    description=control.description,
                    type=control.type,
                    category=control.category,
                    control_strength=control.strength,
                    status=control.status,
                    is_custom=True,
                    implementation_date=now if control.status in {"IMPLEMENTED", "OPERATIONAL"} else None,
                )
            )
            created_controls += 1
        recalculate_residual_risk(risk)
        register.risk_events.append(risk)
        created_risks += 1

    register.last_reviewed_at = now
    db.commit()
    logger.info("Demo seed: %s risks, %s controls for %s", created_risks, created_controls, user.email)
    return {"userId": user.id, "risks": created_risks, "controls": created_controls}
