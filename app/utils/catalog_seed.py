"""Built-in wizard and protocol catalog, optionally overridden by generated seed files."""

from __future__ import annotations

import json
import logging
import re
import unicodedata
from pathlib import Path
from typing import Any

from legalrisk.core.scoring import inherent_risk
from legalrisk.core.vocab import BUSINESS_TYPES, PROFESSIONS

logger = logging.getLogger(__name__)

ALL_PROFESSIONS = list(PROFESSIONS)
ALL_BUSINESS_TYPES = list(BUSINESS_TYPES)

PROTOCOLS_FILE = "protocols.json"
SCENARIOS_FILE = "scenarios.json"
WIZARD_DATA_FILE = "wizard-data.json"

# Generator vocabulary -> register vocabulary.
SCENARIO_PROBABILITY_MAP = {
    "VERY_LOW": "RARE",
    "LOW": "UNLIKELY",
    "MEDIUM": "POSSIBLE",
    "HIGH": "LIKELY",
    "VERY_HIGH": "ALMOST_CERTAIN",
}
SCENARIO_IMPACT_MAP = {
    "NEGLIGIBLE": "INSIGNIFICANT",
    "LOW": "MINOR",
    "MODERATE": "MODERATE",
    "HIGH": "MAJOR",
    "CATASTROPHIC": "CATASTROPHIC",
}


def slugify(value: str) -> str:
    text = unicodedata.normalize("NFKD", value or "").encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")


def _act(
    code: str,
    label: str,
    description: str,
    category: str,
    order: int,
    *,
    professions: list[str] | None = None,
    business_types: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "code": code,
        "label": label,
        "description": description,
        "category": category,
        "order": order,
        "professions": professions or [],
        "businessTypes": business_types or [],
    }


def _area(
    code: str,
    label: str,
    description: str,
    severity: str,
    order: int,
    examples: list[str],
    *,
    professions: list[str] | None = None,
    business_types: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "code": code,
        "label": label,
        "description": description,
        "severity": severity,
        "order": order,
        "examples": examples,
        "professions": professions or [],
        "businessTypes": business_types or [],
    }


ACTIVITIES: list[dict[str, Any]] = [
    _act("atencion_pacientes", "Atención directa de pacientes", "Consultas, diagnósticos, tratamientos", "Operaciones", 1, professions=["DOCTOR"]),
    _act("cirugias_procedimientos", "Cirugías y procedimientos médicos", "Intervenciones quirúrgicas y procedimientos invasivos", "Operaciones", 2, professions=["DOCTOR"]),
    _act("prescripcion_medicamentos", "Prescripción de medicamentos", "Recetas y gestión de tratamientos farmacológicos", "Operaciones", 3, professions=["DOCTOR", "DENTIST"]),
    _act("manejo_historias_clinicas", "Manejo de historias clínicas", "Gestión de datos sensibles de pacientes", "Legal", 4, professions=["DOCTOR", "DENTIST", "PSYCHOLOGIST"]),
    _act("asesoramiento_legal", "Asesoramiento legal a clientes", "Consultas y consejos jurídicos", "Operaciones", 1, professions=["LAWYER", "NOTARY"]),
    _act("redaccion_contratos", "Redacción de contratos", "Elaboración de acuerdos y documentos legales", "Operaciones", 2, professions=["LAWYER", "NOTARY"]),
    _act("representacion_judicial", "Representación judicial", "Litigios y audiencias en tribunales", "Operaciones", 3, professions=["LAWYER"]),
    _act("manejo_fondos_clientes", "Manejo de fondos de clientes", "Administración de cuentas de fideicomiso", "Financiero", 4, professions=["LAWYER"]),
    _act("diseno_proyectos", "Diseño de proyectos arquitectónicos", "Planos, renders y documentación técnica", "Operaciones", 1, professions=["ARCHITECT", "ENGINEER", "CIVIL_ENGINEER"]),
    _act("direccion_obra", "Dirección de obra", "Supervisión de construcciones y proyectos", "Operaciones", 2, professions=["ARCHITECT", "CIVIL_ENGINEER"]),
    _act("gestion_permisos", "Gestión de permisos y habilitaciones", "Trámites municipales y regulatorios", "Legal", 3, professions=["ARCHITECT", "ENGINEER", "CIVIL_ENGINEER"]),
    _act("contabilidad_empresas", "Contabilidad de empresas", "Registración contable y estados financieros", "Operaciones", 1, professions=["ACCOUNTANT"]),
    _act("liquidacion_impuestos", "Liquidación de impuestos", "DDJJ, pagos y asesoramiento fiscal", "Operaciones", 2, professions=["ACCOUNTANT"]),
    _act("consultoria_estrategica", "Consultoría estratégica", "Diagnóstico y planes de negocio para clientes", "Operaciones", 1, professions=["CONSULTANT"]),
    _act("atencion_psicoterapeutica", "Atención psicoterapéutica", "Sesiones individuales, de pareja o grupales", "Operaciones", 1, professions=["PSYCHOLOGIST"]),
    _act("contratacion_personal", "Contratación de personal", "Empleados administrativos o asistentes", "Laboral", 10, professions=ALL_PROFESSIONS),
    _act("manejo_datos_clientes", "Manejo de datos personales de clientes", "Bases de datos y archivos con información personal", "Legal", 11, professions=ALL_PROFESSIONS),
    _act("seguros_profesionales", "Gestión de seguros profesionales", "Pólizas de responsabilidad civil profesional", "Financiero", 12, professions=ALL_PROFESSIONS),
    _act("contratos_proveedores", "Contratos con proveedores", "Acuerdos de suministro y servicios", "Contractual", 1, business_types=ALL_BUSINESS_TYPES),
    _act("contratos_clientes", "Contratos con clientes", "Acuerdos comerciales y condiciones de venta", "Contractual", 2, business_types=ALL_BUSINESS_TYPES),
    _act("gestion_empleados", "Gestión de empleados", "Contratación, nómina y relaciones laborales", "Laboral", 3, business_types=ALL_BUSINESS_TYPES),
    _act("proteccion_datos", "Protección de datos personales", "Tratamiento de datos de clientes y empleados", "Legal", 4, business_types=ALL_BUSINESS_TYPES),
    _act("ventas_online", "Ventas online", "Comercio electrónico y pagos digitales", "Comercial", 5, business_types=["E_COMMERCE", "TECHNOLOGY", "RETAIL"]),
    _act("terminos_condiciones", "Términos y condiciones web", "Condiciones de uso de sitios y aplicaciones", "Legal", 6, business_types=["E_COMMERCE", "TECHNOLOGY"]),
    _act("propiedad_intelectual", "Propiedad intelectual", "Marcas, software y contenidos propios", "Legal", 7, business_types=["TECHNOLOGY", "MEDIA", "E_COMMERCE"]),
    _act("servicios_financieros", "Servicios financieros", "Préstamos, inversiones o medios de pago", "Regulatorio", 8, business_types=["FINANCE"]),
    _act("compraventa_inmuebles", "Compra/venta de inmuebles", "Intermediación y operaciones inmobiliarias", "Comercial", 9, business_types=["REAL_ESTATE"]),
    _act("servicios_salud", "Prestación de servicios de salud", "Atención médica y servicios asistenciales", "Operaciones", 10, business_types=["HEALTHCARE"]),
    _act("ejecucion_obras", "Ejecución de obras", "Construcción y montaje en obra", "Operaciones", 11, business_types=["CONSTRUCTION"]),
    _act("fabricacion_productos", "Fabricación de productos", "Producción industrial y manufactura", "Operaciones", 12, business_types=["MANUFACTURING"]),
]

RISK_AREAS: list[dict[str, Any]] = [
    _area("mala_praxis_medica", "Responsabilidad profesional (mala praxis médica)", "Demandas por errores de diagnóstico o tratamiento", "HIGH", 1, ["Diagnóstico erróneo", "Complicaciones quirúrgicas"], professions=["DOCTOR", "DENTIST"]),
    _area("privacidad_datos_salud", "Privacidad y protección de datos de salud", "Filtración o uso indebido de historias clínicas", "HIGH", 2, ["Acceso no autorizado a historias clínicas"], professions=["DOCTOR", "DENTIST", "PSYCHOLOGIST"]),
    _area("consentimiento_informado", "Falta de consentimiento informado", "Procedimientos sin consentimiento documentado", "HIGH", 3, ["Cirugía sin consentimiento firmado"], professions=["DOCTOR", "DENTIST"]),
    _area("mala_praxis_legal", "Mala praxis legal y negligencia profesional", "Errores u omisiones en la defensa de clientes", "HIGH", 1, ["Vencimiento de plazos procesales", "Asesoramiento erróneo"], professions=["LAWYER", "NOTARY"]),
    _area("confidencialidad_legal", "Violación de confidencialidad cliente-abogado", "Divulgación de información privilegiada", "HIGH", 2, ["Envío de documentos al destinatario equivocado"], professions=["LAWYER", "NOTARY"]),
    _area("conflicto_interes", "Conflictos de interés", "Representación de partes con intereses opuestos", "MEDIUM", 3, ["Asesorar a ambas partes de una operación"], professions=["LAWYER"]),
    _area("defectos_construccion", "Defectos de construcción y vicios ocultos", "Fallas estructurales o de diseño", "HIGH", 1, ["Filtraciones", "Fisuras estructurales"], professions=["ARCHITECT", "ENGINEER", "CIVIL_ENGINEER"]),
    _area("errores_contables", "Errores contables y fiscales", "Errores en balances o declaraciones juradas", "HIGH", 1, ["Declaración jurada con errores", "Multas de AFIP"], professions=["ACCOUNTANT"]),
    _area("violacion_secreto_profesional", "Violación de secreto profesional", "Divulgación de información de pacientes", "HIGH", 1, ["Comentarios sobre pacientes en redes"], professions=["PSYCHOLOGIST"]),
    _area("riesgos_laborales", "Riesgos laborales", "Conflictos con empleados o colaboradores", "MEDIUM", 10, ["Despido sin causa", "Trabajo no registrado"], professions=ALL_PROFESSIONS),
    _area("incumplimiento_contractual", "Incumplimiento contractual", "Reclamos por servicios no prestados o mal prestados", "MEDIUM", 11, ["Honorarios impagos", "Entregas fuera de plazo"], professions=ALL_PROFESSIONS),
    _area("riesgos_fiscales", "Riesgos fiscales y tributarios", "Incumplimiento de obligaciones impositivas", "MEDIUM", 12, ["Facturación incorrecta"], professions=ALL_PROFESSIONS),
    _area("riesgos_laborales_empresa", "Riesgos laborales", "Demandas y sanciones en materia laboral", "HIGH", 1, ["Accidentes laborales", "Despidos"], business_types=ALL_BUSINESS_TYPES),
    _area("incumplimiento_contractual_empresa", "Incumplimiento contractual", "Conflictos con clientes o proveedores", "HIGH", 2, ["Penalidades por demoras"], business_types=ALL_BUSINESS_TYPES),
    _area("proteccion_datos_empresa", "Protección de datos (GDPR/LOPD)", "Tratamiento indebido de datos personales", "HIGH", 3, ["Base de datos no registrada", "Filtración de datos"], business_types=ALL_BUSINESS_TYPES),
    _area("responsabilidad_producto", "Responsabilidad por producto defectuoso", "Daños causados por productos vendidos", "HIGH", 4, ["Retiro de productos del mercado"], business_types=["MANUFACTURING", "RETAIL", "E_COMMERCE"]),
    _area("propiedad_intelectual_empresa", "Propiedad intelectual", "Infracción o pérdida de derechos de PI", "MEDIUM", 5, ["Uso de marca ajena", "Software sin licencia"], business_types=["TECHNOLOGY", "E_COMMERCE", "MEDIA", "MANUFACTURING"]),
    _area("cumplimiento_regulatorio", "Cumplimiento regulatorio", "Sanciones de organismos de control", "MEDIUM", 6, ["Habilitaciones vencidas"], business_types=ALL_BUSINESS_TYPES),
    _area("ciberseguridad", "Ciberseguridad y ataques informáticos", "Incidentes de seguridad de la información", "HIGH", 7, ["Ransomware", "Phishing"], business_types=["TECHNOLOGY", "E_COMMERCE", "FINANCE"]),
    _area("fraude_corrupcion", "Fraude y corrupción", "Fraude interno o externo y actos de corrupción", "MEDIUM", 8, ["Desvío de fondos"], business_types=ALL_BUSINESS_TYPES),
]


def _steps(*titles: str) -> list[dict[str, Any]]:
    return [{"order": idx, "title": title, "description": title} for idx, title in enumerate(titles, start=1)]


PROTOCOLS: list[dict[str, Any]] = [
    {
        "code": "contratos_modelo",
        "title": "Contratos Modelo Personalizados",
        "description": "Plantillas de contratos adaptadas a su actividad",
        "category": "Contractual",
        "priority": "HIGH",
        "estimatedDays": 30,
        "complexity": "MEDIUM",
        "content": {
            "objectives": ["Formalizar todas las relaciones comerciales", "Reducir conflictos contractuales"],
            "scope": "Contratos con clientes, proveedores y colaboradores",
            "steps": _steps(
                "Relevar los acuerdos vigentes",
                "Identificar cláusulas críticas",
                "Redactar plantillas modelo",
                "Revisión por asesor legal",
                "Implementar y capacitar al equipo",
            ),
            "references": ["Código Civil y Comercial de la Nación"],
        },
    },
    {
        "code": "politica_privacidad",
        "title": "Política de Privacidad y GDPR",
        "description": "Cumplimiento de normativas de protección de datos",
        "category": "Datos",
        "priority": "CRITICAL",
        "estimatedDays": 45,
        "complexity": "HIGH",
        "content": {
            "objectives": ["Cumplir la Ley 25.326", "Proteger los datos de clientes y empleados"],
            "scope": "Todas las bases de datos con información personal",
            "steps": _steps(
                "Inventariar bases de datos personales",
                "Registrar bases ante la autoridad de control",
                "Redactar política de privacidad",
                "Implementar consentimientos",
                "Definir procedimiento ante incidentes",
            ),
            "references": ["Ley 25.326", "Reglamento (UE) 2016/679"],
        },
    },
    {
        "code": "manual_empleados",
        "title": "Manual del Empleado",
        "description": "Políticas internas y procedimientos laborales",
        "category": "Laboral",
        "priority": "HIGH",
        "estimatedDays": 30,
        "complexity": "MEDIUM",
        "content": {
            "objectives": ["Establecer reglas claras de trabajo", "Prevenir conflictos laborales"],
            "scope": "Todo el personal en relación de dependencia",
            "steps": _steps(
                "Definir código de conducta",
                "Documentar políticas laborales",
                "Revisar con asesor laboral",
                "Comunicar y obtener acuse de recibo",
            ),
            "references": ["Ley de Contrato de Trabajo 20.744"],
        },
    },
    {
        "code": "protocolo_crisis",
        "title": "Protocolo de Gestión de Crisis Legal",
        "description": "Procedimientos ante demandas o inspecciones",
        "category": "Regulatorio",
        "priority": "MEDIUM",
        "estimatedDays": 20,
        "complexity": "MEDIUM",
        "content": {
            "objectives": ["Responder ordenadamente ante contingencias legales"],
            "scope": "Demandas, inspecciones y requerimientos de autoridades",
            "steps": _steps(
                "Designar responsables de crisis",
                "Definir canales de comunicación",
                "Preparar checklist de respuesta",
                "Simular un escenario de inspección",
            ),
            "references": [],
        },
    },
    {
        "code": "checklist_compliance",
        "title": "Checklist de Cumplimiento Trimestral",
        "description": "Revisión periódica de obligaciones legales",
        "category": "Regulatorio",
        "priority": "MEDIUM",
        "estimatedDays": 10,
        "complexity": "LOW",
        "content": {
            "objectives": ["Detectar vencimientos e incumplimientos a tiempo"],
            "scope": "Obligaciones fiscales, laborales y regulatorias",
            "steps": _steps(
                "Listar obligaciones periódicas",
                "Asignar responsables",
                "Revisar el checklist cada trimestre",
            ),
            "references": [],
        },
    },
    {
        "code": "terminos_condiciones",
        "title": "Términos y Condiciones de Servicio",
        "description": "Documentos legales para su sitio web o servicios",
        "category": "Contractual",
        "priority": "HIGH",
        "estimatedDays": 15,
        "complexity": "LOW",
        "content": {
            "objectives": ["Regular la relación con usuarios y clientes"],
            "scope": "Sitio web, aplicaciones y servicios prestados",
            "steps": _steps(
                "Relevar servicios ofrecidos",
                "Redactar términos y condiciones",
                "Publicar y registrar aceptación",
            ),
            "references": ["Ley de Defensa del Consumidor 24.240"],
        },
    },
]


def _scenario(
    title: str,
    category: str,
    probability: str,
    impact: str,
    description: str,
) -> dict[str, Any]:
    return {
        "code": slugify(title),
        "title": title,
        "category": category,
        "likelihood": SCENARIO_PROBABILITY_MAP[probability],
        "impact": SCENARIO_IMPACT_MAP[impact],
        "description": description,
        "triggers": [],
        "consequences": [],
        "mitigationStrategies": [],
    }


SCENARIOS: list[dict[str, Any]] = [
    _scenario("Incumplimiento de Contrato", "Contractual", "MEDIUM", "HIGH", "Riesgo de incumplimiento contractual por parte de clientes o proveedores"),
    _scenario("Cláusulas Abusivas", "Contractual", "LOW", "MODERATE", "Contratos con cláusulas que podrían ser declaradas nulas por abusivas"),
    _scenario("Demanda Laboral", "Laboral", "MEDIUM", "HIGH", "Demandas por despido, accidentes laborales o incumplimiento de derechos"),
    _scenario("Trabajo No Registrado", "Laboral", "LOW", "CATASTROPHIC", "Sanciones por empleo no registrado o subregistrado"),
    _scenario("Accidente Laboral", "Laboral", "MEDIUM", "HIGH", "Accidentes de trabajo con lesiones o daños a empleados"),
    _scenario("Incumplimiento AFIP", "Fiscal", "MEDIUM", "HIGH", "Multas y sanciones por incumplimiento de obligaciones fiscales"),
    _scenario("Inspección AFIP", "Fiscal", "MEDIUM", "MODERATE", "Fiscalización y auditoría por parte de AFIP"),
    _scenario("Violación de Datos Personales", "Datos", "LOW", "CATASTROPHIC", "Filtración o acceso no autorizado a datos personales de clientes"),
    _scenario("Incumplimiento Ley de Datos", "Datos", "MEDIUM", "HIGH", "Incumplimiento de la Ley de Protección de Datos Personales (Ley 25.326)"),
    _scenario("Infracción de Propiedad Intelectual", "Propiedad Intelectual", "LOW", "HIGH", "Uso no autorizado de marcas, patentes o derechos de autor de terceros"),
    _scenario("Robo de Información Confidencial", "Propiedad Intelectual", "MEDIUM", "HIGH", "Fuga de información confidencial o secretos comerciales"),
]


def _read_seed_file(path: Path) -> Any:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Ignoring unreadable seed file: %s", path)
        return None


def _merge_by_code(builtin: list[dict[str, Any]], generated: Any) -> list[dict[str, Any]]:
    merged = {item["code"]: dict(item) for item in builtin}
    for item in generated if isinstance(generated, list) else []:
        if not isinstance(item, dict):
            continue
        code = str(item.get("code") or slugify(str(item.get("title", ""))))
        if not code:
            continue
        merged[code] = {**merged.get(code, {}), **item, "code": code}
    return list(merged.values())


def _normalize_generated_scenario(item: dict[str, Any]) -> dict[str, Any]:
    out = dict(item)
    probability = str(item.get("probability", "")).upper()
    if "likelihood" not in out and probability:
        out["likelihood"] = SCENARIO_PROBABILITY_MAP.get(probability, "POSSIBLE")
    impact = str(item.get("impact", "")).upper()
    if impact in SCENARIO_IMPACT_MAP:
        out["impact"] = SCENARIO_IMPACT_MAP[impact]
    return out


def load_catalog(seeds_dir: Path | None = None) -> dict[str, list[dict[str, Any]]]:
    """Built-in catalog with any generated seed files in ``seeds_dir`` merged on top by code."""
    generated_protocols = generated_scenarios = None
    wizard_data: dict[str, Any] = {}
    if seeds_dir is not None:
        generated_protocols = _read_seed_file(seeds_dir / PROTOCOLS_FILE)
        generated_scenarios = _read_seed_file(seeds_dir / SCENARIOS_FILE)
        raw_wizard = _read_seed_file(seeds_dir / WIZARD_DATA_FILE)
        wizard_data = raw_wizard if isinstance(raw_wizard, dict) else {}

    scenarios_raw = [
        _normalize_generated_scenario(s) for s in (generated_scenarios or []) if isinstance(s, dict)
    ]
    scenarios = _merge_by_code(SCENARIOS, scenarios_raw)
    for scenario in scenarios:
        scenario["riskScore"] = inherent_risk(scenario.get("likelihood"), scenario.get("impact"))

    return {
        "activities": _merge_by_code(ACTIVITIES, wizard_data.get("activities")),
        "riskAreas": _merge_by_code(RISK_AREAS, wizard_data.get("riskAreas")),
        "protocols": _merge_by_code(PROTOCOLS, generated_protocols),
        "scenarios": scenarios,
    }
