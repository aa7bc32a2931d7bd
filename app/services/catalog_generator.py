"""DeepSeek-driven generators for the protocol, scenario and wizard seed files.

Each generator walks a fixed list of templates, asks the model for the
content of one template at a time and collects whatever succeeds. A failed
template is logged and skipped. The output matches what
``app.utils.catalog_seed.load_catalog`` merges over the built-in catalog.
"""

from __future__ import annotations

import json
import logging
import time
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from legalrisk.core.scoring import priority_for_score
from legalrisk.core.vocab import BUSINESS_TYPE_LABELS, BUSINESS_TYPES, PROFESSION_LABELS, PROFESSIONS

from app.services.deepseek_client import AIServiceNotConfigured, DeepSeekClient, DeepSeekError
from app.utils.catalog_seed import PROTOCOLS_FILE, SCENARIOS_FILE, WIZARD_DATA_FILE, slugify

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 1.0

JURISDICTIONS = ["Argentina", "Buenos Aires", "CABA"]

PROBABILITY_MAP = {"VERY_LOW": 1, "LOW": 2, "MEDIUM": 3, "HIGH": 4, "VERY_HIGH": 5}
IMPACT_MAP = {"NEGLIGIBLE": 1, "LOW": 2, "MODERATE": 3, "HIGH": 4, "CATASTROPHIC": 5}


@dataclass(frozen=True, slots=True)
class ProtocolTemplate:
    code: str
    name: str
    category: str
    priority: str
    description: str


@dataclass(frozen=True, slots=True)
class ScenarioTemplate:
    name: str
    category: str
    probability: str
    impact: str
    description: str

    @property
    def code(self) -> str:
        return slugify(self.name)

    @property
    def risk_score(self) -> int:
        return PROBABILITY_MAP[self.probability] * IMPACT_MAP[self.impact]


PROTOCOL_TEMPLATES: list[ProtocolTemplate] = [
    ProtocolTemplate(
        "contratos_modelo",
        "Contratos Modelo",
        "Contractual",
        "HIGH",
        "Plantillas de contratos adaptadas a diferentes tipos de relaciones comerciales",
    ),
    ProtocolTemplate(
        "politica_privacidad",
        "Política de Privacidad y Protección de Datos",
        "Datos",
        "CRITICAL",
        "Cumplimiento de GDPR, Ley de Protección de Datos Personales (Argentina)",
    ),
    ProtocolTemplate(
        "manual_empleados",
        "Manual del Empleado",
        "Laboral",
        "HIGH",
        "Reglamento interno, políticas laborales y código de conducta",
    ),
    ProtocolTemplate(
        "terminos_condiciones",
        "Términos y Condiciones de Servicio",
        "Contractual",
        "HIGH",
        "Documento legal para regular relaciones con clientes",
    ),
    ProtocolTemplate(
        "facturacion_fiscal",
        "Facturación y Cumplimiento Fiscal",
        "Fiscal",
        "CRITICAL",
        "Procedimientos de facturación conforme a AFIP",
    ),
]

SCENARIO_TEMPLATES: list[ScenarioTemplate] = [
    ScenarioTemplate("Incumplimiento de Contrato", "Contractual", "MEDIUM", "HIGH", "Riesgo de incumplimiento contractual por parte de clientes o proveedores"),
    ScenarioTemplate("Cláusulas Abusivas", "Contractual", "LOW", "MODERATE", "Contratos con cláusulas que podrían ser declaradas nulas por abusivas"),
    ScenarioTemplate("Demanda Laboral", "Laboral", "MEDIUM", "HIGH", "Demandas por despido, accidentes laborales o incumplimiento de derechos"),
    ScenarioTemplate("Trabajo No Registrado", "Laboral", "LOW", "CATASTROPHIC", "Sanciones por empleo no registrado o subregistrado"),
    ScenarioTemplate("Accidente Laboral", "Laboral", "MEDIUM", "HIGH", "Accidentes de trabajo con lesiones o daños a empleados"),
    ScenarioTemplate("Incumplimiento AFIP", "Fiscal", "MEDIUM", "HIGH", "Multas y sanciones por incumplimiento de obligaciones fiscales"),
    ScenarioTemplate("Inspección AFIP", "Fiscal", "MEDIUM", "MODERATE", "Fiscalización y auditoría por parte de AFIP"),
    ScenarioTemplate("Violación de Datos Personales", "Datos", "LOW", "CATASTROPHIC", "Filtración o acceso no autorizado a datos personales de clientes"),
    ScenarioTemplate("Incumplimiento Ley de Datos", "Datos", "MEDIUM", "HIGH", "Incumplimiento de la Ley de Protección de Datos Personales (Ley 25.326)"),
    ScenarioTemplate("Infracción de Propiedad Intelectual", "Propiedad Intelectual", "LOW", "HIGH", "Uso no autorizado de marcas, patentes o derechos de autor de terceros"),
    ScenarioTemplate("Robo de Información Confidencial", "Propiedad Intelectual", "MEDIUM", "HIGH", "Fuga de información confidencial o secretos comerciales"),
]

PROTOCOL_SYSTEM_PROMPT = (
    "Eres un experto en derecho corporativo argentino y compliance con 20 años de experiencia.\n"
    "Generas protocolos legales detallados, prácticos y adaptados a la realidad argentina.\n"
    "Respondes SOLO con JSON válido, sin texto adicional."
)

SCENARIO_SYSTEM_PROMPT = (
    "Eres un experto en gestión de riesgos legales y compliance en Argentina con 15 años de experiencia.\n"
    "Generas escenarios de riesgo detallados, realistas y adaptados a la realidad legal y empresarial argentina.\n"
    "Respondes SOLO con JSON válido, sin texto adicional."
)

WIZARD_SYSTEM_PROMPT = (
    "Eres un experto en derecho profesional y empresarial argentino especializado en gestión de riesgos.\n"
    "Generas datos precisos y prácticos basados en la realidad legal y profesional de Argentina.\n"
    "Respondes SOLO con JSON válido, sin texto adicional."
)

Sleep = Callable[[float], None]


def _protocol_prompt(template: ProtocolTemplate) -> str:
    return f"""
Genera un protocolo legal completo para "{template.name}" con las siguientes especificaciones:

**Contexto:**
- Categoría: {template.category}
- Prioridad: {template.priority}
- Descripción base: {template.description}
- Jurisdicciones: {", ".join(JURISDICTIONS)}

**Genera un JSON con esta estructura EXACTA:**
{{
  "title": "Título descriptivo del protocolo",
  "description": "Descripción de 2-3 líneas sobre el objetivo del protocolo",
  "content": {{
    "objectives": ["Objetivo 1", "Objetivo 2", "Objetivo 3"],
    "scope": "Alcance del protocolo",
    "steps": [
      {{
        "order": 1,
        "title": "Título del paso",
        "description": "Descripción detallada del paso",
        "requiredDocuments": ["Documento 1"],
        "estimatedTime": "2 días",
        "responsibleRole": "Responsable legal"
      }}
    ],
    "references": ["Ley o normativa aplicable"]
  }},
  "estimatedImplementationDays": 30,
  "complexity": "LOW|MEDIUM|HIGH"
}}

**Requisitos importantes:**
1. Entre 5 y 8 pasos concretos y accionables
2. Referencias a leyes argentinas vigentes
3. Lenguaje claro para profesionales y pymes
"""


def _scenario_prompt(template: ScenarioTemplate) -> str:
    return f"""
Genera un escenario de riesgo legal completo para "{template.name}" con las siguientes especificaciones:

**Contexto:**
- Categoría: {template.category}
- Descripción base: {template.description}
- Probabilidad base: {template.probability}
- Impacto base: {template.impact}
- Jurisdicciones: {", ".join(JURISDICTIONS)}
- Tipos de negocio aplicables: {", ".join(BUSINESS_TYPES)}

**Genera un JSON con esta estructura EXACTA:**
{{
  "title": "Título descriptivo del escenario de riesgo",
  "description": "Descripción detallada de 2-3 líneas sobre el riesgo y sus implicancias",
  "triggers": ["Evento disparador 1", "Evento disparador 2", "Evento disparador 3"],
  "consequences": ["Consecuencia 1", "Consecuencia 2", "Consecuencia 3"],
  "mitigationStrategies": ["Estrategia 1", "Estrategia 2", "Estrategia 3"]
}}

**Requisitos importantes:**
1. Los triggers deben ser eventos concretos y detectables
2. Las consecuencias deben incluir impactos legales, financieros y reputacionales
3. Incluye referencias a leyes argentinas relevantes en la descripción
"""


def _wizard_prompt(subject: str) -> str:
    return f"""
Genera datos para el wizard de onboarding de {subject} en Argentina.

Genera un JSON con esta estructura EXACTA:
{{
  "activities": [
    {{
      "code": "codigo_snake_case",
      "label": "Nombre de la actividad",
      "description": "Descripción breve",
      "category": "Operaciones|Legal|Administrativo|Comercial|Técnico"
    }}
  ],
  "riskAreas": [
    {{
      "code": "codigo_snake_case",
      "label": "Nombre del área de riesgo",
      "description": "Descripción del riesgo específico",
      "severity": "HIGH|MEDIUM|LOW",
      "examples": ["Ejemplo 1", "Ejemplo 2", "Ejemplo 3"]
    }}
  ]
}}

**REQUISITOS:**
1. Entre 5 y 8 actividades típicas, ordenadas por relevancia
2. Entre 4 y 6 áreas de riesgo con 3-4 ejemplos concretos cada una
3. Usar terminología legal y profesional argentina
"""


def _require_dict(payload: Any, what: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise DeepSeekError(f"Expected a JSON object for {what}")
    return payload


def _require_items(payload: dict[str, Any], key: str) -> list[dict[str, Any]]:
    items = payload.get(key)
    if not isinstance(items, list):
        raise DeepSeekError(f"Missing list '{key}' in generated data")
    return [item for item in items if isinstance(item, dict)]


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if str(v).strip()]


def _days(value: Any, default: int = 30) -> int:
    try:
        days = int(value)
    except (TypeError, ValueError):
        return default
    return days if days > 0 else default


class CatalogGenerator:
    def __init__(
        self,
        client: DeepSeekClient,
        *,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        sleep: Sleep = time.sleep,
    ) -> None:
        self.client = client
        self.delay_seconds = max(0.0, delay_seconds)
        self._sleep = sleep

    def _pause(self) -> None:
        if self.delay_seconds:
            self._sleep(self.delay_seconds)

    def _ask(self, prompt: str, system_prompt: str, what: str) -> dict[str, Any]:
        return _require_dict(self.client.generate_json(prompt, system_prompt), what)

    def protocol(self, template: ProtocolTemplate) -> dict[str, Any]:
        data = self._ask(_protocol_prompt(template), PROTOCOL_SYSTEM_PROMPT, template.name)
        content = data.get("content") if isinstance(data.get("content"), dict) else {}
        steps = [s for s in content.get("steps", []) if isinstance(s, dict)]
        if not steps:
            raise DeepSeekError(f"Generated protocol '{template.name}' has no steps")
        for idx, step in enumerate(steps, start=1):
            step["order"] = idx
        complexity = str(data.get("complexity", "MEDIUM")).upper()
        return {
            "code": template.code,
            "title": str(data.get("title") or template.name),
            "description": str(data.get("description") or template.description),
            "type": "OFFICIAL",
            "category": template.category,
            "priority": template.priority,
            "content": {
                "objectives": _str_list(content.get("objectives")),
                "scope": str(content.get("scope", "")),
                "steps": steps,
                "references": _str_list(content.get("references")),
            },
            "businessTypes": list(BUSINESS_TYPES),
            "jurisdictions": list(JURISDICTIONS),
            "estimatedImplementationDays": _days(data.get("estimatedImplementationDays")),
            "complexity": complexity if complexity in {"LOW", "MEDIUM", "HIGH"} else "MEDIUM",
        }

    def scenario(self, template: ScenarioTemplate) -> dict[str, Any]:
        data = self._ask(_scenario_prompt(template), SCENARIO_SYSTEM_PROMPT, template.name)
        return {
            "code": template.code,
            "title": str(data.get("title") or template.name),
            "description": str(data.get("description") or template.description),
            "category": template.category,
            "probability": template.probability,
            "impact": template.impact,
            "riskScore": template.risk_score,
            "triggers": _str_list(data.get("triggers")),
            "consequences": _str_list(data.get("consequences")),
            "mitigationStrategies": _str_list(data.get("mitigationStrategies")),
            "businessTypes": list(BUSINESS_TYPES),
            "jurisdictions": list(JURISDICTIONS),
        }

    def wizard_items(self, subject: str, *, profession: str | None = None, business_type: str | None = None) -> dict[str, list[dict[str, Any]]]:
        data = self._ask(_wizard_prompt(subject), WIZARD_SYSTEM_PROMPT, subject)
        applies = {
            "professions": [profession] if profession else [],
            "businessTypes": [business_type] if business_type else [],
        }
        activities = []
        for idx, item in enumerate(_require_items(data, "activities"), start=1):
            code = slugify(str(item.get("code") or item.get("label", "")))
            if not code:
                continue
            activities.append(
                {
                    "code": code,
                    "label": str(item.get("label") or code),
                    "description": str(item.get("description", "")),
                    "category": str(item.get("category") or "Operaciones"),
                    "order": idx,
                    **applies,
                }
            )
        risk_areas = []
        for idx, item in enumerate(_require_items(data, "riskAreas"), start=1):
            code = slugify(str(item.get("code") or item.get("label", "")))
            if not code:
                continue
            severity = str(item.get("severity", "MEDIUM")).upper()
            risk_areas.append(
                {
                    "code": code,
                    "label": str(item.get("label") or code),
                    "description": str(item.get("description", "")),
                    "severity": severity if severity in {"HIGH", "MEDIUM", "LOW"} else "MEDIUM",
                    "examples": _str_list(item.get("examples")),
                    "order": idx,
                    **applies,
                }
            )
        return {"activities": activities, "riskAreas": risk_areas}

    def _collect(self, templates: list[Any], build: Callable[[Any], Any], label: Callable[[Any], str]) -> list[Any]:
        out = []
        for template in templates:
            name = label(template)
            logger.info("Generating %s", name)
            try:
                out.append(build(template))
            except AIServiceNotConfigured:
                raise
            except (DeepSeekError, ValueError, TypeError) as exc:
                logger.error("Failed to generate %s: %s", name, exc)
                continue
            self._pause()
        return out

    def generate_protocols(self, templates: list[ProtocolTemplate] | None = None) -> list[dict[str, Any]]:
        return self._collect(templates or PROTOCOL_TEMPLATES, self.protocol, lambda t: t.name)

    def generate_scenarios(self, templates: list[ScenarioTemplate] | None = None) -> list[dict[str, Any]]:
        return self._collect(templates or SCENARIO_TEMPLATES, self.scenario, lambda t: t.name)

    def generate_wizard_data(
        self,
        professions: list[str] | None = None,
        business_types: list[str] | None = None,
    ) -> dict[str, list[dict[str, Any]]]:
        """Activities and risk areas for every profession and business type.

        Items the model returns under the same code for several subjects are
        merged into one entry that applies to all of them.
        """
        if professions is None:
            professions = [p for p in PROFESSIONS if p != "OTHER"]
        targets = [("profession", p) for p in professions]
        targets += [("business", b) for b in (BUSINESS_TYPES if business_types is None else business_types)]

        def build(target: tuple[str, str]) -> dict[str, list[dict[str, Any]]]:
            kind, value = target
            if kind == "profession":
                return self.wizard_items(f"un {PROFESSION_LABELS.get(value, value)}", profession=value)
            return self.wizard_items(
                f"una empresa de {BUSINESS_TYPE_LABELS.get(value, value)}", business_type=value
            )

        chunks = self._collect(targets, build, lambda t: f"wizard data for {t[1]}")
        merged: dict[str, dict[str, dict[str, Any]]] = {"activities": {}, "riskAreas": {}}
        for chunk in chunks:
            for key, bucket in merged.items():
                for item in chunk[key]:
                    existing = bucket.get(item["code"])
                    if existing is None:
                        bucket[item["code"]] = item
                        continue
                    for field in ("professions", "businessTypes"):
                        existing[field] = sorted(set(existing[field]) | set(item[field]))
        return {key: list(bucket.values()) for key, bucket in merged.items()}


def write_seed_file(seeds_dir: Path, filename: str, data: Any) -> Path:
    seeds_dir.mkdir(parents=True, exist_ok=True)
    path = seeds_dir / filename
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Wrote %s", path)
    return path


def scenario_breakdown(scenarios: list[dict[str, Any]]) -> dict[str, dict[str, int]]:
    return {
        "byCategory": dict(Counter(s.get("category", "General") for s in scenarios)),
        "byLevel": dict(Counter(priority_for_score(int(s.get("riskScore", 0) or 0)) for s in scenarios)),
    }


SEED_FILES = {
    "protocols": PROTOCOLS_FILE,
    "scenarios": SCENARIOS_FILE,
    "wizard": WIZARD_DATA_FILE,
}
