from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from app.models import User
from app.services.deepseek_client import DeepSeekClient, DeepSeekError
from app.utils.jsonx import json_list

logger = logging.getLogger(__name__)

LIKELIHOOD_CHOICES = "RARE, UNLIKELY, POSSIBLE, LIKELY, ALMOST_CERTAIN"
IMPACT_CHOICES = "INSIGNIFICANT, MINOR, MODERATE, MAJOR, CATASTROPHIC"

SUGGEST_SYSTEM_PROMPT = """Eres un experto en gestión de riesgos legales, corporativos y operacionales.
Tu tarea es identificar riesgos relevantes basados en el perfil del usuario.
Debes ser específico, práctico y considerar las regulaciones locales."""

ANALYZE_SYSTEM_PROMPT = """Eres un experto en análisis cuantitativo de riesgos según ISO 31000.
Analiza riesgos con precisión y proporciona evaluaciones realistas."""

CONTROLS_SYSTEM_PROMPT = """Eres un experto en controles de mitigación de riesgos y cumplimiento normativo.
Recomienda controles efectivos, prácticos y proporcionales al riesgo."""

TREATMENT_SYSTEM_PROMPT = """Eres un experto en planificación estratégica de tratamiento de riesgos.
Crea planes de tratamiento realistas, accionables y cost-effective."""

CHAT_SYSTEM_PROMPT = """Eres un asistente experto en gestión de riesgos legales, corporativos y operacionales.
Proporciona respuestas útiles, prácticas y específicas al contexto del usuario.
Considera siempre las regulaciones locales y las mejores prácticas internacionales.
Sé conciso pero completo. Usa formato markdown cuando sea útil."""


@dataclass(slots=True)
class UserContext:
    profile_type: str
    jurisdiction: str
    profession: str | None = None
    years_experience: int | None = None
    practice_areas: list[str] = field(default_factory=list)
    business_type: str | None = None
    company_size: str | None = None
    business_activities: list[str] = field(default_factory=list)

    @classmethod
    def from_user(cls, user: User) -> "UserContext | None":
        if user.profile_type == "PROFESSIONAL" and user.professional_profile is not None:
            prof = user.professional_profile
            return cls(
                profile_type="PROFESSIONAL",
                jurisdiction=prof.jurisdiction,
                profession=prof.profession,
                years_experience=prof.years_experience,
                practice_areas=json_list(prof.practice_areas_json),
            )
        if user.profile_type == "BUSINESS" and user.business_profile is not None:
            biz = user.business_profile
            return cls(
                profile_type="BUSINESS",
                jurisdiction=biz.jurisdiction,
                business_type=biz.business_type,
                company_size=biz.company_size,
                business_activities=json_list(biz.business_activities_json),
            )
        return None

    def to_prompt(self) -> str:
        lines = ["Contexto del Usuario:"]
        if self.profile_type == "PROFESSIONAL":
            lines.append("- Tipo: Profesional Independiente")
            if self.profession:
                lines.append(f"- Profesión: {self.profession}")
            if self.years_experience:
                lines.append(f"- Años de experiencia: {self.years_experience}")
            if self.practice_areas:
                lines.append(f"- Áreas de práctica: {', '.join(self.practice_areas)}")
        else:
            lines.append("- Tipo: Empresa/Negocio")
            if self.business_type:
                lines.append(f"- Tipo de negocio: {self.business_type}")
            if self.company_size:
                lines.append(f"- Tamaño: {self.company_size}")
            if self.business_activities:
                lines.append(f"- Actividades: {', '.join(self.business_activities)}")
        lines.append(f"- Jurisdicción: {self.jurisdiction}")
        return "\n".join(lines) + "\n"


def _expect_list(value: Any, what: str) -> list[dict[str, Any]]:
    if isinstance(value, dict):
        for key in ("risks", "controls", "items", "data"):
            if isinstance(value.get(key), list):
                value = value[key]
                break
    if not isinstance(value, list):
        raise DeepSeekError(f"Expected a JSON array of {what}")
    return [item for item in value if isinstance(item, dict)]


def _expect_object(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DeepSeekError(f"Expected a JSON object for {what}")
    return value


class RiskAIService:
    """Prompt builders on top of :class:`DeepSeekClient` for the risk workflows."""

    def __init__(self, client: DeepSeekClient | None = None) -> None:
        self.client = client or DeepSeekClient()

    @property
    def is_configured(self) -> bool:
        return self.client.is_configured

    def suggest_risks(self, context: UserContext, count: int = 5) -> list[dict[str, Any]]:
        prompt = f"""{context.to_prompt()}
Identifica los {count} riesgos más relevantes y críticos para este perfil.

Para cada riesgo, proporciona:
- title: Título conciso del riesgo
- description: Descripción detallada (2-3 oraciones)
- category: Categoría del riesgo (Legal, Operacional, Financiero, Reputacional, Cumplimiento, Tecnológico, etc.)
- likelihood: Probabilidad ({LIKELIHOOD_CHOICES})
- impact: Impacto ({IMPACT_CHOICES})
- triggers: Lista de 3-5 eventos que disparan este riesgo
- consequences: Lista de 3-5 consecuencias potenciales
- affectedAssets: Lista de 2-4 activos afectados (clientes, reputación, datos, operaciones, etc.)
- reasoning: Breve explicación de por qué este riesgo es relevante para este perfil

IMPORTANTE: Responde SOLO con un array JSON válido de riesgos. Sin texto adicional."""
        result = self.client.generate_json(prompt, SUGGEST_SYSTEM_PROMPT)
        return _expect_list(result, "risks")

    def analyze_risk(self, title: str, description: str, context: UserContext) -> dict[str, Any]:
        prompt = f"""{context.to_prompt()}
Riesgo a analizar:
- Título: {title}
- Descripción: {description}

Proporciona un análisis completo del riesgo con:
- suggestedLikelihood: Probabilidad ({LIKELIHOOD_CHOICES})
- suggestedImpact: Impacto ({IMPACT_CHOICES})
- suggestedTriggers: Lista de 4-6 eventos que disparan este riesgo
- suggestedConsequences: Lista de 4-6 consecuencias potenciales específicas
- suggestedAffectedAssets: Lista de 3-5 activos específicos que se verían afectados
- reasoning: Explicación detallada de tu análisis (3-4 oraciones)

IMPORTANTE: Responde SOLO con un objeto JSON válido. Sin texto adicional."""
        result = self.client.generate_json(prompt, ANALYZE_SYSTEM_PROMPT)
        return _expect_object(result, "risk analysis")

    def recommend_controls(
        self,
        title: str,
        description: str,
        inherent_risk: int,
        context: UserContext,
        count: int = 5,
    ) -> list[dict[str, Any]]:
        prompt = f"""{context.to_prompt()}
Riesgo a mitigar:
- Título: {title}
- Descripción: {description}
- Riesgo Inherente: {inherent_risk}/25

Recomienda los {count} controles más efectivos y prácticos para este riesgo.

Para cada control, proporciona:
- title: Título conciso del control
- description: Descripción detallada de cómo funciona (2-3 oraciones)
- type: Tipo (PREVENTIVE, DETECTIVE, CORRECTIVE, DIRECTIVE)
- category: Categoría (ADMINISTRATIVE, TECHNICAL, PHYSICAL, LEGAL)
- controlStrength: Efectividad (WEAK, MODERATE, STRONG)
- estimatedCost: Rango de costo estimado (ej: "$500-$1000", "< $500", "> $10000")
- estimatedEffort: Esfuerzo de implementación (Low, Medium, High)
- implementationSteps: Lista de 3-5 pasos específicos para implementar
- reasoning: Por qué este control es efectivo para este riesgo específico

IMPORTANTE: Responde SOLO con un array JSON válido. Sin texto adicional."""
        result = self.client.generate_json(prompt, CONTROLS_SYSTEM_PROMPT)
        return _expect_list(result, "controls")

    def generate_treatment_plan(
        self,
        title: str,
        description: str,
        inherent_risk: int,
        existing_controls: list[str],
        context: UserContext,
    ) -> dict[str, Any]:
        if existing_controls:
            controls_info = f"\n- Controles existentes: {', '.join(existing_controls)}"
        else:
            controls_info = "\n- Sin controles implementados actualmente"
        prompt = f"""{context.to_prompt()}
Riesgo a tratar:
- Título: {title}
- Descripción: {description}
- Riesgo Inherente: {inherent_risk}/25{controls_info}

Genera un plan de tratamiento completo con:
- recommendedStrategy: Estrategia óptima (AVOID, REDUCE, TRANSFER, ACCEPT)
- justification: Justificación detallada de la estrategia elegida (3-4 oraciones)
- actions: Lista de 4-7 acciones específicas y concretas, cada una con:
  * title: Título de la acción
  * description: Descripción detallada
  * responsible: Rol recomendado (ej: "Director Legal", "Gerente de Operaciones")
  * deadline: Plazo recomendado (ej: "30 días", "2 meses", "1 trimestre")
- estimatedBudget: Presupuesto total estimado en USD (número)
- timeline: Timeline general del plan (ej: "3 meses", "6 meses")
- targetLikelihood: Probabilidad objetivo tras implementación ({LIKELIHOOD_CHOICES})
- targetImpact: Impacto objetivo tras implementación ({IMPACT_CHOICES})

IMPORTANTE: Responde SOLO con un objeto JSON válido. Sin texto adicional."""
        result = self.client.generate_json(prompt, TREATMENT_SYSTEM_PROMPT)
        return _expect_object(result, "treatment plan")

    def chat(self, question: str, context: UserContext, history: list[dict[str, str]] | None = None) -> str:
        messages = [{"role": "system", "content": f"{CHAT_SYSTEM_PROMPT}\n\n{context.to_prompt()}"}]
        for msg in history or []:
            role = msg.get("role")
            if role in {"user", "assistant"}:
                messages.append({"role": role, "content": str(msg.get("content", ""))})
        messages.append({"role": "user", "content": question})
        return self.client.chat(messages)


def get_risk_ai_service() -> RiskAIService:
    return RiskAIService()
