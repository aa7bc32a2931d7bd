"""Request bodies for the JSON API. Field names are camelCase on the wire."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from legalrisk.core.vocab import (
    BUSINESS_TYPES,
    COMPANY_SIZES,
    CONTROL_CATEGORIES,
    CONTROL_STATUSES,
    CONTROL_STRENGTHS,
    CONTROL_TYPES,
    EFFORT_LEVELS,
    IMPACTS,
    JURISDICTIONS,
    LIKELIHOODS,
    PROFESSIONS,
    PROFILE_TYPES,
    REVENUE_RANGES,
    REVIEW_FREQUENCIES,
    RISK_STATUSES,
    TREATMENT_STATUSES,
    TREATMENT_STRATEGIES,
    USER_PROTOCOL_STATUSES,
    WORK_ENVIRONMENTS,
)

Likelihood = Literal[LIKELIHOODS]  # type: ignore[valid-type]
Impact = Literal[IMPACTS]  # type: ignore[valid-type]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class SignupIn(ApiModel):
    name: str = ""
    email: str = ""
    password: str = ""


class LoginIn(ApiModel):
    email: str
    password: str


class ProfileUpdateIn(ApiModel):
    name: Optional[str] = None
    email: Optional[str] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class ScoreIn(ApiModel):
    answers: dict[str, Any] = Field(default_factory=dict)


class WizardCompleteIn(ApiModel):
    profile_type: Literal[PROFILE_TYPES]  # type: ignore[valid-type]
    profession: Optional[Literal[PROFESSIONS]] = None  # type: ignore[valid-type]
    practice_areas: list[str] = Field(default_factory=list)
    years_experience: Optional[int] = Field(default=None, ge=0, le=80)
    work_environment: Optional[Literal[WORK_ENVIRONMENTS]] = None  # type: ignore[valid-type]
    business_type: Optional[Literal[BUSINESS_TYPES]] = None  # type: ignore[valid-type]
    company_size: Optional[Literal[COMPANY_SIZES]] = None  # type: ignore[valid-type]
    revenue_range: Optional[Literal[REVENUE_RANGES]] = None  # type: ignore[valid-type]
    jurisdiction: Literal[JURISDICTIONS] = "AR"  # type: ignore[valid-type]
    activities: list[str] = Field(default_factory=list)
    risk_exposure: list[str] = Field(default_factory=list)
    answers: dict[str, Any] = Field(default_factory=dict)
    selected_protocols: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _profile_fields_present(self) -> "WizardCompleteIn":
        if self.profile_type == "PROFESSIONAL" and not self.profession:
            raise ValueError("profession is required for PROFESSIONAL profiles")
        if self.profile_type == "BUSINESS" and not self.business_type:
            raise ValueError("businessType is required for BUSINESS profiles")
        return self


class RiskCreateIn(ApiModel):
    title: str = Field(min_length=1, max_length=255)
    likelihood: Likelihood
    impact: Impact
    description: str = ""
    category: str = "General"
    triggers: list[str] = Field(default_factory=list)
    consequences: list[str] = Field(default_factory=list)
    affected_assets: list[str] = Field(default_factory=list)
    scenario_id: Optional[int] = None


class RiskUpdateIn(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    likelihood: Optional[Likelihood] = None
    impact: Optional[Impact] = None
    status: Optional[Literal[RISK_STATUSES]] = None  # type: ignore[valid-type]
    triggers: Optional[list[str]] = None
    consequences: Optional[list[str]] = None
    affected_assets: Optional[list[str]] = None


class ControlCreateIn(ApiModel):
    title: str = Field(min_length=3, max_length=255)
    description: str = Field(min_length=10)
    type: Literal[CONTROL_TYPES]  # type: ignore[valid-type]
    category: Literal[CONTROL_CATEGORIES]  # type: ignore[valid-type]
    control_strength: Literal[CONTROL_STRENGTHS]  # type: ignore[valid-type]
    status: Literal[CONTROL_STATUSES] = "PLANNED"  # type: ignore[valid-type]
    owner: Optional[str] = None
    review_frequency: Optional[Literal[REVIEW_FREQUENCIES]] = None  # type: ignore[valid-type]
    estimated_cost: Optional[float] = Field(default=None, ge=0)
    estimated_effort: Optional[Literal[EFFORT_LEVELS]] = None  # type: ignore[valid-type]
    protocol_id: Optional[int] = None


class ControlUpdateIn(ApiModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=255)
    description: Optional[str] = Field(default=None, min_length=10)
    type: Optional[Literal[CONTROL_TYPES]] = None  # type: ignore[valid-type]
    category: Optional[Literal[CONTROL_CATEGORIES]] = None  # type: ignore[valid-type]
    control_strength: Optional[Literal[CONTROL_STRENGTHS]] = None  # type: ignore[valid-type]
    status: Optional[Literal[CONTROL_STATUSES]] = None  # type: ignore[valid-type]
    owner: Optional[str] = None
    review_frequency: Optional[Literal[REVIEW_FREQUENCIES]] = None  # type: ignore[valid-type]
    estimated_cost: Optional[float] = Field(default=None, ge=0)
    estimated_effort: Optional[Literal[EFFORT_LEVELS]] = None  # type: ignore[valid-type]
    protocol_id: Optional[int] = None


class ControlReviewIn(ApiModel):
    effectiveness: int = Field(ge=1, le=5)
    notes: str = ""
    reviewer: str = ""


class TreatmentAction(ApiModel):
    id: str
    title: str = Field(min_length=3)
    description: Optional[str] = None
    responsible: Optional[str] = None
    deadline: Optional[str] = None
    completed: bool = False


class TreatmentCreateIn(ApiModel):
    strategy: Literal[TREATMENT_STRATEGIES]  # type: ignore[valid-type]
    justification: Optional[str] = None
    actions: list[TreatmentAction]
    total_budget: Optional[float] = None
    timeline: Optional[str] = None
    target_likelihood: Optional[Likelihood] = None
    target_impact: Optional[Impact] = None
    target_risk: Optional[int] = None


class TreatmentUpdateIn(ApiModel):
    strategy: Optional[Literal[TREATMENT_STRATEGIES]] = None  # type: ignore[valid-type]
    justification: Optional[str] = None
    actions: Optional[list[TreatmentAction]] = None
    total_budget: Optional[float] = None
    timeline: Optional[str] = None
    target_likelihood: Optional[Likelihood] = None
    target_impact: Optional[Impact] = None
    target_risk: Optional[int] = None
    status: Optional[Literal[TREATMENT_STATUSES]] = None  # type: ignore[valid-type]
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    approved_by: Optional[str] = None


class ProtocolAssignIn(ApiModel):
    protocol_id: int


class ProtocolUpdateIn(ApiModel):
    status: Optional[Literal[USER_PROTOCOL_STATUSES]] = None  # type: ignore[valid-type]
    progress: Optional[int] = None
    notes: Optional[str] = None
    customizations: Optional[dict[str, Any]] = None


class SuggestRisksIn(ApiModel):
    count: int = Field(default=5, ge=1, le=10)


class AnalyzeRiskIn(ApiModel):
    title: str = Field(min_length=1)
    description: str = ""


class RiskRefIn(ApiModel):
    risk_id: int
    count: int = Field(default=5, ge=1, le=10)


class ChatMessage(ApiModel):
    role: Literal["user", "assistant"]
    content: str


class ChatIn(ApiModel):
    question: str = Field(min_length=1)
    history: list[ChatMessage] = Field(default_factory=list)
