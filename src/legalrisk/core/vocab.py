"""Closed vocabularies shared by the web app, the scorer and the seed tooling."""

from __future__ import annotations

PROFILE_TYPES = ("PROFESSIONAL", "BUSINESS")

PROFESSIONS = (
    "LAWYER",
    "DOCTOR",
    "DENTIST",
    "ARCHITECT",
    "ENGINEER",
    "CIVIL_ENGINEER",
    "ACCOUNTANT",
    "CONSULTANT",
    "NOTARY",
    "PSYCHOLOGIST",
    "PHARMACIST",
    "VETERINARIAN",
    "OTHER",
)

PROFESSION_LABELS = {
    "LAWYER": "Abogado",
    "DOCTOR": "Médico",
    "DENTIST": "Odontólogo",
    "ARCHITECT": "Arquitecto",
    "ENGINEER": "Ingeniero",
    "CIVIL_ENGINEER": "Ingeniero Civil",
    "ACCOUNTANT": "Contador",
    "CONSULTANT": "Consultor",
    "NOTARY": "Escribano/Notario",
    "PSYCHOLOGIST": "Psicólogo",
    "PHARMACIST": "Farmacéutico",
    "VETERINARIAN": "Veterinario",
    "OTHER": "Otro",
}

BUSINESS_TYPES = (
    "LEGAL_FIRM",
    "HEALTHCARE",
    "CONSTRUCTION",
    "FINANCE",
    "E_COMMERCE",
    "TECHNOLOGY",
    "REAL_ESTATE",
    "EDUCATION",
    "MANUFACTURING",
    "RETAIL",
    "HOSPITALITY",
    "TRANSPORTATION",
    "CONSULTING",
    "MEDIA",
    "AGRICULTURE",
)

BUSINESS_TYPE_LABELS = {
    "LEGAL_FIRM": "Estudio Jurídico",
    "HEALTHCARE": "Salud",
    "CONSTRUCTION": "Construcción",
    "FINANCE": "Finanzas",
    "E_COMMERCE": "Comercio Electrónico",
    "TECHNOLOGY": "Tecnología",
    "REAL_ESTATE": "Bienes Raíces",
    "EDUCATION": "Educación",
    "MANUFACTURING": "Manufactura",
    "RETAIL": "Comercio Minorista",
    "HOSPITALITY": "Hotelería y Turismo",
    "TRANSPORTATION": "Transporte",
    "CONSULTING": "Consultoría",
    "MEDIA": "Medios de Comunicación",
    "AGRICULTURE": "Agricultura",
}

COMPANY_SIZES = ("MICRO", "SMALL", "MEDIUM", "LARGE", "ENTERPRISE")

REVENUE_RANGES = (
    "LESS_THAN_100K",
    "BETWEEN_100K_500K",
    "BETWEEN_500K_1M",
    "BETWEEN_1M_5M",
    "BETWEEN_5M_10M",
    "MORE_THAN_10M",
)

WORK_ENVIRONMENTS = ("SOLO_PRACTICE", "SHARED_OFFICE", "SMALL_PARTNERSHIP", "MEDIUM_FIRM", "LARGE_FIRM")

JURISDICTIONS = ("AR", "MX", "US", "ES", "CL", "CO", "PE", "UY")

LIKELIHOODS = ("RARE", "UNLIKELY", "POSSIBLE", "LIKELY", "ALMOST_CERTAIN")
IMPACTS = ("INSIGNIFICANT", "MINOR", "MODERATE", "MAJOR", "CATASTROPHIC")
PRIORITIES = ("CRITICAL", "HIGH", "MEDIUM", "LOW")

RISK_STATUSES = ("IDENTIFIED", "ANALYZING", "EVALUATED", "TREATING", "MITIGATING", "MONITORING", "CLOSED")

CONTROL_TYPES = ("PREVENTIVE", "DETECTIVE", "CORRECTIVE", "DIRECTIVE")
CONTROL_CATEGORIES = ("ADMINISTRATIVE", "TECHNICAL", "PHYSICAL", "LEGAL")
CONTROL_STRENGTHS = ("WEAK", "MODERATE", "STRONG")
CONTROL_STATUSES = ("PLANNED", "IN_PROGRESS", "IMPLEMENTED", "OPERATIONAL", "INEFFECTIVE", "DEACTIVATED")
EFFECTIVE_CONTROL_STATUSES = ("IMPLEMENTED", "OPERATIONAL")
REVIEW_FREQUENCIES = ("WEEKLY", "MONTHLY", "QUARTERLY", "SEMIANNUALLY", "ANNUALLY")
EFFORT_LEVELS = ("Low", "Medium", "High")

TREATMENT_STRATEGIES = ("AVOID", "REDUCE", "TRANSFER", "ACCEPT")
TREATMENT_STATUSES = ("DRAFT", "APPROVED", "IN_PROGRESS", "COMPLETED", "ON_HOLD", "CANCELLED")

USER_PROTOCOL_STATUSES = ("PENDING", "IN_PROGRESS", "COMPLETED", "ARCHIVED")
SEVERITIES = ("HIGH", "MEDIUM", "LOW")
