import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models import Activity, Protocol, RiskArea, RiskScenario, User
from app.security import hash_password
from app.utils.catalog_seed import load_catalog
from app.utils.jsonx import to_json

logger = logging.getLogger(__name__)


def ensure_default_admin(db: Session) -> None:
    settings = get_settings()
    email = settings.default_admin_email.strip().lower()
    if not email or not settings.default_admin_password:
        return
    user = db.execute(select(User).where(User.email == email)).scalars().first()
    if user:
        return
    db.add(
        User(
            email=email,
            name="Administrator",
            role="ADMIN",
            password_hash=hash_password(settings.default_admin_password),
        )
    )
    db.commit()
    logger.info("Created default admin %s", email)


def _upsert(db: Session, model, code: str, values: dict[str, Any]) -> bool:
    row = db.execute(select(model).where(model.code == code)).scalars().first()
    created = row is None
    if created:
        row = model(code=code)
        db.add(row)
    for key, value in values.items():
        setattr(row, key, value)
    return created


def seed_catalog(db: Session, catalog: dict[str, list[dict[str, Any]]] | None = None) -> dict[str, int]:
    """Insert or refresh catalog rows by code. Safe to run repeatedly."""
    if catalog is None:
        catalog = load_catalog(get_settings().seeds_dir)
    created = {"activities": 0, "riskAreas": 0, "protocols": 0, "scenarios": 0}

    for item in catalog.get("activities", []):
        created["activities"] += _upsert(
            db,
            Activity,
            item["code"],
            {
                "label": item.get("label", item["code"]),
                "description": item.get("description", ""),
                "category": item.get("category", "General"),
                "order": int(item.get("order", 0) or 0),
                "professions_json": to_json(item.get("professions", [])),
                "business_types_json": to_json(item.get("businessTypes", [])),
                "is_active": True,
            },
        )

    for item in catalog.get("riskAreas", []):
        created["riskAreas"] += _upsert(
            db,
            RiskArea,
            item["code"],
            {
                "label": item.get("label", item["code"]),
                "description": item.get("description", ""),
                "severity": str(item.get("severity", "MEDIUM")).upper(),
                "order": int(item.get("order", 0) or 0),
                "examples_json": to_json(item.get("examples", [])),
                "professions_json": to_json(item.get("professions", [])),
                "business_types_json": to_json(item.get("businessTypes", [])),
                "is_active": True,
            },
        )

    for item in catalog.get("protocols", []):
        created["protocols"] += _upsert(
            db,
            Protocol,
            item["code"],
            {
                "title": item.get("title", item["code"]),
                "description": item.get("description", ""),
                "type": item.get("type", "SYSTEM"),
                "category": item.get("category", "General"),
                "priority": str(item.get("priority", "MEDIUM")).upper(),
                "content_json": to_json(item.get("content", {})),
                "professions_json": to_json(item.get("professions", [])),
                "business_types_json": to_json(item.get("businessTypes", [])),
                "jurisdictions_json": to_json(item.get("jurisdictions", [])),
                "estimated_days": item.get("estimatedDays") or item.get("estimatedImplementationDays"),
                "complexity": item.get("complexity"),
                "is_active": True,
            },
        )

    for item in catalog.get("scenarios", []):
        created["scenarios"] += _upsert(
            db,
            RiskScenario,
            item["code"],
            {
                "title": item.get("title", item["code"]),
                "description": item.get("description", ""),
                "category": item.get("category", "General"),
                "likelihood": item.get("likelihood", "POSSIBLE"),
                "impact": item.get("impact", "MODERATE"),
                "risk_score": int(item.get("riskScore", 9) or 9),
                "triggers_json": to_json(item.get("triggers", [])),
                "consequences_json": to_json(item.get("consequences", [])),
                "mitigation_json": to_json(item.get("mitigationStrategies", [])),
                "business_types_json": to_json(item.get("businessTypes", [])),
                "jurisdictions_json": to_json(item.get("jurisdictions", [])),
                "is_active": True,
            },
        )

    db.commit()
    logger.info("Catalog seeded: %s new rows", created)
    return created
