from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from legalrisk.core.vocab import USER_PROTOCOL_STATUSES

from app.models import Protocol, UserProtocol, User
from app.schemas import ProtocolUpdateIn
from app.utils.jsonx import json_list, to_json

PRIORITY_ORDER = {"CRITICAL": 0, "HIGH": 1, "MEDIUM": 2, "LOW": 3}


def _status_rank(status: str) -> int:
    try:
        return USER_PROTOCOL_STATUSES.index(status)
    except ValueError:
        return len(USER_PROTOCOL_STATUSES)


def list_catalog(db: Session) -> list[Protocol]:
    rows = db.execute(select(Protocol).where(Protocol.is_active.is_(True))).scalars().all()
    return sorted(rows, key=lambda p: (PRIORITY_ORDER.get(p.priority, 9), p.category, p.title))


def applicable_protocols(db: Session, profile_type: str, value: str | None) -> list[Protocol]:
    """Catalog protocols that apply to a profession or business type; empty lists apply to all."""
    out: list[Protocol] = []
    for protocol in list_catalog(db):
        targets = json_list(
            protocol.professions_json if profile_type == "PROFESSIONAL" else protocol.business_types_json
        )
        if not targets or (value and value in targets):
            out.append(protocol)
    return out


def protocol_stats(items: list[UserProtocol]) -> dict[str, Any]:
    total = len(items)
    return {
        "total": total,
        "pending": sum(1 for p in items if p.status == "PENDING"),
        "inProgress": sum(1 for p in items if p.status == "IN_PROGRESS"),
        "completed": sum(1 for p in items if p.status == "COMPLETED"),
        "averageProgress": round(sum(p.progress for p in items) / total) if total else 0,
    }


def user_protocols(db: Session, user: User) -> list[UserProtocol]:
    return list(db.execute(select(UserProtocol).where(UserProtocol.user_id == user.id)).scalars().all())


def list_user_protocols(
    db: Session,
    user: User,
    *,
    status: str | None = None,
    search: str | None = None,
) -> tuple[list[UserProtocol], dict[str, Any]]:
    stmt = select(UserProtocol).join(Protocol, UserProtocol.protocol_id == Protocol.id).where(
        UserProtocol.user_id == user.id
    )
    if status:
        stmt = stmt.where(UserProtocol.status == status.upper())
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(Protocol.title.ilike(pattern), Protocol.description.ilike(pattern)))
    items = list(db.execute(stmt).scalars().all())
    items.sort(key=lambda p: (p.assigned_at, p.id), reverse=True)
    items.sort(key=lambda p: _status_rank(p.status))
    return items, protocol_stats(user_protocols(db, user))


def get_user_protocol(db: Session, user: User, user_protocol_id: int) -> UserProtocol | None:
    return (
        db.execute(
            select(UserProtocol).where(UserProtocol.id == user_protocol_id, UserProtocol.user_id == user.id)
        )
        .scalars()
        .first()
    )


def assign_protocol(db: Session, user: User, protocol: Protocol) -> tuple[UserProtocol, bool]:
    existing = (
        db.execute(
            select(UserProtocol).where(UserProtocol.user_id == user.id, UserProtocol.protocol_id == protocol.id)
        )
        .scalars()
        .first()
    )
    if existing is not None:
        return existing, False
    item = UserProtocol(user_id=user.id, protocol_id=protocol.id, status="PENDING", progress=0)
    db.add(item)
    db.flush()
    return item, True


def update_user_protocol(db: Session, item: UserProtocol, data: ProtocolUpdateIn) -> UserProtocol:
    """Apply a status/progress update.

    Progress is clamped to 0..100. Reaching 100, or setting COMPLETED, completes the
    protocol with progress 100. Start and completion timestamps are set once.
    """
    now = datetime.utcnow()
    if data.progress is not None:
        item.progress = max(0, min(100, int(data.progress)))
    if data.status:
        item.status = data.status
    if data.notes is not None:
        item.notes = data.notes
    if data.customizations is not None:
        item.customizations_json = to_json(data.customizations)

    reached_full = data.progress is not None and item.progress >= 100
    if reached_full or item.status == "COMPLETED":
        item.status = "COMPLETED"
        item.progress = 100
        if item.completed_at is None:
            item.completed_at = now
    if item.status == "IN_PROGRESS" and item.started_at is None:
        item.started_at = now

    db.commit()
    db.refresh(item)
    return item
