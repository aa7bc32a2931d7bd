from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from legalrisk.core.scoring import is_effective_control
from legalrisk.core.vocab import CONTROL_STATUSES

from app.models import ControlReview, Protocol, RiskControl, RiskEvent
from app.schemas import ControlCreateIn, ControlReviewIn, ControlUpdateIn
from app.services.risk_register import recalculate_residual_risk

logger = logging.getLogger(__name__)


class UnknownProtocolError(ValueError):
    pass


def _status_rank(status: str) -> int:
    try:
        return CONTROL_STATUSES.index(status)
    except ValueError:
        return len(CONTROL_STATUSES)


def list_controls(risk: RiskEvent) -> list[RiskControl]:
    controls = sorted(risk.controls, key=lambda c: (c.created_at, c.id), reverse=True)
    return sorted(controls, key=lambda c: _status_rank(c.status))


def get_control(db: Session, risk: RiskEvent, control_id: int) -> RiskControl | None:
    return (
        db.execute(
            select(RiskControl).where(RiskControl.id == control_id, RiskControl.risk_event_id == risk.id)
        )
        .scalars()
        .first()
    )


def _check_protocol(db: Session, protocol_id: int | None) -> None:
    if protocol_id is not None and db.get(Protocol, protocol_id) is None:
        raise UnknownProtocolError(f"protocol {protocol_id} does not exist")


def create_control(db: Session, risk: RiskEvent, data: ControlCreateIn) -> RiskControl:
    _check_protocol(db, data.protocol_id)
    control = RiskControl(
        title=data.title.strip(),
        description=data.description,
        type=data.type,
        category=data.category,
        control_strength=data.control_strength,
        status=data.status,
        owner=data.owner,
        review_frequency=data.review_frequency,
        estimated_cost=data.estimated_cost,
        estimated_effort=data.estimated_effort,
        protocol_id=data.protocol_id,
        is_custom=data.protocol_id is None,
        implementation_date=datetime.utcnow() if is_effective_control(data.status) else None,
    )
    risk.controls.append(control)
    recalculate_residual_risk(risk)
    db.commit()
    db.refresh(control)
    return control


def update_control(db: Session, risk: RiskEvent, control: RiskControl, data: ControlUpdateIn) -> RiskControl:
    changes = data.model_dump(exclude_unset=True)
    if "protocol_id" in changes:
        _check_protocol(db, changes["protocol_id"])
        control.protocol_id = changes["protocol_id"]
        control.is_custom = changes["protocol_id"] is None
    for key in (
        "title",
        "description",
        "type",
        "category",
        "control_strength",
        "status",
        "owner",
        "review_frequency",
        "estimated_cost",
        "estimated_effort",
    ):
        if key in changes and (changes[key] is not None or key in {"owner", "estimated_cost"}):
            setattr(control, key, changes[key])
    if is_effective_control(control.status) and control.implementation_date is None:
        control.implementation_date = datetime.utcnow()

    recalculate_residual_risk(risk)
    db.commit()
    db.refresh(control)
    return control


def delete_control(db: Session, risk: RiskEvent, control: RiskControl) -> None:
    risk.controls.remove(control)
    recalculate_residual_risk(risk)
    db.commit()


def add_review(db: Session, control: RiskControl, data: ControlReviewIn) -> ControlReview:
    review = ControlReview(
        effectiveness=data.effectiveness,
        notes=data.notes,
        reviewer=data.reviewer,
        review_date=datetime.utcnow(),
    )
    control.reviews.append(review)
    control.last_reviewed_at = review.review_date
    db.commit()
    db.refresh(review)
    logger.info("Recorded review %s for control %s", review.id, control.id)
    return review
