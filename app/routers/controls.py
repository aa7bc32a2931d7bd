from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import get_api_user
from app.models import User
from app.schemas import ControlCreateIn, ControlReviewIn, ControlUpdateIn
from app.services.controls_service import (
    UnknownProtocolError,
    add_review,
    create_control,
    delete_control,
    get_control,
    list_controls,
    update_control,
)
from app.services.risk_register import get_user_risk
from app.utils.serialize import control_out, review_out

router = APIRouter(prefix="/api/risks/{risk_id}/controls", tags=["controls"])

NOT_FOUND = {"error": "not_found"}


def _risk_summary(risk) -> dict:
    return {
        "id": risk.id,
        "inherentRisk": risk.inherent_risk,
        "residualRisk": risk.residual_risk,
        "residualLikelihood": risk.residual_likelihood,
        "residualImpact": risk.residual_impact,
    }


@router.get("")
def api_list_controls(risk_id: int, db: Session = Depends(get_db), user: User = Depends(get_api_user)):
    risk = get_user_risk(db, user, risk_id)
    if risk is None:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    return {"controls": [control_out(c) for c in list_controls(risk)]}


@router.post("")
def api_create_control(
    risk_id: int,
    payload: ControlCreateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    risk = get_user_risk(db, user, risk_id)
    if risk is None:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    try:
        control = create_control(db, risk, payload)
    except UnknownProtocolError:
        return JSONResponse(status_code=400, content={"error": "invalid_payload", "field": "protocolId"})
    return JSONResponse(
        status_code=201,
        content={"control": control_out(control), "risk": _risk_summary(risk)},
    )


@router.get("/{control_id}")
def api_get_control(
    risk_id: int,
    control_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    risk = get_user_risk(db, user, risk_id)
    control = get_control(db, risk, control_id) if risk is not None else None
    if control is None:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    return {
        "control": control_out(control) | {"reviews": [review_out(r) for r in control.reviews]},
    }


@router.put("/{control_id}")
def api_update_control(
    risk_id: int,
    control_id: int,
    payload: ControlUpdateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    risk = get_user_risk(db, user, risk_id)
    control = get_control(db, risk, control_id) if risk is not None else None
    if control is None:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    try:
        control = update_control(db, risk, control, payload)
    except UnknownProtocolError:
        return JSONResponse(status_code=400, content={"error": "invalid_payload", "field": "protocolId"})
    return {"control": control_out(control), "risk": _risk_summary(risk)}


@router.delete("/{control_id}")
def api_delete_control(
    risk_id: int,
    control_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    risk = get_user_risk(db, user, risk_id)
    control = get_control(db, risk, control_id) if risk is not None else None
    if control is None:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    delete_control(db, risk, control)
    return {"success": True, "risk": _risk_summary(risk)}


@router.post("/{control_id}/reviews")
def api_review_control(
    risk_id: int,
    control_id: int,
    payload: ControlReviewIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    risk = get_user_risk(db, user, risk_id)
    control = get_control(db, risk, control_id) if risk is not None else None
    if control is None:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    review = add_review(db, control, payload)
    return JSONResponse(status_code=201, content={"review": review_out(review)})
