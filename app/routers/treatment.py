from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import get_api_user
from app.models import User
from app.schemas import TreatmentCreateIn, TreatmentUpdateIn
from app.services.risk_register import get_user_risk
from app.services.treatment_service import TreatmentPlanExists, create_plan, delete_plan, get_plan, update_plan
from app.utils.serialize import treatment_plan_out

router = APIRouter(prefix="/api/risks/{risk_id}/treatment", tags=["treatment"])

NOT_FOUND = {"error": "not_found"}


@router.get("")
def api_get_treatment(risk_id: int, db: Session = Depends(get_db), user: User = Depends(get_api_user)):
    risk = get_user_risk(db, user, risk_id)
    if risk is None:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    return {"treatmentPlan": treatment_plan_out(risk.treatment_plan)}


@router.post("")
def api_create_treatment(
    risk_id: int,
    payload: TreatmentCreateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    risk = get_user_risk(db, user, risk_id)
    if risk is None:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    try:
        plan = create_plan(db, risk, payload)
    except TreatmentPlanExists:
        return JSONResponse(status_code=409, content={"error": "treatment_plan_exists"})
    return JSONResponse(status_code=201, content={"treatmentPlan": treatment_plan_out(plan)})


@router.get("/{plan_id}")
def api_get_treatment_plan(
    risk_id: int,
    plan_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    risk = get_user_risk(db, user, risk_id)
    plan = get_plan(risk, plan_id) if risk is not None else None
    if plan is None:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    return {"treatmentPlan": treatment_plan_out(plan)}


@router.put("/{plan_id}")
def api_update_treatment_plan(
    risk_id: int,
    plan_id: int,
    payload: TreatmentUpdateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    risk = get_user_risk(db, user, risk_id)
    plan = get_plan(risk, plan_id) if risk is not None else None
    if plan is None:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    plan = update_plan(db, risk, plan, payload)
    return {"treatmentPlan": treatment_plan_out(plan), "riskStatus": risk.status}


@router.delete("/{plan_id}")
def api_delete_treatment_plan(
    risk_id: int,
    plan_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    risk = get_user_risk(db, user, risk_id)
    plan = get_plan(risk, plan_id) if risk is not None else None
    if plan is None:
        return JSONResponse(status_code=404, content=NOT_FOUND)
    delete_plan(db, risk)
    return {"success": True}
