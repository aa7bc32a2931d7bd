from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import get_api_user
from app.models import User
from app.schemas import RiskCreateIn, RiskUpdateIn
from app.services.risk_register import create_risk, delete_risk, get_user_risk, list_risks, update_risk
from app.utils.serialize import risk_out

router = APIRouter(prefix="/api/risks", tags=["risks"])


@router.get("")
def api_list_risks(
    priority: str = Query(default=""),
    status: str = Query(default=""),
    category: str = Query(default=""),
    search: str = Query(default=""),
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    register, risks, stats = list_risks(
        db,
        user,
        priority=priority or None,
        status=status or None,
        category=category or None,
        search=search or None,
    )
    return {
        "risks": [risk_out(r) for r in risks],
        "stats": stats,
        "registerId": register.id if register else None,
    }


@router.post("")
def api_create_risk(
    payload: RiskCreateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    risk = create_risk(db, user, payload)
    return JSONResponse(status_code=201, content={"risk": risk_out(risk, detail=True)})


@router.get("/{risk_id}")
def api_get_risk(risk_id: int, db: Session = Depends(get_db), user: User = Depends(get_api_user)):
    risk = get_user_risk(db, user, risk_id)
    if risk is None:
        return JSONResponse(status_code=404, content={"error": "not_found"})
    return {"risk": risk_out(risk, detail=True)}


@router.patch("/{risk_id}")
def api_update_risk(
    risk_id: int,
    payload: RiskUpdateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    risk = get_user_risk(db, user, risk_id)
    if risk is None:
        return JSONResponse(status_code=404, content={"error": "not_found"})
    risk = update_risk(db, risk, payload)
    return {"risk": risk_out(risk, detail=True)}


@router.delete("/{risk_id}")
def api_delete_risk(risk_id: int, db: Session = Depends(get_db), user: User = Depends(get_api_user)):
    risk = get_user_risk(db, user, risk_id)
    if risk is None:
        return JSONResponse(status_code=404, content={"error": "not_found"})
    delete_risk(db, risk)
    return {"success": True}
