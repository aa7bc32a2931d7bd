from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import get_api_user
from app.models import User
from app.schemas import AnalyzeRiskIn, ChatIn, RiskRefIn, SuggestRisksIn
from app.services.risk_ai_service import RiskAIService, UserContext, get_risk_ai_service
from app.services.risk_register import get_user_risk

router = APIRouter(prefix="/api/ai", tags=["ai"])

PROFILE_REQUIRED = {"error": "profile_required"}

# AIServiceNotConfigured and DeepSeekError raised below are mapped to 503/502 in create_app().


@router.post("/suggest-risks")
def api_suggest_risks(
    payload: SuggestRisksIn,
    user: User = Depends(get_api_user),
    ai: RiskAIService = Depends(get_risk_ai_service),
):
    context = UserContext.from_user(user)
    if context is None:
        return JSONResponse(status_code=400, content=PROFILE_REQUIRED)
    return {"risks": ai.suggest_risks(context, payload.count)}


@router.post("/analyze-risk")
def api_analyze_risk(
    payload: AnalyzeRiskIn,
    user: User = Depends(get_api_user),
    ai: RiskAIService = Depends(get_risk_ai_service),
):
    context = UserContext.from_user(user)
    if context is None:
        return JSONResponse(status_code=400, content=PROFILE_REQUIRED)
    return {"analysis": ai.analyze_risk(payload.title, payload.description, context)}


@router.post("/recommend-controls")
def api_recommend_controls(
    payload: RiskRefIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
    ai: RiskAIService = Depends(get_risk_ai_service),
):
    risk = get_user_risk(db, user, payload.risk_id)
    if risk is None:
        return JSONResponse(status_code=404, content={"error": "not_found"})
    context = UserContext.from_user(user)
    if context is None:
        return JSONResponse(status_code=400, content=PROFILE_REQUIRED)
    controls = ai.recommend_controls(risk.title, risk.description, risk.inherent_risk, context, payload.count)
    return {"controls": controls}


@router.post("/generate-treatment-plan")
def api_generate_treatment_plan(
    payload: RiskRefIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
    ai: RiskAIService = Depends(get_risk_ai_service),
):
    risk = get_user_risk(db, user, payload.risk_id)
    if risk is None:
        return JSONResponse(status_code=404, content={"error": "not_found"})
    context = UserContext.from_user(user)
    if context is None:
        return JSONResponse(status_code=400, content=PROFILE_REQUIRED)
    existing = [c.title for c in risk.controls]
    plan = ai.generate_treatment_plan(risk.title, risk.description, risk.inherent_risk, existing, context)
    return {"treatmentPlan": plan}


@router.post("/chat")
def api_chat(
    payload: ChatIn,
    user: User = Depends(get_api_user),
    ai: RiskAIService = Depends(get_risk_ai_service),
):
    context = UserContext.from_user(user)
    if context is None:
        return JSONResponse(status_code=400, content=PROFILE_REQUIRED)
    history = [m.model_dump() for m in payload.history]
    return {"answer": ai.chat(payload.question, context, history)}
