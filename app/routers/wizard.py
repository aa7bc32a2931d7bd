from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import get_api_user, get_optional_user
from app.models import User
from app.schemas import ScoreIn, WizardCompleteIn
from app.services.protocol_service import applicable_protocols
from app.services.wizard_service import (
    ASSESSMENT_QUESTIONS,
    activities_for,
    complete_wizard,
    score_answers,
    wizard_options,
)
from app.utils.serialize import protocol_out

router = APIRouter(prefix="/api/wizard", tags=["wizard"])


def _profile_value(profile_type: str, profession: str, business_type: str) -> tuple[str | None, JSONResponse | None]:
    kind = (profile_type or "").strip().upper()
    if not kind:
        return None, JSONResponse(status_code=400, content={"error": "missing_profile_type"})
    if kind == "PROFESSIONAL":
        if not profession:
            return None, JSONResponse(status_code=400, content={"error": "missing_fields", "field": "profession"})
        return profession.strip().upper(), None
    if kind == "BUSINESS":
        if not business_type:
            return None, JSONResponse(status_code=400, content={"error": "missing_fields", "field": "businessType"})
        return business_type.strip().upper(), None
    return None, JSONResponse(status_code=400, content={"error": "invalid_payload", "field": "profileType"})


@router.get("/questions")
def wizard_questions():
    return {"questions": ASSESSMENT_QUESTIONS, "options": wizard_options()}


@router.get("/activities")
def wizard_activities(
    profile_type: str = Query(default="", alias="profileType"),
    profession: str = Query(default=""),
    business_type: str = Query(default="", alias="businessType"),
    db: Session = Depends(get_db),
):
    value, error = _profile_value(profile_type, profession, business_type)
    if error is not None:
        return error
    return activities_for(db, profile_type.strip().upper(), value)


@router.post("/score")
def wizard_score(payload: ScoreIn):
    return score_answers(payload.answers)


@router.get("/recommended-protocols")
def recommended_protocols(
    profile_type: str = Query(default="", alias="profileType"),
    profession: str = Query(default=""),
    business_type: str = Query(default="", alias="businessType"),
    db: Session = Depends(get_db),
):
    value, error = _profile_value(profile_type, profession, business_type)
    if error is not None:
        return error
    protocols = applicable_protocols(db, profile_type.strip().upper(), value)
    return {"protocols": [protocol_out(p, with_content=False) for p in protocols]}


@router.post("/complete")
def wizard_complete(
    payload: WizardCompleteIn,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    if user is None:
        # Client keeps the data and resubmits to complete-after-signup.
        return {
            "success": True,
            "requiresAuth": True,
            "wizardData": payload.model_dump(mode="json", by_alias=True),
        }
    result = complete_wizard(db, user, payload)
    return JSONResponse(status_code=201, content={"success": True, **result})


@router.post("/complete-after-signup")
def wizard_complete_after_signup(
    payload: WizardCompleteIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    result = complete_wizard(db, user, payload)
    return JSONResponse(status_code=201, content={"success": True, **result})
