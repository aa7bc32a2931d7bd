from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import get_api_user
from app.models import User
from app.routers.auth import find_user_by_email
from app.schemas import ProfileUpdateIn
from app.security import hash_password, password_is_acceptable, verify_password
from app.utils.serialize import business_profile_out, professional_profile_out, user_out

router = APIRouter(prefix="/api/user", tags=["user"])


def _profile_payload(user: User) -> dict:
    return {
        "user": user_out(user),
        "professionalProfile": professional_profile_out(user.professional_profile),
        "businessProfile": business_profile_out(user.business_profile),
    }


@router.get("/profile")
def get_profile(user: User = Depends(get_api_user)):
    return _profile_payload(user)


@router.patch("/profile")
def update_profile(
    payload: ProfileUpdateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    if payload.email is not None:
        email = payload.email.strip().lower()
        if not email:
            return JSONResponse(status_code=400, content={"error": "missing_fields"})
        if email != user.email:
            other = find_user_by_email(db, email)
            if other is not None and other.id != user.id:
                return JSONResponse(status_code=400, content={"error": "email_taken"})
            user.email = email

    if payload.new_password:
        if not payload.current_password or not verify_password(payload.current_password, user.password_hash):
            return JSONResponse(status_code=400, content={"error": "invalid_current_password"})
        if not password_is_acceptable(payload.new_password):
            return JSONResponse(status_code=400, content={"error": "password_too_short"})
        user.password_hash = hash_password(payload.new_password)

    if payload.name is not None and payload.name.strip():
        user.name = payload.name.strip()

    db.commit()
    db.refresh(user)
    return _profile_payload(user)
