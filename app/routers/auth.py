import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db import get_db
from app.models import User
from app.schemas import LoginIn, SignupIn
from app.security import hash_password, password_is_acceptable, verify_password
from app.utils.serialize import user_out

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email.strip().lower()).limit(1)).scalars().first()


def _authenticate(db: Session, email: str, password: str) -> User | None:
    user = find_user_by_email(db, email)
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        return None
    return user


def _start_session(request: Request, user: User) -> None:
    request.session["user_id"] = user.id
    request.session["email"] = user.email


@router.get("/login")
def login_page(request: Request):
    if request.session.get("user_id"):
        return RedirectResponse(url="/dashboard", status_code=302)
    return request.app.state.templates.TemplateResponse(
        request,
        "login.html",
        {"error": None},
    )


@router.post("/login")
def login_submit(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    user = _authenticate(db, email, password)
    if user is None:
        return request.app.state.templates.TemplateResponse(
            request,
            "login.html",
            {"error": "Email o contraseña incorrectos"},
            status_code=400,
        )
    _start_session(request, user)
    return RedirectResponse(url="/dashboard", status_code=302)


@router.get("/logout")
def logout(request: Request):
    request.session.clear()
    return RedirectResponse(url="/login", status_code=302)


@router.post("/api/auth/signup")
def api_signup(payload: SignupIn, request: Request, db: Session = Depends(get_db)):
    name = payload.name.strip()
    email = payload.email.strip().lower()
    if not name or not email or not payload.password:
        return JSONResponse(status_code=400, content={"error": "missing_fields"})
    if not password_is_acceptable(payload.password):
        return JSONResponse(status_code=400, content={"error": "password_too_short"})
    if find_user_by_email(db, email) is not None:
        return JSONResponse(status_code=400, content={"error": "email_taken"})

    user = User(email=email, name=name, password_hash=hash_password(payload.password), role="USER")
    db.add(user)
    db.commit()
    db.refresh(user)
    _start_session(request, user)
    logger.info("Registered user %s", user.id)
    return JSONResponse(status_code=201, content={"user": user_out(user)})


@router.post("/api/auth/login")
def api_login(payload: LoginIn, request: Request, db: Session = Depends(get_db)):
    user = _authenticate(db, payload.email, payload.password)
    if user is None:
        return JSONResponse(status_code=401, content={"error": "invalid_credentials"})
    _start_session(request, user)
    return {"user": user_out(user)}


@router.post("/api/auth/logout")
def api_logout(request: Request):
    request.session.clear()
    return {"success": True}
