from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.models import User


class ApiAuthError(Exception):
    """Raised by API dependencies; rendered as a 401 JSON body."""


def _session_user(request: Request, db: Session) -> User | None:
    user_id = request.session.get("user_id")
    if not user_id:
        return None
    user = db.get(User, user_id)
    if not user or not user.is_active:
        request.session.clear()
        return None
    return user


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    user = _session_user(request, db)
    if user is None:
        raise HTTPException(status_code=status.HTTP_302_FOUND, headers={"Location": "/login"})
    return user


def get_api_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    user = _session_user(request, db)
    if user is None:
        raise ApiAuthError()
    return user


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User | None:
    return _session_user(request, db)
