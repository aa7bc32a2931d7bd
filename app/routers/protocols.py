from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import get_api_user
from app.models import Protocol, User
from app.schemas import ProtocolAssignIn, ProtocolUpdateIn
from app.services.protocol_service import (
    assign_protocol,
    get_user_protocol,
    list_catalog,
    list_user_protocols,
    update_user_protocol,
)
from app.utils.serialize import protocol_out, user_protocol_out

router = APIRouter(prefix="/api/protocols", tags=["protocols"])


@router.get("/catalog")
def api_protocol_catalog(db: Session = Depends(get_db), user: User = Depends(get_api_user)):
    return {"protocols": [protocol_out(p) for p in list_catalog(db)]}


@router.get("")
def api_list_protocols(
    status: str = Query(default=""),
    search: str = Query(default=""),
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    items, stats = list_user_protocols(db, user, status=status or None, search=search or None)
    return {"protocols": [user_protocol_out(p) for p in items], "stats": stats}


@router.post("")
def api_assign_protocol(
    payload: ProtocolAssignIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    protocol = db.get(Protocol, payload.protocol_id)
    if protocol is None or not protocol.is_active:
        return JSONResponse(status_code=404, content={"error": "not_found"})
    item, created = assign_protocol(db, user, protocol)
    db.commit()
    db.refresh(item)
    return JSONResponse(
        status_code=201 if created else 200,
        content={"protocol": user_protocol_out(item), "created": created},
    )


@router.get("/{user_protocol_id}")
def api_get_protocol(user_protocol_id: int, db: Session = Depends(get_db), user: User = Depends(get_api_user)):
    item = get_user_protocol(db, user, user_protocol_id)
    if item is None:
        return JSONResponse(status_code=404, content={"error": "not_found"})
    return {"protocol": user_protocol_out(item, with_content=True)}


@router.patch("/{user_protocol_id}")
def api_update_protocol(
    user_protocol_id: int,
    payload: ProtocolUpdateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_api_user),
):
    item = get_user_protocol(db, user, user_protocol_id)
    if item is None:
        return JSONResponse(status_code=404, content={"error": "not_found"})
    item = update_user_protocol(db, item, payload)
    return {"protocol": user_protocol_out(item, with_content=True)}
