from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from legalrisk.core.vocab import IMPACTS, LIKELIHOODS

from app.db import get_db
from app.dependencies import get_api_user, get_current_user
from app.models import User
from app.services.dashboard_service import overview, report_data
from app.services.risk_register import list_risks
from app.utils.reporting import IMPACT_LABELS, LIKELIHOOD_LABELS, PRIORITY_LABELS, STATUS_LABELS
from app.utils.serialize import risk_out

router = APIRouter(tags=["dashboard"])


@router.get("/")
def root(request: Request):
    if request.session.get("user_id"):
        return RedirectResponse(url="/dashboard", status_code=302)
    return RedirectResponse(url="/login", status_code=302)


@router.get("/api/dashboard/overview")
def api_dashboard_overview(db: Session = Depends(get_db), user: User = Depends(get_api_user)):
    return overview(db, user)


@router.get("/dashboard")
def dashboard(
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    data = overview(db, user)
    report = report_data(db, user)
    matrix_rows = []
    if report["hasData"]:
        cells = {(c["likelihood"], c["impact"]): c for c in report["riskMatrix"]}
        for likelihood in reversed(LIKELIHOODS):
            matrix_rows.append(
                {
                    "label": LIKELIHOOD_LABELS[likelihood],
                    "cells": [cells[(likelihood, impact)] for impact in IMPACTS],
                }
            )
    return request.app.state.templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "user": user,
            "data": data,
            "matrix_rows": matrix_rows,
            "impact_labels": [IMPACT_LABELS[i] for i in IMPACTS],
            "priority_labels": PRIORITY_LABELS,
            "status_labels": STATUS_LABELS,
        },
    )


@router.get("/dashboard/risks")
def dashboard_risks(
    request: Request,
    priority: str = Query(default=""),
    status: str = Query(default=""),
    search: str = Query(default=""),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    register, risks, stats = list_risks(
        db,
        user,
        priority=priority or None,
        status=status or None,
        search=search or None,
    )
    return request.app.state.templates.TemplateResponse(
        request,
        "risks.html",
        {
            "user": user,
            "register": register,
            "risks": [risk_out(r) for r in risks],
            "stats": stats,
            "filters": {"priority": priority, "status": status, "search": search},
            "priority_labels": PRIORITY_LABELS,
            "status_labels": STATUS_LABELS,
            "likelihood_labels": LIKELIHOOD_LABELS,
            "impact_labels": IMPACT_LABELS,
        },
    )
