from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import ReportExport, User
from app.services.dashboard_service import report_data
from app.utils.excel_export import render_report_xlsx
from app.utils.reporting import export_path, render_report_pdf

logger = logging.getLogger(__name__)

RENDERERS = {"pdf": render_report_pdf, "xlsx": render_report_xlsx}
MEDIA_TYPES = {
    "pdf": "application/pdf",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


class NoReportData(Exception):
    pass


def create_export(db: Session, user: User, kind: str) -> ReportExport:
    """Render the current report to `kind` and record the generated file."""
    report = report_data(db, user)
    if not report["hasData"]:
        raise NoReportData(f"user {user.id} has no active risk register")

    register_id = report["register"]["id"]
    path = RENDERERS[kind](report, export_path(kind, register_id, kind))
    row = ReportExport(user_id=user.id, register_id=register_id, kind=kind, file_path=str(path))
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Generated %s export %s for user %s: %s", kind, row.id, user.id, path)
    return row


def list_exports(db: Session, user: User) -> list[ReportExport]:
    return list(
        db.execute(
            select(ReportExport)
            .where(ReportExport.user_id == user.id)
            .order_by(ReportExport.created_at.desc(), ReportExport.id.desc())
        )
        .scalars()
        .all()
    )


def get_export(db: Session, user: User, export_id: int) -> ReportExport | None:
    row = db.get(ReportExport, export_id)
    if row is None or row.user_id != user.id:
        return None
    return row


def export_file(row: ReportExport) -> Path | None:
    path = Path(row.file_path)
    return path if path.exists() else None
