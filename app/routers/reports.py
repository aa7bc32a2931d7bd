from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, JSONResponse
from sqlalchemy.orm import Session

from app.db import get_db
from app.dependencies import get_api_user
from app.models import ReportExport, User
from app.services.dashboard_service import report_data
from app.services.export_service import (
    MEDIA_TYPES,
    NoReportData,
    create_export,
    export_file,
    get_export,
    list_exports,
)
from app.utils.serialize import iso

router = APIRouter(prefix="/api/reports", tags=["reports"])


def _export_out(row: ReportExport) -> dict:
    return {
        "id": row.id,
        "kind": row.kind,
        "registerId": row.register_id,
        "fileName": Path(row.file_path).name,
        "createdAt": iso(row.created_at),
        "downloadUrl": f"/api/reports/exports/{row.id}/download",
    }


def _file_response(row: ReportExport, path: Path) -> FileResponse:
    return FileResponse(path=str(path), media_type=MEDIA_TYPES[row.kind], filename=path.name)


@router.get("")
def api_reports(db: Session = Depends(get_db), user: User = Depends(get_api_user)):
    return report_data(db, user)


def _export(kind: str, db: Session, user: User):
    try:
        row = create_export(db, user, kind)
    except NoReportData:
        return JSONResponse(status_code=404, content={"error": "not_found", "message": "No hay registro de riesgos activo"})
    return _file_response(row, Path(row.file_path))


@router.get("/export/pdf")
def api_export_pdf(db: Session = Depends(get_db), user: User = Depends(get_api_user)):
    return _export("pdf", db, user)


@router.get("/export/xlsx")
def api_export_xlsx(db: Session = Depends(get_db), user: User = Depends(get_api_user)):
    return _export("xlsx", db, user)


@router.get("/exports")
def api_list_exports(db: Session = Depends(get_db), user: User = Depends(get_api_user)):
    return {"exports": [_export_out(row) for row in list_exports(db, user)]}


@router.get("/exports/{export_id}/download")
def api_download_export(export_id: int, db: Session = Depends(get_db), user: User = Depends(get_api_user)):
    row = get_export(db, user, export_id)
    if row is None:
        return JSONResponse(status_code=404, content={"error": "not_found"})
    path = export_file(row)
    if path is None:
        return JSONResponse(status_code=404, content={"error": "not_found", "message": "file missing"})
    return _file_response(row, path)
