from __future__ import annotations

from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from legalrisk.core.vocab import IMPACTS, LIKELIHOODS

from app.utils.reporting import IMPACT_LABELS, LIKELIHOOD_LABELS, PRIORITY_LABELS, STATUS_LABELS

SHEET_TITLES = (
    "Resumen",
    "Por Prioridad",
    "Por Estado",
    "Por Categoría",
    "Top 10 Riesgos",
    "Matriz 5x5",
    "Detalle de Riesgos",
)

TITLE_FONT = Font(bold=True, size=14, color="111827")
SECTION_FONT = Font(bold=True, size=11)
HEADER_FONT = Font(bold=True, color="FFFFFF", size=11)
HEADER_FILL = PatternFill(start_color="111827", end_color="111827", fill_type="solid")
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center", wrap_text=True)
CELL_ALIGNMENT = Alignment(horizontal="left", vertical="center", wrap_text=True)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
LEVEL_FILLS = {
    "low": PatternFill(start_color="DCFCE7", end_color="DCFCE7", fill_type="solid"),
    "medium": PatternFill(start_color="FEF9C3", end_color="FEF9C3", fill_type="solid"),
    "high": PatternFill(start_color="FFEDD5", end_color="FFEDD5", fill_type="solid"),
    "critical": PatternFill(start_color="FEE2E2", end_color="FEE2E2", fill_type="solid"),
}


def _write_title(ws, title: str, width: int) -> None:
    ws["A1"] = title
    ws["A1"].font = TITLE_FONT
    if width > 1:
        ws.merge_cells(f"A1:{get_column_letter(width)}1")


def _write_table(ws, start_row: int, headers: list[str], rows: list[list[Any]]) -> int:
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=start_row, column=col, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
        cell.border = THIN_BORDER
    row_idx = start_row
    for row_idx, row in enumerate(rows, start_row + 1):
        for col, value in enumerate(row, 1):
            cell = ws.cell(row=row_idx, column=col, value=value)
            cell.alignment = CELL_ALIGNMENT
            cell.border = THIN_BORDER
    return row_idx + 1


def _set_widths(ws, widths: list[int]) -> None:
    for idx, width in enumerate(widths, 1):
        ws.column_dimensions[get_column_letter(idx)].width = width


def _summary_sheet(ws, report: dict[str, Any]) -> None:
    register = report.get("register") or {}
    summary = report["summary"]
    effectiveness = report["controlEffectiveness"]
    protocols = report["protocolStats"]

    _write_title(ws, "REPORTE DE ANÁLISIS DE RIESGOS", 2)
    ws["A3"] = "Registro:"
    ws["B3"] = register.get("title", "")
    ws["A4"] = "Generado:"
    ws["B4"] = report.get("generatedAt", "")

    ws["A6"] = "RESUMEN EJECUTIVO"
    ws["A6"].font = SECTION_FONT
    row = _write_table(
        ws,
        7,
        ["Métrica", "Valor"],
        [
            ["Total de Riesgos", summary["totalRisks"]],
            ["Riesgo Inherente Promedio", f"{summary['averageInherentRisk']}/25"],
            ["Riesgo Residual Promedio", f"{summary['averageResidualRisk']}/25"],
            ["Reducción de Riesgo", f"{summary['riskReduction']}%"],
        ],
    )

    ws.cell(row=row + 1, column=1, value="EFECTIVIDAD DE CONTROLES").font = SECTION_FONT
    row = _write_table(
        ws,
        row + 2,
        ["Métrica", "Valor"],
        [
            ["Total de Controles", effectiveness["total"]],
            ["Controles Implementados", effectiveness["effective"]],
            ["Porcentaje de Efectividad", f"{effectiveness['percentage']}%"],
        ],
    )

    ws.cell(row=row + 1, column=1, value="ESTADÍSTICAS DE PROTOCOLOS").font = SECTION_FONT
    _write_table(
        ws,
        row + 2,
        ["Métrica", "Valor"],
        [
            ["Total de Protocolos", protocols["total"]],
            ["Completados", protocols["completed"]],
            ["En Progreso", protocols["inProgress"]],
            ["Progreso Promedio", f"{protocols['averageProgress']}%"],
        ],
    )
    _set_widths(ws, [32, 40])


def _distribution_sheet(ws, title: str, header: str, items: dict[str, int], labels: dict[str, str]) -> None:
    _write_title(ws, title, 2)
    total = sum(items.values())
    rows = [[labels.get(k, k), v] for k, v in items.items()]
    rows.append(["Total", total])
    _write_table(ws, 3, [header, "Cantidad"], rows)
    _set_widths(ws, [30, 15])


def _top_sheet(ws, report: dict[str, Any]) -> None:
    headers = [
        "#",
        "Riesgo",
        "Categoría",
        "Prioridad",
        "Riesgo Inherente",
        "Riesgo Residual",
        "Estado",
        "Controles Total",
        "Controles Implementados",
    ]
    _write_title(ws, "TOP 10 RIESGOS PRINCIPALES", len(headers))
    rows = [
        [
            idx,
            r["title"],
            r["category"],
            PRIORITY_LABELS.get(r["priority"], r["priority"]),
            r["inherentRisk"],
            r["residualRisk"] if r["residualRisk"] is not None else "N/A",
            STATUS_LABELS.get(r["status"], r["status"]),
            r["controlsCount"],
            r["controlsImplemented"],
        ]
        for idx, r in enumerate(report["topRisks"], start=1)
    ]
    _write_table(ws, 3, headers, rows)
    _set_widths(ws, [5, 40, 20, 12, 16, 16, 16, 15, 22])


def _matrix_sheet(ws, report: dict[str, Any]) -> None:
    _write_title(ws, "MATRIZ DE RIESGOS 5x5", 6)
    cells = {(c["likelihood"], c["impact"]): c for c in report["riskMatrix"]}
    rows = []
    for likelihood in reversed(LIKELIHOODS):
        rows.append([LIKELIHOOD_LABELS[likelihood]] + [cells[(likelihood, i)]["count"] for i in IMPACTS])
    _write_table(ws, 3, ["Probabilidad / Impacto"] + [IMPACT_LABELS[i] for i in IMPACTS], rows)
    for row_offset, likelihood in enumerate(reversed(LIKELIHOODS), start=4):
        for col, impact in enumerate(IMPACTS, start=2):
            cell = ws.cell(row=row_offset, column=col)
            cell.fill = LEVEL_FILLS[cells[(likelihood, impact)]["level"]]
            cell.alignment = HEADER_ALIGNMENT
    _set_widths(ws, [24, 16, 16, 16, 16, 16])


def _detail_sheet(ws, report: dict[str, Any]) -> None:
    headers = [
        "ID",
        "Riesgo",
        "Descripción",
        "Categoría",
        "Probabilidad",
        "Impacto",
        "Riesgo Inherente",
        "Riesgo Residual",
        "Prioridad",
        "Estado",
        "Controles",
    ]
    _write_title(ws, "DETALLE DE RIESGOS", len(headers))
    rows = [
        [
            r["id"],
            r["title"],
            r.get("description", ""),
            r["category"],
            LIKELIHOOD_LABELS.get(r["likelihood"], r["likelihood"]),
            IMPACT_LABELS.get(r["impact"], r["impact"]),
            r["inherentRisk"],
            r["residualRisk"] if r["residualRisk"] is not None else "N/A",
            PRIORITY_LABELS.get(r["priority"], r["priority"]),
            STATUS_LABELS.get(r["status"], r["status"]),
            f"{r['controlsImplemented']}/{r['controlsCount']}",
        ]
        for r in report.get("risks", [])
    ]
    _write_table(ws, 3, headers, rows)
    _set_widths(ws, [6, 36, 50, 18, 14, 14, 16, 16, 12, 16, 12])


def render_report_xlsx(report: dict[str, Any], path: Path) -> Path:
    wb = Workbook()
    summary_ws = wb.active
    summary_ws.title = SHEET_TITLES[0]
    _summary_sheet(summary_ws, report)
    _distribution_sheet(
        wb.create_sheet(SHEET_TITLES[1]),
        "DISTRIBUCIÓN POR PRIORIDAD",
        "Prioridad",
        report["priorityDistribution"],
        PRIORITY_LABELS,
    )
    _distribution_sheet(
        wb.create_sheet(SHEET_TITLES[2]),
        "DISTRIBUCIÓN POR ESTADO",
        "Estado",
        report["statusDistribution"],
        STATUS_LABELS,
    )
    _distribution_sheet(
        wb.create_sheet(SHEET_TITLES[3]),
        "DISTRIBUCIÓN POR CATEGORÍA",
        "Categoría",
        report["categoryDistribution"],
        {},
    )
    _top_sheet(wb.create_sheet(SHEET_TITLES[4]), report)
    _matrix_sheet(wb.create_sheet(SHEET_TITLES[5]), report)
    _detail_sheet(wb.create_sheet(SHEET_TITLES[6]), report)
    wb.save(str(path))
    return path
