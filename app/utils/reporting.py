from __future__ import annotations

from datetime import datetime
from html import escape
from pathlib import Path
from typing import Any

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from legalrisk.core.vocab import IMPACTS, LIKELIHOODS

from app.config import get_settings

PRIORITY_LABELS = {"CRITICAL": "Críticos", "HIGH": "Altos", "MEDIUM": "Medios", "LOW": "Bajos"}
STATUS_LABELS = {
    "IDENTIFIED": "Identificado",
    "ANALYZING": "En análisis",
    "EVALUATED": "Evaluado",
    "TREATING": "En tratamiento",
    "MITIGATING": "Mitigando",
    "MONITORING": "Monitoreo",
    "CLOSED": "Cerrado",
}
LIKELIHOOD_LABELS = {
    "RARE": "Raro",
    "UNLIKELY": "Improbable",
    "POSSIBLE": "Posible",
    "LIKELY": "Probable",
    "ALMOST_CERTAIN": "Casi seguro",
}
IMPACT_LABELS = {
    "INSIGNIFICANT": "Insignificante",
    "MINOR": "Menor",
    "MODERATE": "Moderado",
    "MAJOR": "Mayor",
    "CATASTROPHIC": "Catastrófico",
}
LEVEL_COLORS = {
    "low": colors.HexColor("#DCFCE7"),
    "medium": colors.HexColor("#FEF9C3"),
    "high": colors.HexColor("#FFEDD5"),
    "critical": colors.HexColor("#FEE2E2"),
}

_HEADER_STYLE = [
    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#111827")),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
    ("BACKGROUND", (0, 1), (-1, -1), colors.HexColor("#F8FAFC")),
    ("VALIGN", (0, 0), (-1, -1), "TOP"),
]


def export_dir() -> Path:
    path = get_settings().runtime_dir / "exports"
    path.mkdir(parents=True, exist_ok=True)
    return path


def export_path(kind: str, register_id: int | None, suffix: str) -> Path:
    stamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S_%f")
    return export_dir() / f"reporte_{kind}_{register_id or 0}_{stamp}.{suffix}"


def _pdf_text(value: Any) -> str:
    return escape(str(value if value is not None else ""))


def _table(rows: list[list[Any]], col_widths: list[int] | None = None) -> Table:
    table = Table(rows, hAlign="LEFT", colWidths=col_widths)
    table.setStyle(TableStyle(_HEADER_STYLE))
    return table


def summary_rows(report: dict[str, Any]) -> list[list[str]]:
    summary = report["summary"]
    return [
        ["Métrica", "Valor"],
        ["Total de Riesgos", str(summary["totalRisks"])],
        ["Riesgo Inherente Promedio", f"{summary['averageInherentRisk']}/25"],
        ["Riesgo Residual Promedio", f"{summary['averageResidualRisk']}/25"],
        ["Reducción de Riesgo", f"{summary['riskReduction']}%"],
    ]


def matrix_rows(report: dict[str, Any]) -> list[list[str]]:
    """Header row of impacts, then one row per likelihood (highest first) with cell counts."""
    cells = {(c["likelihood"], c["impact"]): c for c in report["riskMatrix"]}
    rows = [["Probabilidad / Impacto"] + [IMPACT_LABELS[i] for i in IMPACTS]]
    for likelihood in reversed(LIKELIHOODS):
        rows.append(
            [LIKELIHOOD_LABELS[likelihood]]
            + [str(cells[(likelihood, impact)]["count"]) for impact in IMPACTS]
        )
    return rows


def _matrix_table(report: dict[str, Any]) -> Table:
    cells = {(c["likelihood"], c["impact"]): c for c in report["riskMatrix"]}
    table = Table(matrix_rows(report), hAlign="LEFT", colWidths=[110, 78, 78, 78, 78, 78])
    style = list(_HEADER_STYLE)
    for row_idx, likelihood in enumerate(reversed(LIKELIHOODS), start=1):
        for col_idx, impact in enumerate(IMPACTS, start=1):
            level = cells[(likelihood, impact)]["level"]
            style.append(("BACKGROUND", (col_idx, row_idx), (col_idx, row_idx), LEVEL_COLORS[level]))
    style.append(("ALIGN", (1, 1), (-1, -1), "CENTER"))
    table.setStyle(TableStyle(style))
    return table


def render_report_pdf(report: dict[str, Any], path: Path) -> Path:
    doc = SimpleDocTemplate(str(path), pagesize=A4, leftMargin=28, rightMargin=28, topMargin=24)
    styles = getSampleStyleSheet()
    register = report.get("register") or {}

    story = []
    story.append(Paragraph("Reporte de Análisis de Riesgos", styles["Title"]))
    story.append(Paragraph(_pdf_text(register.get("title", "")), styles["Normal"]))
    story.append(Paragraph(f"Generado: {_pdf_text(report.get('generatedAt'))} UTC", styles["Normal"]))
    story.append(Spacer(1, 10))

    story.append(Paragraph("Resumen Ejecutivo", styles["Heading2"]))
    story.append(_table(summary_rows(report)))
    story.append(Spacer(1, 10))

    story.append(Paragraph("Distribución por Prioridad", styles["Heading2"]))
    story.append(
        _table(
            [["Prioridad", "Cantidad"]]
            + [[PRIORITY_LABELS.get(k, k), str(v)] for k, v in report["priorityDistribution"].items()]
        )
    )
    story.append(Spacer(1, 10))

    story.append(Paragraph("Distribución por Estado", styles["Heading2"]))
    story.append(
        _table(
            [["Estado", "Cantidad"]]
            + [[STATUS_LABELS.get(k, k), str(v)] for k, v in report["statusDistribution"].items()]
        )
    )
    story.append(Spacer(1, 10))

    story.append(Paragraph("Top 10 Riesgos Principales", styles["Heading2"]))
    top_rows: list[list[Any]] = [["#", "Riesgo", "Categoría", "Prioridad", "Inherente", "Controles"]]
    for idx, risk in enumerate(report["topRisks"], start=1):
        top_rows.append(
            [
                str(idx),
                Paragraph(_pdf_text(risk["title"]), styles["BodyText"]),
                _pdf_text(risk["category"]),
                PRIORITY_LABELS.get(risk["priority"], risk["priority"]),
                f"{risk['inherentRisk']}/25",
                f"{risk['controlsImplemented']}/{risk['controlsCount']}",
            ]
        )
    story.append(_table(top_rows, col_widths=[22, 200, 100, 64, 60, 60]))
    story.append(Spacer(1, 10))

    effectiveness = report["controlEffectiveness"]
    story.append(Paragraph("Efectividad de Controles", styles["Heading2"]))
    story.append(
        _table(
            [
                ["Métrica", "Valor"],
                ["Total de Controles", str(effectiveness["total"])],
                ["Controles Implementados", str(effectiveness["effective"])],
                ["Porcentaje de Efectividad", f"{effectiveness['percentage']}%"],
            ]
        )
    )
    story.append(Spacer(1, 10))

    protocols = report["protocolStats"]
    story.append(Paragraph("Estadísticas de Protocolos", styles["Heading2"]))
    story.append(
        _table(
            [
                ["Métrica", "Valor"],
                ["Total de Protocolos", str(protocols["total"])],
                ["Completados", str(protocols["completed"])],
                ["En Progreso", str(protocols["inProgress"])],
                ["Progreso Promedio", f"{protocols['averageProgress']}%"],
            ]
        )
    )
    story.append(Spacer(1, 10))

    story.append(Paragraph("Matriz de Riesgos 5x5", styles["Heading2"]))
    story.append(_matrix_table(report))

    doc.build(story)
    return path
