from __future__ import annotations

from io import BytesIO

from openpyxl import load_workbook

from conftest import complete_business_wizard, create_risk, signup


def _catalog_id(client, code: str) -> int:
    catalog = client.get("/api/protocols/catalog").json()["protocols"]
    return next(p["id"] for p in catalog if p["code"] == code)


def test_catalog_is_sorted_by_priority(client) -> None:
    signup(client)
    catalog = client.get("/api/protocols/catalog").json()["protocols"]
    assert catalog[0]["priority"] == "CRITICAL"
    assert catalog[0]["content"]["steps"]
    priorities = [p["priority"] for p in catalog]
    order = ["CRITICAL", "HIGH", "MEDIUM", "LOW"]
    assert priorities == sorted(priorities, key=order.index)


def test_assign_and_progress_protocol(client) -> None:
    signup(client)
    protocol_id = _catalog_id(client, "manual_empleados")

    first = client.post("/api/protocols", json={"protocolId": protocol_id})
    assert first.status_code == 201
    assert first.json()["created"] is True
    again = client.post("/api/protocols", json={"protocolId": protocol_id})
    assert again.status_code == 200
    assert again.json()["created"] is False

    assert client.post("/api/protocols", json={"protocolId": 99999}).status_code == 404

    item_id = first.json()["protocol"]["id"]
    started = client.patch(f"/api/protocols/{item_id}", json={"status": "IN_PROGRESS", "progress": 40})
    body = started.json()["protocol"]
    assert body["status"] == "IN_PROGRESS"
    assert body["progress"] == 40
    assert body["startedAt"] is not None
    assert body["protocol"]["content"]["steps"]
    started_at = body["startedAt"]

    resumed = client.patch(f"/api/protocols/{item_id}", json={"status": "IN_PROGRESS", "progress": 60})
    assert resumed.json()["protocol"]["startedAt"] == started_at
    assert resumed.json()["protocol"]["progress"] == 60

    clamped = client.patch(f"/api/protocols/{item_id}", json={"progress": 250})
    body = clamped.json()["protocol"]
    assert body["progress"] == 100
    assert body["status"] == "COMPLETED"
    assert body["completedAt"] is not None
    completed_at = body["completedAt"]

    repeated = client.patch(f"/api/protocols/{item_id}", json={"status": "COMPLETED"})
    body = repeated.json()["protocol"]
    assert body["completedAt"] == completed_at
    assert body["startedAt"] == started_at
    assert body["progress"] == 100

    listing = client.get("/api/protocols").json()
    assert listing["stats"]["completed"] == 1
    assert listing["stats"]["averageProgress"] == 100

    client.post("/api/auth/logout")
    signup(client, email="other@example.com")
    assert client.get(f"/api/protocols/{item_id}").status_code == 404


def test_reports_without_register(client) -> None:
    signup(client)
    report = client.get("/api/reports").json()
    assert report["hasData"] is False
    pdf = client.get("/api/reports/export/pdf")
    assert pdf.status_code == 404
    assert pdf.json()["error"] == "not_found"


def test_report_aggregates_and_exports(client) -> None:
    signup(client)
    complete_business_wizard(client)
    risk = create_risk(client)
    create_risk(client, title="Inspección AFIP", category="Fiscal", likelihood="POSSIBLE", impact="MODERATE")
    client.post(
        f"/api/risks/{risk['id']}/controls",
        json={
            "title": "Seguro de ciberriesgo",
            "description": "Póliza que cubre incidentes de seguridad",
            "type": "CORRECTIVE",
            "category": "LEGAL",
            "controlStrength": "STRONG",
            "status": "OPERATIONAL",
        },
    )

    report = client.get("/api/reports").json()
    assert report["hasData"] is True
    assert report["summary"]["totalRisks"] == 2
    assert report["summary"]["averageInherentRisk"] == 12.5
    assert report["summary"]["averageResidualRisk"] == 13.0
    assert report["priorityDistribution"] == {"CRITICAL": 1, "HIGH": 0, "MEDIUM": 1, "LOW": 0}
    assert report["categoryDistribution"] == {"Datos": 1, "Fiscal": 1}
    assert report["controlEffectiveness"]["percentage"] == 100
    assert len(report["riskMatrix"]) == 25
    assert sum(cell["count"] for cell in report["riskMatrix"]) == 2
    assert report["topRisks"][0]["id"] == risk["id"]

    overview = client.get("/api/dashboard/overview").json()
    assert overview["hasRegister"] is True
    assert overview["summary"]["criticalRisks"] == 1
    assert overview["summary"]["implementedControls"] == 1

    pdf = client.get("/api/reports/export/pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")

    xlsx = client.get("/api/reports/export/xlsx")
    assert xlsx.status_code == 200
    workbook = load_workbook(BytesIO(xlsx.content))
    assert workbook.sheetnames[0] == "Resumen"
    assert "Matriz 5x5" in workbook.sheetnames

    exports = client.get("/api/reports/exports").json()["exports"]
    assert [e["kind"] for e in exports] == ["xlsx", "pdf"]
    download = client.get(exports[1]["downloadUrl"])
    assert download.status_code == 200
    assert download.content.startswith(b"%PDF")

    html = client.get("/dashboard")
    assert html.status_code == 200
    assert "Matriz de Riesgos 5x5" in html.text
    risks_page = client.get("/dashboard/risks", params={"priority": "CRITICAL"})
    assert risks_page.status_code == 200
    assert "Filtración de datos de clientes" in risks_page.text

    client.post("/api/auth/logout")
    signup(client, email="other@example.com")
    assert client.get(exports[0]["downloadUrl"]).status_code == 404
